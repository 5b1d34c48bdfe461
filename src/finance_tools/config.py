"""Application-wide constants and configuration defaults.

All tuneable defaults live here so there is a single place to adjust them.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Literal

# ── Type aliases ──────────────────────────────────────────────────────────────

LoanCategory = Literal["none", "unsecured", "mortgage", "auto", "commercial"]
RatePeriod = Literal["monthly", "annual", "daily"]

# ── Loan categories ───────────────────────────────────────────────────────────

LOAN_CATEGORIES: tuple[str, ...] = ("none", "unsecured", "mortgage", "auto", "commercial")

# Names used on the Turkish site (ihtiyaç / konut / taşıt / ticari)
CATEGORY_ALIASES: dict[str, str] = {
    "ihtiyac": "unsecured",
    "konut": "mortgage",
    "tasit": "auto",
    "ticari": "commercial",
}

# ── Loan calculator defaults ──────────────────────────────────────────────────

DEFAULT_PRINCIPAL = Decimal("100000")
DEFAULT_RATE_PERCENT = Decimal("2.99")   # percent per period, monthly
DEFAULT_PERIODS: int = 36
DEFAULT_CATEGORY: LoanCategory = "none"
MONTHS_PER_YEAR = Decimal("12")
DAYS_PER_YEAR = Decimal("365")

# ── Currency converter defaults ───────────────────────────────────────────────

REFERENCE_CURRENCY: str = "TRY"
RATES_FILE_ENVVAR: str = "FINANCE_TOOLS_RATES_FILE"

# ── Numeric convenience ───────────────────────────────────────────────────────

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
