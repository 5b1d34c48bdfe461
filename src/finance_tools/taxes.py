"""KKDF / BSMV tax-rate table for loan interest.

KKDF (Resource Utilization Support Fund) and BSMV (Banking and Insurance
Transactions Tax) are levied on the interest component of a loan.
Rates are stored as Decimal fractions (0.15 = 15%).
Mortgage loans are exempt from both; the 'none' category is the
interest-only option with no tax applied.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from .config import CATEGORY_ALIASES, LOAN_CATEGORIES, ZERO, LoanCategory
from .errors import InvalidInputError, InvalidRateError

# Categories that must never carry tax
_EXEMPT_CATEGORIES = frozenset({"mortgage", "none"})


@dataclass(frozen=True)
class TaxRates:
    kkdf: Decimal
    bsmv: Decimal

    @property
    def combined(self) -> Decimal:
        return self.kkdf + self.bsmv

    def is_zero(self) -> bool:
        return self.kkdf == ZERO and self.bsmv == ZERO


@dataclass(frozen=True)
class TaxBreakdown:
    kkdf: Decimal
    bsmv: Decimal

    @property
    def total(self) -> Decimal:
        return self.kkdf + self.bsmv


class TaxRateTable:
    """Immutable mapping from loan category to its (KKDF, BSMV) pair.

    The table is validated once, when it is built:
      - every loan category has an entry;
      - each rate is a fraction in [0, 1);
      - mortgage and 'none' map to (0, 0), every other category is non-zero.
    """

    def __init__(self, rates: Mapping[str, TaxRates]) -> None:
        missing = set(LOAN_CATEGORIES) - set(rates)
        if missing:
            raise InvalidRateError(
                f"Tax table is missing categories: {', '.join(sorted(missing))}"
            )
        unknown = set(rates) - set(LOAN_CATEGORIES)
        if unknown:
            raise InvalidRateError(
                f"Tax table has unknown categories: {', '.join(sorted(unknown))}"
            )
        for category, pair in rates.items():
            for name, value in (("kkdf", pair.kkdf), ("bsmv", pair.bsmv)):
                if not ZERO <= value < 1:
                    raise InvalidRateError(
                        f"{name} rate for '{category}' must be in [0, 1), got {value}."
                    )
            if category in _EXEMPT_CATEGORIES and not pair.is_zero():
                raise InvalidRateError(f"'{category}' loans must not carry KKDF or BSMV.")
            if category not in _EXEMPT_CATEGORIES and pair.is_zero():
                raise InvalidRateError(f"'{category}' loans must carry a non-zero tax pair.")
        self._rates: Mapping[str, TaxRates] = MappingProxyType(dict(rates))

    @classmethod
    def from_percentages(cls, table: Mapping[str, tuple[str, str]]) -> "TaxRateTable":
        """Build a table from {category: (kkdf_pct, bsmv_pct)} string percentages."""
        return cls({
            category: TaxRates(
                kkdf=Decimal(kkdf) / Decimal(100),
                bsmv=Decimal(bsmv) / Decimal(100),
            )
            for category, (kkdf, bsmv) in table.items()
        })

    def rates_for(self, category: str) -> TaxRates:
        return self._rates[normalize_category(category)]

    def items(self):
        return self._rates.items()

    def __contains__(self, category: object) -> bool:
        return category in self._rates


def normalize_category(category: str) -> LoanCategory:
    """Return the canonical category name, accepting the Turkish aliases.

    Raises InvalidInputError for unknown categories.
    """
    key = category.strip().lower()
    key = CATEGORY_ALIASES.get(key, key)
    if key not in LOAN_CATEGORIES:
        raise InvalidInputError(
            f"Unknown loan category '{category}'. "
            f"Valid values: {', '.join(LOAN_CATEGORIES)}"
        )
    return key  # type: ignore[return-value]


DEFAULT_TAX_TABLE = TaxRateTable.from_percentages({
    "unsecured": ("15", "15"),
    "auto": ("15", "15"),
    "commercial": ("15", "5"),
    "mortgage": ("0", "0"),
    "none": ("0", "0"),
})


def compute_taxes(
    interest: Decimal,
    category: str,
    tax_table: TaxRateTable = DEFAULT_TAX_TABLE,
) -> TaxBreakdown:
    """Return the KKDF and BSMV amounts owed on *interest* (full precision)."""
    rates = tax_table.rates_for(category)
    return TaxBreakdown(kkdf=interest * rates.kkdf, bsmv=interest * rates.bsmv)
