"""Core loan calculation functions.

All monetary values use decimal.Decimal; float is forbidden.
Rounding: ROUND_HALF_UP to 2 decimal places for final outputs,
full precision for all intermediate steps.

Interest rates are periodic fractions: 0.0299 means 2.99% per period.
No annual-to-monthly conversion is applied implicitly; callers that hold
an annual rate convert it with convert_interest_rate() first.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .config import CENT, DAYS_PER_YEAR, MONTHS_PER_YEAR, ONE, ZERO, RatePeriod
from .errors import InvalidInputError
from .taxes import DEFAULT_TAX_TABLE, TaxBreakdown, TaxRateTable, compute_taxes, normalize_category

logger = logging.getLogger(__name__)


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LoanQuote:
    # Inputs echoed back
    principal: Decimal
    periodic_rate: Decimal
    periods: int
    category: str
    # Outputs
    payment: Decimal
    total_payment: Decimal
    total_interest: Decimal
    taxes: TaxBreakdown  # informational, not part of the payment


@dataclass(frozen=True)
class AmortizationRow:
    period: int
    opening_balance: Decimal
    installment: Decimal
    principal_component: Decimal
    interest_component: Decimal
    kkdf: Decimal
    bsmv: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class AmortizationSchedule:
    principal: Decimal
    periodic_rate: Decimal
    periods: int
    category: str
    base_payment: Decimal   # annuity payment without taxes
    installment: Decimal    # fixed installment including KKDF + BSMV
    rows: tuple[AmortizationRow, ...]

    @property
    def total_interest(self) -> Decimal:
        return sum((row.interest_component for row in self.rows), ZERO)

    @property
    def total_kkdf(self) -> Decimal:
        return sum((row.kkdf for row in self.rows), ZERO)

    @property
    def total_bsmv(self) -> Decimal:
        return sum((row.bsmv for row in self.rows), ZERO)

    @property
    def total_cost(self) -> Decimal:
        return self.total_interest + self.total_kkdf + self.total_bsmv

    @property
    def total_payment(self) -> Decimal:
        return sum((row.installment for row in self.rows), ZERO)


def _validate(principal: Decimal, periodic_rate: Decimal, periods: int) -> None:
    if principal <= ZERO:
        raise InvalidInputError("principal must be > 0")
    if periods <= 0:
        raise InvalidInputError("periods must be > 0")
    if periodic_rate < -ONE:
        raise InvalidInputError("periodic_rate must be >= -1")


def compute_payment(
    principal: Decimal,
    periodic_rate: Decimal,
    periods: int,
) -> Decimal:
    """Return the fixed periodic payment (full precision, not rounded).

    Uses the standard annuity formula:
        payment = P * r * (1 + r)^n / ((1 + r)^n - 1)

    Special case: if periodic_rate == 0, payment = P / n.
    """
    _validate(principal, periodic_rate, periods)

    if periodic_rate == ZERO:
        return principal / Decimal(periods)

    factor = (ONE + periodic_rate) ** periods
    return principal * periodic_rate * factor / (factor - ONE)


def compute_loan_quote(
    principal: Decimal,
    periodic_rate: Decimal,
    periods: int,
    category: str = "none",
    tax_table: TaxRateTable = DEFAULT_TAX_TABLE,
) -> LoanQuote:
    """Compute payment, totals and the KKDF/BSMV disclosure for one loan."""
    category = normalize_category(category)
    payment = compute_payment(principal, periodic_rate, periods)
    total_payment = payment * Decimal(periods)
    total_interest = total_payment - principal
    taxes = compute_taxes(total_interest, category, tax_table)

    return LoanQuote(
        principal=principal,
        periodic_rate=periodic_rate,
        periods=periods,
        category=category,
        payment=_round(payment),
        total_payment=_round(total_payment),
        total_interest=_round(total_interest),
        taxes=TaxBreakdown(kkdf=_round(taxes.kkdf), bsmv=_round(taxes.bsmv)),
    )


def compute_tax_inclusive_payment(
    principal: Decimal,
    periodic_rate: Decimal,
    periods: int,
    category: str = "none",
    tax_table: TaxRateTable = DEFAULT_TAX_TABLE,
) -> Decimal:
    """Fixed installment when KKDF and BSMV are paid with every period.

    Taxes are charged on each period's interest, so the borrower effectively
    pays r * (1 + kkdf + bsmv) per period. A zero or negative rate produces
    no interest to tax and the installment equals compute_payment().
    """
    _validate(principal, periodic_rate, periods)
    rates = tax_table.rates_for(category)
    if periodic_rate <= ZERO:
        return compute_payment(principal, periodic_rate, periods)
    return compute_payment(principal, periodic_rate * (ONE + rates.combined), periods)


def build_amortization_schedule(
    principal: Decimal,
    periodic_rate: Decimal,
    periods: int,
    category: str = "none",
    tax_table: TaxRateTable = DEFAULT_TAX_TABLE,
) -> AmortizationSchedule:
    """Build the period-by-period schedule with KKDF and BSMV per period."""
    category = normalize_category(category)
    base_payment = compute_payment(principal, periodic_rate, periods)
    installment = _round(
        compute_tax_inclusive_payment(principal, periodic_rate, periods, category, tax_table)
    )
    logger.debug(
        "Building %d-period schedule: principal=%s rate=%s category=%s installment=%s",
        periods, principal, periodic_rate, category, installment,
    )

    rows: list[AmortizationRow] = []
    balance = principal

    for period in range(1, periods + 1):
        opening = balance
        interest = _round(opening * periodic_rate)
        if interest > ZERO:
            taxes = compute_taxes(interest, category, tax_table)
            kkdf, bsmv = _round(taxes.kkdf), _round(taxes.bsmv)
        else:
            kkdf = bsmv = ZERO
        # On the last period, pay off the exact remaining balance to avoid
        # sub-cent rounding residue.
        if period == periods:
            principal_component = opening
        else:
            principal_component = installment - interest - kkdf - bsmv
            if principal_component > opening:
                principal_component = opening
        closing = opening - principal_component

        rows.append(
            AmortizationRow(
                period=period,
                opening_balance=opening,
                installment=principal_component + interest + kkdf + bsmv,
                principal_component=principal_component,
                interest_component=interest,
                kkdf=kkdf,
                bsmv=bsmv,
                closing_balance=closing,
            )
        )
        balance = closing

    return AmortizationSchedule(
        principal=principal,
        periodic_rate=periodic_rate,
        periods=periods,
        category=category,
        base_payment=_round(base_payment),
        installment=installment,
        rows=tuple(rows),
    )


_PERIODS_PER_YEAR: dict[str, Decimal] = {
    "annual": ONE,
    "monthly": MONTHS_PER_YEAR,
    "daily": DAYS_PER_YEAR,
}


def convert_interest_rate(rate: Decimal, from_period: RatePeriod, to_period: RatePeriod) -> Decimal:
    """Convert a nominal (simple) rate between annual, monthly and daily periods.

    The rate is scaled to a yearly figure and back: annual = monthly * 12 =
    daily * 365. No compounding is applied.
    """
    for period in (from_period, to_period):
        if period not in _PERIODS_PER_YEAR:
            raise InvalidInputError(
                f"Unknown rate period '{period}'. Use one of: {', '.join(_PERIODS_PER_YEAR)}."
            )
    if from_period == to_period:
        return rate
    return rate * _PERIODS_PER_YEAR[from_period] / _PERIODS_PER_YEAR[to_period]
