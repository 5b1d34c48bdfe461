"""Unit tests for calculator.py — payment, loan quote, amortization schedule."""
from decimal import Decimal

import pytest

from finance_tools.calculator import (
    build_amortization_schedule,
    compute_loan_quote,
    compute_payment,
    compute_tax_inclusive_payment,
    convert_interest_rate,
)
from finance_tools.errors import InvalidInputError

ZERO = Decimal("0")
CENT = Decimal("0.01")


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENT)


class TestComputePayment:
    @pytest.mark.parametrize("principal,periodic_rate,periods,expected", [
        # 2.99% per month taken literally, 36 months
        (Decimal("250000"), Decimal("0.0299"), 36, Decimal("11433.87")),
        (Decimal("100000"), Decimal("0.0299"), 36, Decimal("4573.55")),
        # Annual rates split into monthly by the caller
        (Decimal("100000"), Decimal("0.035") / 12, 240, Decimal("579.96")),
        (Decimal("200000"), Decimal("0.032") / 12, 300, Decimal("969.36")),
        (Decimal("500000"), Decimal("0.050") / 12, 360, Decimal("2684.11")),
    ])
    def test_standard_cases(self, principal, periodic_rate, periods, expected):
        result = compute_payment(principal, periodic_rate, periods)
        assert _cents(result) == expected, f"payment mismatch: got {result}, expected {expected}"

    def test_zero_rate_is_exact_split(self):
        assert compute_payment(Decimal("120000"), ZERO, 120) == Decimal("120000") / Decimal(120)
        assert compute_payment(Decimal("120000"), ZERO, 120) == Decimal("1000")

    def test_single_period(self):
        # 1000 * 0.01 * 1.01 / 0.01 = 1010
        assert compute_payment(Decimal("1000"), Decimal("0.01"), 1) == Decimal("1010")

    @pytest.mark.parametrize("principal,periodic_rate,periods", [
        (Decimal("1000"), Decimal("0.001"), 12),
        (Decimal("50000"), Decimal("0.0149"), 24),
        (Decimal("250000"), Decimal("0.0299"), 36),
        (Decimal("750000"), Decimal("0.04"), 120),
        (Decimal("120000"), ZERO, 12),
    ])
    def test_total_never_below_principal(self, principal, periodic_rate, periods):
        assert compute_payment(principal, periodic_rate, periods) * periods >= principal

    def test_negative_rate_above_minus_one_allowed(self):
        payment = compute_payment(Decimal("1000"), Decimal("-0.01"), 12)
        assert payment * 12 < Decimal("1000")

    @pytest.mark.parametrize("principal,periodic_rate,periods,match", [
        (ZERO, Decimal("0.01"), 12, "principal"),
        (Decimal("-1"), Decimal("0.01"), 12, "principal"),
        (Decimal("1000"), Decimal("0.01"), 0, "periods"),
        (Decimal("1000"), Decimal("0.01"), -3, "periods"),
        (Decimal("1000"), Decimal("-1.5"), 12, "periodic_rate"),
    ])
    def test_invalid_input(self, principal, periodic_rate, periods, match):
        with pytest.raises(InvalidInputError, match=match):
            compute_payment(principal, periodic_rate, periods)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            compute_payment(Decimal("1000"), Decimal("0.01"), 0)


class TestLoanQuote:
    def test_unsecured_quote(self):
        quote = compute_loan_quote(Decimal("250000"), Decimal("0.0299"), 36, "unsecured")
        assert quote.payment == Decimal("11433.87")
        assert quote.total_payment == Decimal("411619.28")
        assert quote.total_interest == Decimal("161619.28")
        # KKDF 15% and BSMV 15% of total interest
        assert quote.taxes.kkdf == Decimal("24242.89")
        assert quote.taxes.bsmv == Decimal("24242.89")
        assert quote.taxes.total == Decimal("48485.78")

    def test_commercial_quote(self):
        quote = compute_loan_quote(Decimal("100000"), Decimal("0.0299"), 36, "commercial")
        assert quote.total_interest == Decimal("64647.71")
        assert quote.taxes.kkdf == Decimal("9697.16")
        assert quote.taxes.bsmv == Decimal("3232.39")

    @pytest.mark.parametrize("principal,periodic_rate,periods", [
        (Decimal("250000"), Decimal("0.0299"), 36),
        (Decimal("1500000"), Decimal("0.025"), 120),
        (Decimal("10000"), Decimal("0.5"), 6),
    ])
    def test_mortgage_never_taxed(self, principal, periodic_rate, periods):
        quote = compute_loan_quote(principal, periodic_rate, periods, "mortgage")
        assert quote.total_interest > ZERO
        assert quote.taxes.kkdf == ZERO
        assert quote.taxes.bsmv == ZERO

    def test_taxes_do_not_change_payment(self):
        plain = compute_loan_quote(Decimal("100000"), Decimal("0.0299"), 36, "none")
        taxed = compute_loan_quote(Decimal("100000"), Decimal("0.0299"), 36, "unsecured")
        assert plain.payment == taxed.payment
        assert plain.total_payment == taxed.total_payment

    def test_turkish_alias_accepted(self):
        quote = compute_loan_quote(Decimal("100000"), Decimal("0.0299"), 36, "konut")
        assert quote.category == "mortgage"

    def test_zero_rate_has_no_interest(self):
        quote = compute_loan_quote(Decimal("120000"), ZERO, 12, "unsecured")
        assert quote.payment == Decimal("10000.00")
        assert quote.total_interest == ZERO
        assert quote.taxes.total == ZERO

    def test_unknown_category(self):
        with pytest.raises(InvalidInputError, match="category"):
            compute_loan_quote(Decimal("1000"), Decimal("0.01"), 12, "student")


class TestTaxInclusivePayment:
    def test_unsecured_uses_effective_rate(self):
        # r_eff = 0.018 * (1 + 0.15 + 0.15) = 0.0234
        result = compute_tax_inclusive_payment(Decimal("100000"), Decimal("0.018"), 12, "unsecured")
        assert _cents(result) == Decimal("9654.51")

    def test_untaxed_category_matches_plain_payment(self):
        plain = compute_payment(Decimal("100000"), Decimal("0.018"), 12)
        assert compute_tax_inclusive_payment(Decimal("100000"), Decimal("0.018"), 12, "mortgage") == plain

    @pytest.mark.parametrize("rate", ["0", "-0.01", "-0.9"])
    def test_non_positive_rate_matches_plain_payment(self, rate):
        plain = compute_payment(Decimal("1000"), Decimal(rate), 12)
        assert compute_tax_inclusive_payment(Decimal("1000"), Decimal(rate), 12, "unsecured") == plain

    def test_rate_checked_before_taxes(self):
        with pytest.raises(InvalidInputError, match="periodic_rate"):
            compute_tax_inclusive_payment(Decimal("1000"), Decimal("-1.5"), 12, "unsecured")


class TestAmortizationSchedule:
    def _build(self, principal="100000", rate="0.018", periods=12, category="unsecured"):
        return build_amortization_schedule(Decimal(principal), Decimal(rate), periods, category)

    def test_row_count(self):
        assert len(self._build(periods=36).rows) == 36

    def test_installments(self):
        schedule = self._build()
        assert schedule.base_payment == Decimal("9340.20")
        assert schedule.installment == Decimal("9654.51")

    def test_first_period(self):
        row = self._build().rows[0]
        assert row.period == 1
        assert row.opening_balance == Decimal("100000")
        assert row.interest_component == Decimal("1800.00")
        assert row.kkdf == Decimal("270.00")
        assert row.bsmv == Decimal("270.00")
        assert row.principal_component == Decimal("7314.51")
        assert row.closing_balance == Decimal("92685.49")

    def test_final_closing_balance_is_zero(self):
        assert self._build(periods=60).rows[-1].closing_balance == ZERO

    def test_opening_equals_previous_closing(self):
        rows = self._build(periods=24).rows
        for i in range(1, len(rows)):
            assert rows[i].opening_balance == rows[i - 1].closing_balance

    def test_closing_balance_decreases(self):
        balances = [row.closing_balance for row in self._build(periods=24).rows]
        for i in range(len(balances) - 1):
            assert balances[i] >= balances[i + 1], "Balance should decrease monotonically"

    def test_installment_components_sum(self):
        for row in self._build().rows:
            expected = row.principal_component + row.interest_component + row.kkdf + row.bsmv
            assert row.installment == expected

    def test_fixed_installment_until_last_period(self):
        schedule = self._build(periods=24)
        assert {row.installment for row in schedule.rows[:-1]} == {schedule.installment}

    def test_totals_add_up(self):
        schedule = self._build(periods=24)
        assert schedule.total_payment == schedule.principal + schedule.total_cost
        assert schedule.total_cost == schedule.total_interest + schedule.total_kkdf + schedule.total_bsmv

    def test_mortgage_rows_untaxed(self):
        schedule = self._build(category="mortgage")
        assert schedule.total_kkdf == ZERO
        assert schedule.total_bsmv == ZERO
        assert schedule.installment == schedule.base_payment

    def test_commercial_rates_per_row(self):
        row = self._build(category="commercial").rows[0]
        assert row.kkdf == Decimal("270.00")
        assert row.bsmv == Decimal("90.00")

    def test_zero_rate_schedule(self):
        schedule = self._build(principal="1200", rate="0", periods=12)
        assert all(row.interest_component == ZERO for row in schedule.rows)
        assert schedule.installment == Decimal("100.00")
        assert schedule.rows[-1].closing_balance == ZERO

    @pytest.mark.parametrize("rate", ["-0.01", "-0.9"])
    def test_negative_rate_is_not_taxed(self, rate):
        schedule = self._build(principal="1000", rate=rate)
        assert schedule.total_kkdf == ZERO
        assert schedule.total_bsmv == ZERO
        assert schedule.installment == schedule.base_payment
        assert schedule.rows[-1].closing_balance == ZERO

    def test_rate_below_minus_one_rejected(self):
        with pytest.raises(InvalidInputError, match="periodic_rate"):
            self._build(rate="-1.01")


class TestConvertInterestRate:
    def test_annual_to_monthly(self):
        assert convert_interest_rate(Decimal("0.36"), "annual", "monthly") == Decimal("0.03")

    def test_monthly_to_annual(self):
        assert convert_interest_rate(Decimal("0.0299"), "monthly", "annual") == Decimal("0.3588")

    def test_same_period_is_identity(self):
        assert convert_interest_rate(Decimal("0.0299"), "monthly", "monthly") == Decimal("0.0299")

    def test_unknown_period(self):
        with pytest.raises(InvalidInputError, match="weekly"):
            convert_interest_rate(Decimal("0.01"), "weekly", "annual")  # type: ignore[arg-type]

    def test_annual_to_daily(self):
        assert convert_interest_rate(Decimal("0.365"), "annual", "daily") == Decimal("0.001")

    def test_daily_to_annual(self):
        assert convert_interest_rate(Decimal("0.001"), "daily", "annual") == Decimal("0.365")

    def test_daily_to_monthly(self):
        # 0.001 * 365 / 12
        result = convert_interest_rate(Decimal("0.001"), "daily", "monthly")
        assert result.quantize(Decimal("1e-10")) == Decimal("0.0304166667")

    def test_monthly_to_daily(self):
        # 0.0365 * 12 / 365
        assert convert_interest_rate(Decimal("0.0365"), "monthly", "daily") == Decimal("0.0012")
