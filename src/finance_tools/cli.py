"""Command-line front end: click group with rich rendering.

Commands:
  loan        fixed payment, totals and KKDF/BSMV disclosure
  schedule    period-by-period amortization table with taxes
  convert     currency conversion through the reference currency
  currencies  list supported currencies and their rates
  taxes       show the KKDF/BSMV table

Rates are entered as a percentage per period: --rate 2.99 means 2.99% per
month. --rate-type annual or daily converts the rate to monthly first.
"""
from __future__ import annotations

import logging
import sys
from decimal import Decimal
from typing import NoReturn, Optional

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .calculator import (
    AmortizationSchedule,
    LoanQuote,
    build_amortization_schedule,
    compute_loan_quote,
    convert_interest_rate,
)
from .config import (
    CATEGORY_ALIASES,
    DEFAULT_CATEGORY,
    DEFAULT_PERIODS,
    DEFAULT_PRINCIPAL,
    DEFAULT_RATE_PERCENT,
    HUNDRED,
    LOAN_CATEGORIES,
    RATES_FILE_ENVVAR,
)
from .currency import CURRENCY_NAMES, DEFAULT_EXCHANGE_RATES, ExchangeRateTable, convert, load_rate_table
from .errors import FinanceToolsError
from .number_format import format_number, parse_number
from .taxes import DEFAULT_TAX_TABLE

console = Console(highlight=False)
err_console = Console(stderr=True, style="bold red")

logger = logging.getLogger(__name__)

_CATEGORY_CHOICES = list(LOAN_CATEGORIES) + sorted(CATEGORY_ALIASES)

# ──────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ──────────────────────────────────────────────────────────────────────────────

def _fmt_money(value: Decimal, currency: str = "TRY") -> str:
    return f"{format_number(value)} {currency}"


def _fmt_pct(value: Decimal) -> str:
    return f"%{format_number(value * HUNDRED, 4)}"


def _fail(message: str) -> NoReturn:
    err_console.print(message)
    sys.exit(1)


# ──────────────────────────────────────────────────────────────────────────────
# Option parsing
# ──────────────────────────────────────────────────────────────────────────────

def _parse_decimal(raw: Optional[str], name: str, default: Decimal) -> Decimal:
    if raw is None:
        return default
    try:
        return parse_number(raw)
    except ValueError:
        _fail(f"Invalid value for --{name}: '{raw}'")


def _periodic_rate(rate: Optional[str], rate_type: str) -> Decimal:
    percent = _parse_decimal(rate, "rate", DEFAULT_RATE_PERCENT)
    # Rate is used as-is for its period; only an explicit annual or daily rate is converted.
    return convert_interest_rate(percent / HUNDRED, rate_type, "monthly")  # type: ignore[arg-type]


def _rate_table(rates_file: Optional[str]) -> ExchangeRateTable:
    if rates_file is None:
        return DEFAULT_EXCHANGE_RATES
    return load_rate_table(rates_file)


# ──────────────────────────────────────────────────────────────────────────────
# Result display
# ──────────────────────────────────────────────────────────────────────────────

def display_quote(quote: LoanQuote) -> None:
    console.print()
    console.print(Panel(
        f"[bold green]Loan Quote[/bold green] — category: {quote.category}",
        expand=False,
    ))

    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")

    t.add_row("Principal", _fmt_money(quote.principal))
    t.add_row("Periodic rate", _fmt_pct(quote.periodic_rate))
    t.add_row("Periods", str(quote.periods))
    t.add_row("Payment per period", _fmt_money(quote.payment))
    t.add_row("Total payment", _fmt_money(quote.total_payment))
    t.add_row("Total interest", _fmt_money(quote.total_interest))
    t.add_row("KKDF on interest", _fmt_money(quote.taxes.kkdf))
    t.add_row("BSMV on interest", _fmt_money(quote.taxes.bsmv))
    t.add_row("Total tax", _fmt_money(quote.taxes.total))
    console.print(t)


def display_schedule(schedule: AmortizationSchedule) -> None:
    t = Table(title="Amortization Schedule", box=box.MINIMAL_HEAVY_HEAD)
    for col in ("Period", "Opening Bal.", "Installment", "Principal", "Interest", "KKDF", "BSMV", "Closing Bal."):
        t.add_column(col, justify="right")

    for row in schedule.rows:
        t.add_row(
            str(row.period),
            format_number(row.opening_balance),
            format_number(row.installment),
            format_number(row.principal_component),
            format_number(row.interest_component),
            format_number(row.kkdf),
            format_number(row.bsmv),
            format_number(row.closing_balance),
        )
    console.print(t)

    s = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    s.add_column("Field", style="cyan")
    s.add_column("Value", justify="right")
    s.add_row("Installment (without tax)", _fmt_money(schedule.base_payment))
    s.add_row("Installment (with KKDF + BSMV)", _fmt_money(schedule.installment))
    s.add_row("Total interest", _fmt_money(schedule.total_interest))
    s.add_row("Total KKDF", _fmt_money(schedule.total_kkdf))
    s.add_row("Total BSMV", _fmt_money(schedule.total_bsmv))
    s.add_row("Total cost", _fmt_money(schedule.total_cost))
    s.add_row("Total payment", _fmt_money(schedule.total_payment))
    console.print(s)


# ──────────────────────────────────────────────────────────────────────────────
# Click entry point
# ──────────────────────────────────────────────────────────────────────────────

def _loan_options(func):
    func = click.option(
        "--category", type=click.Choice(_CATEGORY_CHOICES, case_sensitive=False),
        default=DEFAULT_CATEGORY, show_default=True, help="Loan category (KKDF/BSMV model)",
    )(func)
    func = click.option(
        "--rate-type", type=click.Choice(["monthly", "annual", "daily"]), default="monthly",
        show_default=True, help="Period the --rate is quoted for",
    )(func)
    func = click.option("--periods", type=click.IntRange(min=1), default=DEFAULT_PERIODS, show_default=True,
                        help="Number of monthly installments")(func)
    func = click.option("--rate", type=str, default=None,
                        help=f"Interest rate in percent per period (default: {DEFAULT_RATE_PERCENT})")(func)
    func = click.option("--principal", type=str, default=None,
                        help=f"Loan amount (default: {DEFAULT_PRINCIPAL})")(func)
    return func


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output")
def main(verbose: bool) -> None:
    """Loan and currency calculators."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@main.command()
@_loan_options
def loan(principal: Optional[str], rate: Optional[str], periods: int, rate_type: str, category: str) -> None:
    """Compute the fixed payment, totals and KKDF/BSMV for a loan."""
    amount = _parse_decimal(principal, "principal", DEFAULT_PRINCIPAL)
    try:
        quote = compute_loan_quote(amount, _periodic_rate(rate, rate_type), periods, category)
    except FinanceToolsError as exc:
        _fail(f"Calculation error: {exc}")
    display_quote(quote)


@main.command()
@_loan_options
def schedule(principal: Optional[str], rate: Optional[str], periods: int, rate_type: str, category: str) -> None:
    """Print the amortization table including KKDF and BSMV."""
    amount = _parse_decimal(principal, "principal", DEFAULT_PRINCIPAL)
    try:
        result = build_amortization_schedule(amount, _periodic_rate(rate, rate_type), periods, category)
    except FinanceToolsError as exc:
        _fail(f"Calculation error: {exc}")
    display_schedule(result)


@main.command(name="convert")
@click.argument("amount", type=str)
@click.argument("from_code", metavar="FROM")
@click.argument("to_code", metavar="TO")
@click.option("--rates-file", type=click.Path(dir_okay=False), envvar=RATES_FILE_ENVVAR,
              default=None, help="JSON exchange-rate table")
def convert_command(amount: str, from_code: str, to_code: str, rates_file: Optional[str]) -> None:
    """Convert AMOUNT from one currency to another."""
    value = _parse_decimal(amount, "amount", Decimal("0"))
    try:
        table = _rate_table(rates_file)
        result = convert(value, from_code, to_code, table)
    except FinanceToolsError as exc:
        _fail(f"Conversion error: {exc}")
    logger.debug("Converted %s %s -> %s %s", value, from_code, result, to_code)
    console.print(
        f"{_fmt_money(value, from_code.upper())} = [bold green]{_fmt_money(result, to_code.upper())}[/bold green]"
    )


@main.command()
@click.option("--rates-file", type=click.Path(dir_okay=False), envvar=RATES_FILE_ENVVAR,
              default=None, help="JSON exchange-rate table")
def currencies(rates_file: Optional[str]) -> None:
    """List supported currencies and their rates."""
    try:
        table = _rate_table(rates_file)
    except FinanceToolsError as exc:
        _fail(f"Rate table error: {exc}")

    t = Table(title=f"Exchange Rates ({table.reference})", box=box.SIMPLE)
    t.add_column("Code", style="cyan")
    t.add_column("Name")
    t.add_column(f"Price in {table.reference}", justify="right")
    t.add_row(table.reference, CURRENCY_NAMES.get(table.reference, ""), format_number(Decimal(1), 4))
    for code, rate in sorted(table.items()):
        t.add_row(code, CURRENCY_NAMES.get(code, ""), format_number(rate, 4))
    console.print(t)


@main.command()
def taxes() -> None:
    """Show the KKDF / BSMV rates per loan category."""
    t = Table(title="KKDF / BSMV", box=box.SIMPLE)
    t.add_column("Category", style="cyan")
    t.add_column("KKDF", justify="right")
    t.add_column("BSMV", justify="right")
    for category, rates in DEFAULT_TAX_TABLE.items():
        t.add_row(category, _fmt_pct(rates.kkdf), _fmt_pct(rates.bsmv))
    console.print(t)
