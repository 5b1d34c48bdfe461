"""Exception taxonomy shared by the calculator engines."""
from __future__ import annotations

from typing import Iterable, Optional


class FinanceToolsError(Exception):
    """Base exception for every error raised by finance_tools."""


class InvalidInputError(FinanceToolsError, ValueError):
    """Raised when a numeric argument is outside the formula's domain."""


class UnknownCurrencyError(FinanceToolsError, LookupError):
    """Raised when a currency code is absent from the rate table."""

    def __init__(self, code: str, known: Optional[Iterable[str]] = None):
        self.code = code
        message = f"Unknown currency code '{code}'."
        if known:
            message += f" Supported codes: {', '.join(sorted(known))}"
        super().__init__(message)


class InvalidRateError(FinanceToolsError, ValueError):
    """Raised when a rate table holds a zero, negative or malformed rate."""
