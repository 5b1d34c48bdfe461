"""Currency conversion against a single reference currency.

Rates are quoted as the price of one unit of a currency in the reference
currency (e.g. USD 34.25 means 1 USD = 34.25 TRY). Any pair is converted
with at most one hop through the reference.

Tables are validated when they are built or loaded, never at conversion time.
"""
from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union

from .config import ONE, REFERENCE_CURRENCY, ZERO
from .errors import InvalidRateError, UnknownCurrencyError

logger = logging.getLogger(__name__)

# Display names as shown on the converter page
CURRENCY_NAMES: dict[str, str] = {
    "TRY": "Türk Lirası",
    "USD": "Amerikan Doları",
    "EUR": "Euro",
    "GBP": "İngiliz Sterlini",
    "CHF": "İsviçre Frangı",
    "CAD": "Kanada Doları",
    "AUD": "Avustralya Doları",
    "SAR": "Suudi Riyali",
    "JPY": "Japon Yeni",
}


class ExchangeRateTable:
    """Immutable {currency code: price in reference currency} table.

    Codes are stripped and upper-cased. Raises InvalidRateError for zero,
    negative or non-finite rates, duplicate codes, and a reference-currency
    entry whose rate is not exactly 1.
    """

    def __init__(self, rates: Mapping[str, Decimal], reference: str = REFERENCE_CURRENCY) -> None:
        ref = reference.strip().upper()
        if not ref:
            raise InvalidRateError("Reference currency code must not be empty.")
        parsed: dict[str, Decimal] = {}
        for raw_code, rate in rates.items():
            code = str(raw_code).strip().upper()
            if not code:
                raise InvalidRateError("Currency code must not be empty.")
            if code in parsed:
                raise InvalidRateError(f"Duplicate rate for {code}.")
            if not isinstance(rate, Decimal) or not rate.is_finite():
                raise InvalidRateError(f"Rate for {code} is not a finite Decimal: {rate!r}")
            if rate <= ZERO:
                raise InvalidRateError(f"Rate for {code} must be > 0, got {rate}.")
            if code == ref and rate != ONE:
                raise InvalidRateError(f"Reference currency {ref} is fixed at 1, got {rate}.")
            parsed[code] = rate
        parsed.pop(ref, None)
        self._reference = ref
        self._rates: Mapping[str, Decimal] = MappingProxyType(parsed)

    @classmethod
    def from_mapping(
        cls,
        rates: Mapping[str, object],
        reference: str = REFERENCE_CURRENCY,
    ) -> "ExchangeRateTable":
        """Build a table from raw numbers or numeric strings.

        Raises InvalidRateError for values that are not numbers.
        """
        return cls(
            {code: _to_decimal(str(code).strip().upper(), raw) for code, raw in rates.items()},
            reference=reference,
        )

    @property
    def reference(self) -> str:
        return self._reference

    @property
    def codes(self) -> frozenset[str]:
        """All convertible codes, reference included."""
        return frozenset(self._rates) | {self.reference}

    def rate(self, code: str) -> Decimal:
        """Price of one unit of *code* in the reference currency."""
        key = code.strip().upper()
        if key == self.reference:
            return ONE
        try:
            return self._rates[key]
        except KeyError:
            raise UnknownCurrencyError(code, self.codes) from None

    def items(self):
        return self._rates.items()

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self.codes

    def __len__(self) -> int:
        return len(self._rates)


def _to_decimal(code: str, raw: object) -> Decimal:
    if isinstance(raw, bool):
        raise InvalidRateError(f"Rate for {code} is not a number: {raw!r}")
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidRateError(f"Rate for {code} is not a number: {raw!r}") from exc
    if not value.is_finite():
        raise InvalidRateError(f"Rate for {code} is not a finite number: {raw!r}")
    return value


DEFAULT_EXCHANGE_RATES = ExchangeRateTable.from_mapping({
    "USD": "34.25",
    "EUR": "37.82",
    "GBP": "43.65",
    "CHF": "38.92",
    "CAD": "24.15",
    "AUD": "22.34",
    "SAR": "9.13",
    "JPY": "0.23",
})


def convert(
    amount: Decimal,
    from_code: str,
    to_code: str,
    table: ExchangeRateTable = DEFAULT_EXCHANGE_RATES,
) -> Decimal:
    """Convert *amount* from one currency to another (full precision).

    Raises UnknownCurrencyError if either code is absent from *table*.
    """
    src = from_code.strip().upper()
    dst = to_code.strip().upper()
    # Resolve both rates first so unknown codes fail even on identity.
    from_rate = table.rate(src)
    to_rate = table.rate(dst)

    if src == dst:
        return amount
    if src == table.reference:
        return amount / to_rate
    if dst == table.reference:
        return amount * from_rate
    return amount * from_rate / to_rate


def load_rate_table(
    path: Union[str, Path],
    reference: Optional[str] = None,
) -> ExchangeRateTable:
    """Load and validate an exchange-rate table from a JSON file.

    Accepted shapes:
        {"reference": "TRY", "rates": {"USD": "34.25", ...}}
        {"USD": "34.25", ...}

    An explicit *reference* argument overrides the one in the file.
    Raises InvalidRateError if the file is unreadable or malformed.
    """
    file_path = Path(path)
    try:
        # Rates parsed as Decimal directly, never through float
        data = json.loads(file_path.read_text(encoding="utf-8"), parse_float=Decimal)
    except OSError as exc:
        raise InvalidRateError(f"Cannot read rate file {file_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise InvalidRateError(f"Rate file {file_path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise InvalidRateError(f"Rate file {file_path} must contain a JSON object.")

    if "rates" in data:
        rates = data["rates"]
        file_reference = data.get("reference", REFERENCE_CURRENCY)
    else:
        rates = data
        file_reference = REFERENCE_CURRENCY

    if not isinstance(rates, dict):
        raise InvalidRateError(f"'rates' in {file_path} must be a JSON object.")
    if not isinstance(file_reference, str):
        raise InvalidRateError(f"'reference' in {file_path} must be a currency code.")

    table = ExchangeRateTable.from_mapping(rates, reference=reference or file_reference)
    logger.debug("Loaded %d rates against %s from %s", len(table), table.reference, file_path)
    return table
