"""Parsing and formatting of Turkish-style numbers ("1.000.000,50").

Input is forgiving: users type either ',' or '.' as the decimal separator,
and may or may not include thousands grouping.
"""
from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_ALLOWED = re.compile(r"^-?[\d.,]+$")


def parse_number(text: str) -> Decimal:
    """Parse a user-entered number into a Decimal.

    Rules:
      - both ',' and '.' present: whichever appears last is the decimal
        separator, the other one is grouping;
      - only ',' present: a single comma is the decimal separator;
      - only '.' present: a single dot is the decimal separator, several
        dots are thousands grouping.

    Raises ValueError for empty or malformed input.
    """
    raw = text.strip().replace(" ", "")
    if not raw:
        raise ValueError("Empty number.")
    if not _ALLOWED.match(raw):
        raise ValueError(f"Invalid number: '{text}'")

    has_comma = "," in raw
    has_dot = "." in raw

    if has_comma and has_dot:
        if raw.rfind(",") > raw.rfind("."):
            grouping, decimal_sep = ".", ","
        else:
            grouping, decimal_sep = ",", "."
        cleaned = raw.replace(grouping, "")
        if cleaned.count(decimal_sep) > 1:
            raise ValueError(f"Invalid number: '{text}'")
        cleaned = cleaned.replace(decimal_sep, ".")
    elif has_comma:
        if raw.count(",") > 1:
            raise ValueError(f"Invalid number: '{text}' (more than one decimal comma)")
        cleaned = raw.replace(",", ".")
    elif raw.count(".") > 1:
        cleaned = raw.replace(".", "")
    else:
        cleaned = raw

    try:
        return Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid number: '{text}'") from exc


def format_number(value: Decimal, decimals: int = 2) -> str:
    """Format *value* with '.' thousands grouping and ',' decimals."""
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    # Python's ',' grouping then swap separators
    text = f"{rounded:,.{decimals}f}"
    return text.replace(",", "\x00").replace(".", ",").replace("\x00", ".")
