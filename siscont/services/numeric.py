from __future__ import annotations

import re
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
CENT = Decimal("0.01")


def parse_numeric_value(value: Any) -> str:
    """Coerce a spreadsheet cell into a decimal string.

    - numbers pass through as their text form (``42`` -> ``"42"``)
    - strings keep only digits, ``.`` and ``-`` (``"S/ 1,234.56"`` -> ``"1234.56"``)
    - dates, empty values, booleans and anything that does not end up as a
      valid number give ``"0"``
    """
    if isinstance(value, bool):
        return "0"
    if isinstance(value, (datetime, date, time)):
        return "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return "0"
        if value.is_integer():
            return str(int(value))
        # plain notation, never "1e-05"
        return format(Decimal(repr(value)), "f")
    if isinstance(value, Decimal):
        return format(value, "f") if value.is_finite() else "0"
    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value)
        if not cleaned:
            return "0"
        try:
            Decimal(cleaned)
        except InvalidOperation:
            return "0"
        return cleaned
    return "0"


def _d(x: Any) -> Decimal:
    if x is None or x == "":
        return Decimal("0")
    if isinstance(x, Decimal):
        return x
    try:
        return Decimal(str(x).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")


def to_decimal(x: Any) -> Decimal:
    return _d(x)


def round_money(x: Any) -> Decimal:
    """Two-decimal value as displayed in reports (half-up, like the SUNAT forms)."""
    return _d(x).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(x: Any) -> str:
    return f"{round_money(x):.2f}"


def sum_displayed(values: Iterable[Any]) -> Decimal:
    """Sum values after rounding each one, so a total matches the rows shown above it."""
    total = Decimal("0.00")
    for v in values:
        total += round_money(v)
    return total

