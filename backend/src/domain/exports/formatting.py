"""Value rendering for export files.

Amounts are rendered with exactly two decimals (half-up) and dates as
yyyyMMdd. Anything that does not parse raises ValueFormatError; financial
values are never coerced to zero or blank.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from domain.parsing import parse_amount, parse_date
from .profiles import ColumnKind, ColumnSpec

TWO_PLACES = Decimal("0.01")


def format_amount(value: Any, field: str = "amount") -> str:
    """Render an amount with exactly two decimal places."""
    return str(parse_amount(value, field).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def format_date(value: Any, field: str = "date") -> str:
    """Render a date as yyyyMMdd."""
    return parse_date(value, field).strftime("%Y%m%d")


def format_value(column: ColumnSpec, value: str) -> str:
    """Render one mapped value according to its column kind."""
    if column.kind is ColumnKind.TEXT:
        return value
    if not value.strip() and column.nullable:
        return ""
    if column.kind is ColumnKind.AMOUNT:
        return format_amount(value, column.label)
    return format_date(value, column.label)
