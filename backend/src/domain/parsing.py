"""Lenient parsing of amounts and dates coming from the ERP and from Yooz.

Both sources hand over text. Anything that does not parse raises
ValueFormatError; blanks are never read as zero. A comma is only accepted as
a thousands separator in correctly grouped amounts ("1,234.50"); a decimal
comma ("12,50") is rejected rather than read as 1250.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from domain.errors import ValueFormatError

THOUSANDS_GROUPED = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d+)?$")

# Tried after ISO 8601.
DATE_FORMATS = (
    "%Y%m%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S",
)


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """Parse an amount into a Decimal.

    Raises:
        ValueFormatError: If the value is blank or not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise ValueFormatError(field, value, "amount")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    else:
        text = str(value).strip()
        if "," in text:
            if not THOUSANDS_GROUPED.match(text):
                raise ValueFormatError(field, value, "amount")
            text = text.replace(",", "")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValueFormatError(field, value, "amount") from None
    if not amount.is_finite():
        raise ValueFormatError(field, value, "amount")
    return amount


def parse_date(value: Any, field: str = "date") -> date:
    """Parse a date or date-time value into a date.

    Raises:
        ValueFormatError: If the value is blank or not a recognised date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueFormatError(field, value, "date")

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise ValueFormatError(field, value, "date")
