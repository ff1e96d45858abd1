"""Invoice lines as read from Yooz invoice exports.

Yooz writes one CSV row per invoice line and repeats (or blanks) the header
columns on every row. Header values are only ever taken from the first line
of a logical invoice.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.errors import ValueFormatError
from domain.parsing import parse_amount, parse_date


def _blank_to_none(value):
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


class InvoiceLine(BaseModel):
    """One row of a Yooz invoice CSV.

    Field aliases are the exact (case-sensitive) CSV header names.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, str_strip_whitespace=True)

    entity: str = Field("", alias="Entity")
    vendor_id: str = Field("", alias="Vendor ID")
    post_date: Optional[date] = Field(None, alias="Post Date")
    invoice_date: Optional[date] = Field(None, alias="Invoice Date")
    due_date: Optional[date] = Field(None, alias="Due Date")
    gl_account: str = Field("", alias="G/L Account")
    invoice_num: str = Field(..., alias="Invoice Number", min_length=1)
    invoice_amount: Optional[Decimal] = Field(None, alias="Invoice Amount")
    description: str = Field("", alias="Description")
    cost_center: str = Field("", alias="Cost Center")
    sub_account: str = Field("", alias="Sub Account")
    po_number: str = Field("", alias="PO#")
    product_code: str = Field("", alias="Product code")
    product_label: str = Field("", alias="Product label")
    invoice_qty: Optional[Decimal] = Field(None, alias="Invoiced quantity")
    unit_price: Optional[Decimal] = Field(None, alias="Unit price")
    po_line: Optional[int] = Field(None, alias="PO line#")
    document_id: str = Field("", alias="Document ID")

    @field_validator(
        'entity', 'vendor_id', 'gl_account', 'description', 'cost_center', 'sub_account',
        'po_number', 'product_code', 'product_label', 'document_id',
        mode='before',
    )
    @classmethod
    def none_to_empty(cls, v):
        """csv.DictReader yields None for short rows"""
        return "" if v is None else v

    @field_validator('invoice_amount', 'invoice_qty', 'unit_price', mode='before')
    @classmethod
    def parse_decimal(cls, v, info):
        v = _blank_to_none(v)
        if v is None:
            return None
        try:
            return parse_amount(v, info.field_name)
        except ValueFormatError as e:
            raise ValueError(str(e)) from None

    @field_validator('post_date', 'invoice_date', 'due_date', mode='before')
    @classmethod
    def parse_optional_date(cls, v, info):
        v = _blank_to_none(v)
        if v is None:
            return None
        try:
            return parse_date(v, info.field_name)
        except ValueFormatError as e:
            raise ValueError(str(e)) from None

    @field_validator('po_line', mode='before')
    @classmethod
    def parse_po_line(cls, v):
        v = _blank_to_none(v)
        if v is None:
            return None
        try:
            number = parse_amount(v, "po_line")
        except ValueFormatError as e:
            raise ValueError(str(e)) from None
        if number != number.to_integral_value() or number <= 0:
            raise ValueError(f"PO line must be a positive whole number, got {v!r}")
        return int(number)


@dataclass(frozen=True)
class LogicalInvoice:
    """All lines sharing one invoice number, in file order.

    Header properties read the first line only; later lines may repeat or
    blank those columns without effect.
    """
    invoice_num: str
    lines: Tuple[InvoiceLine, ...]

    def __post_init__(self):
        if not self.lines:
            raise ValueError(f"Invoice {self.invoice_num} has no lines")

    @property
    def first_line(self) -> InvoiceLine:
        return self.lines[0]

    @property
    def vendor_id(self) -> str:
        return self.first_line.vendor_id

    @property
    def invoice_date(self) -> Optional[date]:
        return self.first_line.invoice_date

    @property
    def due_date(self) -> Optional[date]:
        return self.first_line.due_date

    @property
    def invoice_amount(self) -> Optional[Decimal]:
        return self.first_line.invoice_amount

    @property
    def po_number(self) -> str:
        return self.first_line.po_number

    @property
    def document_id(self) -> str:
        return self.first_line.document_id
