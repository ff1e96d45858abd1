"""Invoice line classification.

Every invoice line takes exactly one of three import paths:

- POReceiptLine: PO number is numeric and an open receipt matches the line
- POUnreceivedLine: PO number is numeric but nothing has been received yet
- MiscLine: no usable PO number; imported as a miscellaneous line

classify_line is pure: the workflow fetches receipts from the ERP and passes
them in, so branch selection is testable without a server.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from .dataset import APInvDtlRow, APUninvoicedRcptLine
from .models import InvoiceLine


@dataclass(frozen=True)
class POReceiptLine:
    po_num: int
    receipt: APUninvoicedRcptLine


@dataclass(frozen=True)
class POUnreceivedLine:
    po_num: int
    po_line: Optional[int]


@dataclass(frozen=True)
class MiscLine:
    part_num: str


LineClassification = Union[POReceiptLine, POUnreceivedLine, MiscLine]


def parse_po_number(value: str) -> Optional[int]:
    """PO number as a positive integer, or None when it is not one."""
    text = (value or "").strip()
    if not (text.isascii() and text.isdigit()):
        return None
    number = int(text)
    return number if number > 0 else None


def is_po_line(line: InvoiceLine) -> bool:
    return parse_po_number(line.po_number) is not None


def misc_part_number(line: InvoiceLine) -> str:
    """Part number for a misc line: product label, product code, description,
    then invoice number, whichever is first non-blank."""
    for candidate in (line.product_label, line.product_code, line.description, line.invoice_num):
        if candidate and candidate.strip():
            return candidate.strip()
    return line.invoice_num


def _same_part(left: str, right: str) -> bool:
    return bool(left) and left.strip().casefold() == (right or "").strip().casefold()


def _matches(line: InvoiceLine, po_num: int, row_po_num: int, row_po_line: int, row_part: str) -> bool:
    if row_po_num != po_num:
        return False
    if line.po_line is not None:
        return row_po_line == line.po_line
    return _same_part(line.product_code, row_part)


def find_matching_receipt(
    line: InvoiceLine,
    receipts: Iterable[APUninvoicedRcptLine],
) -> Optional[APUninvoicedRcptLine]:
    """First open receipt for the line's PO, matched by PO line when the
    line carries one, otherwise by case-insensitive part number."""
    po_num = parse_po_number(line.po_number)
    if po_num is None:
        return None
    for receipt in receipts:
        if _matches(line, po_num, receipt.po_num, receipt.po_line, receipt.part_num):
            return receipt
    return None


def find_matching_detail(
    line: InvoiceLine,
    details: Sequence[APInvDtlRow],
) -> Optional[APInvDtlRow]:
    """Latest invoice detail line created for this PO invoice line."""
    po_num = parse_po_number(line.po_number)
    if po_num is None:
        return None
    matches = [row for row in details if _matches(line, po_num, row.po_num, row.po_line, row.part_num)]
    if not matches:
        return None
    return max(matches, key=lambda row: row.invoice_line)


def classify_line(
    line: InvoiceLine,
    receipts: Iterable[APUninvoicedRcptLine] = (),
) -> LineClassification:
    po_num = parse_po_number(line.po_number)
    if po_num is None:
        return MiscLine(part_num=misc_part_number(line))

    receipt = find_matching_receipt(line, receipts)
    if receipt is not None:
        return POReceiptLine(po_num=po_num, receipt=receipt)
    return POUnreceivedLine(po_num=po_num, po_line=line.po_line)
