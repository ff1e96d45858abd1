"""Grouping of flat invoice lines into logical invoices."""

from typing import Dict, Iterable, List

from .models import InvoiceLine, LogicalInvoice


def group_invoices(lines: Iterable[InvoiceLine]) -> List[LogicalInvoice]:
    """Partition lines by invoice number.

    Invoices come out in first-seen order and each keeps its lines in file
    order, even when lines of different invoices are interleaved.
    """
    buckets: Dict[str, List[InvoiceLine]] = {}
    for line in lines:
        buckets.setdefault(line.invoice_num, []).append(line)

    return [LogicalInvoice(invoice_num=num, lines=tuple(group)) for num, group in buckets.items()]
