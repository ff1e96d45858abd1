"""Invoice domain - Yooz invoice lines and their replay into ERP AP invoices."""

from .classification import (
    LineClassification,
    MiscLine,
    POReceiptLine,
    POUnreceivedLine,
    classify_line,
    find_matching_detail,
    find_matching_receipt,
    is_po_line,
    misc_part_number,
    parse_po_number,
)
from .dataset import (
    APInvDtlRow,
    APInvExpRow,
    APInvHedRow,
    APInvoiceDataset,
    APUninvoicedRcptLine,
    InvoiceSession,
)
from .grouping import group_invoices
from .import_workflow import InvoiceImportWorkflow
from .models import InvoiceLine, LogicalInvoice
from .ports import APInvoicePort

__all__ = [
    "APInvDtlRow",
    "APInvExpRow",
    "APInvHedRow",
    "APInvoiceDataset",
    "APInvoicePort",
    "APUninvoicedRcptLine",
    "InvoiceImportWorkflow",
    "InvoiceLine",
    "InvoiceSession",
    "LineClassification",
    "LogicalInvoice",
    "MiscLine",
    "POReceiptLine",
    "POUnreceivedLine",
    "classify_line",
    "find_matching_detail",
    "find_matching_receipt",
    "group_invoices",
    "is_po_line",
    "misc_part_number",
    "parse_po_number",
]
