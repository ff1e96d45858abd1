"""Client-side schema of the ERP AP invoice dataset.

The AP invoice business object works by propose-and-refetch: every change
call posts the whole dataset plus one proposed value and gets back a dataset
the server has recomputed. Only the fields this bridge reads or writes are
declared; everything else the server sends is kept (extra="allow") and
posted back unchanged.

Rows are never mutated in place. Every helper returns a new dataset, and
InvoiceSession carries the current one through an invoice's call chain.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.errors import DetailLineNotFoundError, DistributionNotFoundError, InvoiceImportError

ROW_ADDED = "A"
ROW_UPDATED = "U"


class _DatasetRow(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    row_mod: str = Field("", alias="RowMod")

    def changed(self, **changes: Any) -> "_DatasetRow":
        """Copy with field changes applied and the row flagged as modified."""
        row_mod = self.row_mod if self.row_mod == ROW_ADDED else ROW_UPDATED
        return self.model_copy(update={**changes, "row_mod": row_mod})


class APInvHedRow(_DatasetRow):
    """Invoice header."""
    company: str = Field("", alias="Company")
    group_id: str = Field("", alias="GroupID")
    vendor_num: int = Field(0, alias="VendorNum")
    vendor_id: str = Field("", alias="VendorNumVendorID")
    invoice_num: str = Field("", alias="InvoiceNum")
    invoice_date: Optional[datetime] = Field(None, alias="InvoiceDate")
    due_date: Optional[datetime] = Field(None, alias="DueDate")
    ref_po_num: int = Field(0, alias="REFPONum")
    invoice_vendor_amt: Decimal = Field(Decimal("0"), alias="InvoiceVendorAmt")
    invoice_ref: str = Field("", alias="InvoiceRef")


class APInvDtlRow(_DatasetRow):
    """Invoice detail line."""
    vendor_num: int = Field(0, alias="VendorNum")
    invoice_num: str = Field("", alias="InvoiceNum")
    invoice_line: int = Field(0, alias="InvoiceLine")
    part_num: str = Field("", alias="PartNum")
    description: str = Field("", alias="Description")
    po_num: int = Field(0, alias="PONum")
    po_line: int = Field(0, alias="POLine")
    vendor_qty: Decimal = Field(Decimal("0"), alias="VendorQty")
    unit_cost: Decimal = Field(Decimal("0"), alias="UnitCost")
    ext_cost: Decimal = Field(Decimal("0"), alias="ExtCost")


class APInvExpRow(_DatasetRow):
    """GL distribution of a detail line."""
    invoice_num: str = Field("", alias="InvoiceNum")
    invoice_line: int = Field(0, alias="InvoiceLine")
    inv_exp_seq: int = Field(0, alias="InvExpSeq")
    gl_account: str = Field("", alias="GLAccount")
    seg_value1: str = Field("", alias="SegValue1")
    seg_value2: str = Field("", alias="SegValue2")
    seg_value3: str = Field("", alias="SegValue3")


class APUninvoicedRcptLine(_DatasetRow):
    """Received, not yet invoiced PO receipt line."""
    vendor_num: int = Field(0, alias="VendorNum")
    pack_slip: str = Field("", alias="PackSlip")
    pack_line: int = Field(0, alias="PackLine")
    po_num: int = Field(0, alias="PONum")
    po_line: int = Field(0, alias="POLine")
    part_num: str = Field("", alias="PartNum")
    select_line: bool = Field(False, alias="SelectLine")


class APInvoiceDataset(BaseModel):
    """The AP invoice tableset, restricted to the tables the import touches."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    headers: List[APInvHedRow] = Field(default_factory=list, alias="APInvHed")
    details: List[APInvDtlRow] = Field(default_factory=list, alias="APInvDtl")
    distributions: List[APInvExpRow] = Field(default_factory=list, alias="APInvExp")
    receipts: List[APUninvoicedRcptLine] = Field(default_factory=list, alias="APUninvoicedRcptLines")

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "APInvoiceDataset":
        return cls.model_validate(payload or {})

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe dict with ERP field names, unknown server fields included."""
        return self.model_dump(by_alias=True, mode="json")

    @property
    def header(self) -> APInvHedRow:
        if not self.headers:
            raise InvoiceImportError("Invoice dataset has no header row")
        return self.headers[0]

    def with_header(self, **changes: Any) -> "APInvoiceDataset":
        headers = [self.header.changed(**changes)] + self.headers[1:]
        return self.model_copy(update={"headers": headers})

    def detail(self, invoice_line: int) -> APInvDtlRow:
        for row in self.details:
            if row.invoice_line == invoice_line:
                return row
        raise DetailLineNotFoundError(f"Invoice line {invoice_line} not found in dataset")

    def new_detail(self) -> APInvDtlRow:
        """The detail row the server just added (not yet saved)."""
        for row in reversed(self.details):
            if row.row_mod == ROW_ADDED:
                return row
        raise DetailLineNotFoundError("Server did not add a new invoice detail line")

    def with_detail(self, invoice_line: int, **changes: Any) -> "APInvoiceDataset":
        """Flag one detail row as modified (applying any changes)."""
        self.detail(invoice_line)
        details = [
            row.changed(**changes) if row.invoice_line == invoice_line else row
            for row in self.details
        ]
        return self.model_copy(update={"details": details})

    def with_new_detail(self, **changes: Any) -> "APInvoiceDataset":
        target = self.new_detail()
        details = [row.changed(**changes) if row is target else row for row in self.details]
        return self.model_copy(update={"details": details})

    def latest_distribution(self, invoice_line: int) -> APInvExpRow:
        """Most recently added GL distribution row of a detail line."""
        rows = [row for row in self.distributions if row.invoice_line == invoice_line]
        if not rows:
            raise DistributionNotFoundError(f"No GL distribution found for invoice line {invoice_line}")
        return max(rows, key=lambda row: row.inv_exp_seq)

    def with_distribution(self, invoice_line: int, inv_exp_seq: int, **changes: Any) -> "APInvoiceDataset":
        distributions = [
            row.changed(**changes)
            if row.invoice_line == invoice_line and row.inv_exp_seq == inv_exp_seq
            else row
            for row in self.distributions
        ]
        return self.model_copy(update={"distributions": distributions})

    def with_receipt_selected(self, receipt: APUninvoicedRcptLine) -> "APInvoiceDataset":
        receipts = [
            row.changed(select_line=True)
            if (row.pack_slip, row.pack_line) == (receipt.pack_slip, receipt.pack_line)
            else row
            for row in self.receipts
        ]
        return self.model_copy(update={"receipts": receipts})


@dataclass(frozen=True)
class InvoiceSession:
    """State owned by one invoice's import call chain.

    Each workflow step takes a session and returns a new one; nothing is
    shared between invoices.
    """
    invoice_num: str
    group_id: str
    dataset: APInvoiceDataset
    vendor_num: int = 0

    def advance(self, dataset: APInvoiceDataset) -> "InvoiceSession":
        """Next session around a dataset returned by the server."""
        vendor_num = dataset.header.vendor_num if dataset.headers else 0
        return replace(self, dataset=dataset, vendor_num=vendor_num or self.vendor_num)
