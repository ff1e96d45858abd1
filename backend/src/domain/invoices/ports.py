"""AP Invoice Port - Domain interface for the ERP AP invoice business objects.

Architecture: Hexagonal - Port interface in domain layer, implemented by
infrastructure.erp.ap_invoice_adapter.EpicorAPInvoiceAdapter.

Every change_* verb posts the current dataset with one proposed value and
returns the dataset recomputed by the server. Change verbs act on the row the
dataset flags as added or modified.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional

from .dataset import APInvHedRow, APInvoiceDataset


class APInvoicePort(ABC):
    """Port interface for invoice groups, headers and lines."""

    # Invoice groups

    @abstractmethod
    def group_exists(self, group_id: str) -> bool:
        pass

    @abstractmethod
    def create_group(self, group_id: str) -> None:
        pass

    @abstractmethod
    def unlock_group(self, group_id: str) -> None:
        pass

    # Lookups

    @abstractmethod
    def find_vendor_num(self, vendor_id: str) -> Optional[int]:
        """Internal vendor number for a vendor ID, or None if unknown."""
        pass

    @abstractmethod
    def find_invoice_header(self, invoice_num: str, group_id: str) -> Optional[APInvHedRow]:
        """Existing invoice header in the group, or None."""
        pass

    @abstractmethod
    def get_by_id(self, vendor_num: int, invoice_num: str) -> APInvoiceDataset:
        pass

    # Header

    @abstractmethod
    def get_new_header(self, group_id: str) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_ref_po_num(self, ds: APInvoiceDataset, po_num: int) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_vendor_id(self, ds: APInvoiceDataset, vendor_id: str) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_invoice_date(self, ds: APInvoiceDataset, invoice_date: date) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_invoice_amount(self, ds: APInvoiceDataset, amount: Decimal) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_due_date(self, ds: APInvoiceDataset, due_date: date) -> APInvoiceDataset:
        pass

    @abstractmethod
    def update(self, ds: APInvoiceDataset) -> APInvoiceDataset:
        """Persist all added/modified rows."""
        pass

    # Receipts

    @abstractmethod
    def get_uninvoiced_receipts(
        self, ds: APInvoiceDataset, vendor_num: int, invoice_num: str, po_num: int
    ) -> APInvoiceDataset:
        pass

    @abstractmethod
    def select_receipt_lines(self, ds: APInvoiceDataset) -> APInvoiceDataset:
        """Post the receipt selection flags."""
        pass

    @abstractmethod
    def invoice_selected_lines(self, ds: APInvoiceDataset) -> APInvoiceDataset:
        """Turn the selected receipt lines into invoice detail lines."""
        pass

    # Detail lines

    @abstractmethod
    def get_new_unreceived_line(self, ds: APInvoiceDataset, vendor_num: int, invoice_num: str) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_po_num(self, ds: APInvoiceDataset, po_num: int) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_po_line(self, ds: APInvoiceDataset, po_line: int) -> APInvoiceDataset:
        pass

    @abstractmethod
    def get_new_misc_line(self, ds: APInvoiceDataset, vendor_num: int, invoice_num: str) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_vendor_qty(self, ds: APInvoiceDataset, quantity: Decimal) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_unit_cost(self, ds: APInvoiceDataset, unit_cost: Decimal) -> APInvoiceDataset:
        pass

    @abstractmethod
    def change_ext_cost(self, ds: APInvoiceDataset, ext_cost: Decimal) -> APInvoiceDataset:
        pass
