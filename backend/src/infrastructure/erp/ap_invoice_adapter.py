"""Epicor AP invoice adapter.

Implements APInvoicePort over the Epicor REST business objects:

- Erp.BO.APInvGrpSvc: invoice groups
- Erp.BO.APInvoiceSvc: invoice headers, detail lines, receipts
- Erp.BO.VendorSvc: vendor ID -> VendorNum lookup

Method calls post ``{"ds": <tableset>, <proposed value>}`` and read the
recomputed tableset back from ``parameters.ds`` (or ``returnObj`` for
GetByID).
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from domain.invoices.dataset import APInvHedRow, APInvoiceDataset
from domain.invoices.ports import APInvoicePort
from .client import EpicorRestClient, odata_quote

logger = logging.getLogger(__name__)

GROUP_SERVICE = "Erp.BO.APInvGrpSvc"
GROUP_COLLECTION = "APInvGrps"
INVOICE_SERVICE = "Erp.BO.APInvoiceSvc"
INVOICE_COLLECTION = "APInvoices"
VENDOR_SERVICE = "Erp.BO.VendorSvc"
VENDOR_COLLECTION = "Vendors"


def _amount(value: Decimal) -> str:
    # Decimals travel as strings so no precision is lost through float.
    return str(value)


def _date(value: date) -> str:
    return value.isoformat()


class EpicorAPInvoiceAdapter(APInvoicePort):
    """APInvoicePort backed by EpicorRestClient."""

    def __init__(self, client: EpicorRestClient, company: str):
        self.client = client
        self.company = company

    def _call(self, method: str, ds: Optional[APInvoiceDataset] = None, **params: Any) -> APInvoiceDataset:
        payload: Dict[str, Any] = dict(params)
        if ds is not None:
            payload["ds"] = ds.to_payload()
        response = self.client.call_method(INVOICE_SERVICE, method, payload)

        result = (response.get("parameters") or {}).get("ds")
        if result is None:
            result = response.get("returnObj")
        return APInvoiceDataset.from_payload(result)

    # Invoice groups

    def group_exists(self, group_id: str) -> bool:
        rows = self.client.list_records(
            GROUP_SERVICE,
            GROUP_COLLECTION,
            filter=f"GroupID eq {odata_quote(group_id)}",
            select=["GroupID"],
        )
        return len(rows) > 0

    def create_group(self, group_id: str) -> None:
        self.client.create_record(
            GROUP_SERVICE,
            GROUP_COLLECTION,
            {"Company": self.company, "GroupID": group_id},
        )

    def unlock_group(self, group_id: str) -> None:
        self.client.call_method(GROUP_SERVICE, "UnlockGroup", {"groupID": group_id})

    # Lookups

    def find_vendor_num(self, vendor_id: str) -> Optional[int]:
        rows = self.client.list_records(
            VENDOR_SERVICE,
            VENDOR_COLLECTION,
            filter=f"VendorID eq {odata_quote(vendor_id)}",
            select=["VendorNum", "VendorID"],
        )
        if not rows:
            return None
        return int(rows[0]["VendorNum"])

    def find_invoice_header(self, invoice_num: str, group_id: str) -> Optional[APInvHedRow]:
        rows = self.client.list_records(
            INVOICE_SERVICE,
            INVOICE_COLLECTION,
            filter=f"InvoiceNum eq {odata_quote(invoice_num)} and GroupID eq {odata_quote(group_id)}",
            select=["Company", "VendorNum", "InvoiceNum", "GroupID"],
        )
        if not rows:
            return None
        return APInvHedRow.model_validate(rows[0])

    def get_by_id(self, vendor_num: int, invoice_num: str) -> APInvoiceDataset:
        return self._call("GetByID", vendorNum=vendor_num, invoiceNum=invoice_num)

    # Header

    def get_new_header(self, group_id: str) -> APInvoiceDataset:
        return self._call("GetNewAPInvHedInvoice", APInvoiceDataset(), cGroupID=group_id)

    def change_ref_po_num(self, ds: APInvoiceDataset, po_num: int) -> APInvoiceDataset:
        return self._call("ChangeRefPONum", ds, ProposedRefPONum=po_num)

    def change_vendor_id(self, ds: APInvoiceDataset, vendor_id: str) -> APInvoiceDataset:
        return self._call("ChangeVendorID", ds, ProposedVendorID=vendor_id)

    def change_invoice_date(self, ds: APInvoiceDataset, invoice_date: date) -> APInvoiceDataset:
        return self._call("ChangeInvoiceDateEx", ds, ProposedInvoiceDate=_date(invoice_date))

    def change_invoice_amount(self, ds: APInvoiceDataset, amount: Decimal) -> APInvoiceDataset:
        return self._call("ChangeInvoiceVendorAmt", ds, ProposedInvoiceVendorAmt=_amount(amount))

    def change_due_date(self, ds: APInvoiceDataset, due_date: date) -> APInvoiceDataset:
        return self._call("ChangeDueDate", ds, ProposedDueDate=_date(due_date))

    def update(self, ds: APInvoiceDataset) -> APInvoiceDataset:
        return self._call("Update", ds)

    # Receipts

    def get_uninvoiced_receipts(
        self, ds: APInvoiceDataset, vendor_num: int, invoice_num: str, po_num: int
    ) -> APInvoiceDataset:
        return self._call(
            "GetAPUninvoicedReceipts", ds,
            vendorNum=vendor_num, invoiceNum=invoice_num, poNum=po_num,
        )

    def select_receipt_lines(self, ds: APInvoiceDataset) -> APInvoiceDataset:
        return self._call("SelectUninvoicedRcptLines", ds)

    def invoice_selected_lines(self, ds: APInvoiceDataset) -> APInvoiceDataset:
        return self._call("InvoiceSelectedLines", ds)

    # Detail lines

    def get_new_unreceived_line(self, ds: APInvoiceDataset, vendor_num: int, invoice_num: str) -> APInvoiceDataset:
        return self._call("GetNewAPInvDtlUnReceived", ds, vendorNum=vendor_num, invoiceNum=invoice_num)

    def change_po_num(self, ds: APInvoiceDataset, po_num: int) -> APInvoiceDataset:
        return self._call("ChangePONum", ds, ProposedPONum=po_num)

    def change_po_line(self, ds: APInvoiceDataset, po_line: int) -> APInvoiceDataset:
        return self._call("ChangePOLine", ds, ProposedPOLine=po_line)

    def get_new_misc_line(self, ds: APInvoiceDataset, vendor_num: int, invoice_num: str) -> APInvoiceDataset:
        return self._call("GetNewAPInvDtlMiscInvoice", ds, vendorNum=vendor_num, invoiceNum=invoice_num)

    def change_vendor_qty(self, ds: APInvoiceDataset, quantity: Decimal) -> APInvoiceDataset:
        return self._call("ChangeVendorQty", ds, ProposedVendorQty=_amount(quantity))

    def change_unit_cost(self, ds: APInvoiceDataset, unit_cost: Decimal) -> APInvoiceDataset:
        return self._call("ChangeUnitCost", ds, ProposedUnitCost=_amount(unit_cost))

    def change_ext_cost(self, ds: APInvoiceDataset, ext_cost: Decimal) -> APInvoiceDataset:
        return self._call("ChangeExtCost", ds, ProposedExtCost=_amount(ext_cost))
