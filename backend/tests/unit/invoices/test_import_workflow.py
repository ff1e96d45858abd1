"""Unit tests for InvoiceImportWorkflow against an in-memory AP invoice port."""

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from domain.errors import InvoiceImportError, VendorNotFoundError
from domain.invoices import (
    APInvDtlRow,
    APInvExpRow,
    APInvHedRow,
    APInvoiceDataset,
    APInvoicePort,
    APUninvoicedRcptLine,
    InvoiceImportWorkflow,
    InvoiceLine,
    group_invoices,
)

GROUP = "Y_101926"


class FakeAPInvoicePort(APInvoicePort):
    """Simulates the server side of the AP invoice business objects.

    Saved invoices are kept per (vendor_num, invoice_num); saving clears row
    flags and gives every detail line a default GL distribution.
    """

    def __init__(self):
        self.groups = set()
        self.vendors = {"ACME": 7}
        self.po_vendors = {1001: (7, "ACME")}
        self.po_parts = {(1001, 1): "W100", (1001, 2): "W200"}
        self.receipts = []
        self.invoices = {}
        self.unlocked = []
        self.calls = []

    def called(self, name):
        return [args for call, args in self.calls if call == name]

    def call_names(self):
        return [call for call, _ in self.calls]

    def _record(self, name, *args):
        self.calls.append((name, args))

    @staticmethod
    def _next_line(ds):
        return max((row.invoice_line for row in ds.details), default=0) + 1

    @staticmethod
    def _edited_detail(ds):
        return [row for row in ds.details if row.row_mod][-1]

    def _store(self, ds):
        details = [row.model_copy(update={"row_mod": ""}) for row in ds.details]
        distributions = [row.model_copy(update={"row_mod": ""}) for row in ds.distributions]
        for row in details:
            if not any(dist.invoice_line == row.invoice_line for dist in distributions):
                distributions.append(APInvExpRow(
                    invoice_num=row.invoice_num,
                    invoice_line=row.invoice_line,
                    inv_exp_seq=1,
                    gl_account="DEFAULT",
                ))
        stored = ds.model_copy(update={
            "headers": [row.model_copy(update={"row_mod": ""}) for row in ds.headers],
            "details": details,
            "distributions": distributions,
        })
        self.invoices[(stored.header.vendor_num, stored.header.invoice_num)] = stored
        return stored

    # Invoice groups

    def group_exists(self, group_id):
        self._record("group_exists", group_id)
        return group_id in self.groups

    def create_group(self, group_id):
        self._record("create_group", group_id)
        self.groups.add(group_id)

    def unlock_group(self, group_id):
        self._record("unlock_group", group_id)
        self.unlocked.append(group_id)

    # Lookups

    def find_vendor_num(self, vendor_id):
        self._record("find_vendor_num", vendor_id)
        return self.vendors.get(vendor_id)

    def find_invoice_header(self, invoice_num, group_id):
        self._record("find_invoice_header", invoice_num, group_id)
        for ds in self.invoices.values():
            if ds.header.invoice_num == invoice_num and ds.header.group_id == group_id:
                return ds.header
        return None

    def get_by_id(self, vendor_num, invoice_num):
        self._record("get_by_id", vendor_num, invoice_num)
        return self.invoices[(vendor_num, invoice_num)]

    # Header

    def get_new_header(self, group_id):
        self._record("get_new_header", group_id)
        return APInvoiceDataset(headers=[APInvHedRow(company="ACME", group_id=group_id, row_mod="A")])

    def change_ref_po_num(self, ds, po_num):
        self._record("change_ref_po_num", po_num)
        vendor_num, vendor_id = self.po_vendors[po_num]
        return ds.with_header(ref_po_num=po_num, vendor_num=vendor_num, vendor_id=vendor_id)

    def change_vendor_id(self, ds, vendor_id):
        self._record("change_vendor_id", vendor_id)
        return ds.with_header(vendor_id=vendor_id, vendor_num=self.vendors[vendor_id])

    def change_invoice_date(self, ds, invoice_date):
        self._record("change_invoice_date", invoice_date)
        return ds.with_header(invoice_date=datetime.combine(invoice_date, time()))

    def change_invoice_amount(self, ds, amount):
        self._record("change_invoice_amount", amount)
        return ds.with_header(invoice_vendor_amt=amount)

    def change_due_date(self, ds, due_date):
        self._record("change_due_date", due_date)
        return ds.with_header(due_date=datetime.combine(due_date, time()))

    def update(self, ds):
        self._record("update")
        return self._store(ds)

    # Receipts

    def get_uninvoiced_receipts(self, ds, vendor_num, invoice_num, po_num):
        self._record("get_uninvoiced_receipts", vendor_num, invoice_num, po_num)
        open_receipts = [r for r in self.receipts if r.vendor_num == vendor_num and r.po_num == po_num]
        return ds.model_copy(update={"receipts": open_receipts})

    def select_receipt_lines(self, ds):
        self._record("select_receipt_lines", [r.pack_line for r in ds.receipts if r.select_line])
        return ds

    def invoice_selected_lines(self, ds):
        self._record("invoice_selected_lines")
        details = list(ds.details)
        for receipt in ds.receipts:
            if not receipt.select_line:
                continue
            details.append(APInvDtlRow(
                vendor_num=receipt.vendor_num,
                invoice_num=ds.header.invoice_num,
                invoice_line=max((row.invoice_line for row in details), default=0) + 1,
                part_num=receipt.part_num,
                po_num=receipt.po_num,
                po_line=receipt.po_line,
                row_mod="A",
            ))
            self.receipts = [
                r for r in self.receipts
                if (r.pack_slip, r.pack_line) != (receipt.pack_slip, receipt.pack_line)
            ]
        return self._store(ds.model_copy(update={"details": details, "receipts": []}))

    # Detail lines

    def _new_line(self, ds, vendor_num, invoice_num):
        row = APInvDtlRow(
            vendor_num=vendor_num,
            invoice_num=invoice_num,
            invoice_line=self._next_line(ds),
            row_mod="A",
        )
        return ds.model_copy(update={"details": ds.details + [row]})

    def get_new_unreceived_line(self, ds, vendor_num, invoice_num):
        self._record("get_new_unreceived_line", vendor_num, invoice_num)
        return self._new_line(ds, vendor_num, invoice_num)

    def get_new_misc_line(self, ds, vendor_num, invoice_num):
        self._record("get_new_misc_line", vendor_num, invoice_num)
        return self._new_line(ds, vendor_num, invoice_num)

    def change_po_num(self, ds, po_num):
        self._record("change_po_num", po_num)
        return ds.with_new_detail(po_num=po_num)

    def change_po_line(self, ds, po_line):
        self._record("change_po_line", po_line)
        row = ds.new_detail()
        return ds.with_new_detail(po_line=po_line, part_num=self.po_parts.get((row.po_num, po_line), ""))

    def change_vendor_qty(self, ds, quantity):
        self._record("change_vendor_qty", quantity)
        row = self._edited_detail(ds)
        return ds.with_detail(row.invoice_line, vendor_qty=quantity, ext_cost=quantity * row.unit_cost)

    def change_unit_cost(self, ds, unit_cost):
        self._record("change_unit_cost", unit_cost)
        row = self._edited_detail(ds)
        return ds.with_detail(row.invoice_line, unit_cost=unit_cost, ext_cost=row.vendor_qty * unit_cost)

    def change_ext_cost(self, ds, ext_cost):
        self._record("change_ext_cost", ext_cost)
        row = self._edited_detail(ds)
        return ds.with_detail(row.invoice_line, ext_cost=ext_cost)


@pytest.fixture
def port():
    return FakeAPInvoicePort()


@pytest.fixture
def workflow(port):
    return InvoiceImportWorkflow(port, gl_separator="|", today=lambda: date(2026, 10, 19))


def po_line(**overrides):
    values = dict(
        entity="01",
        vendor_id="ACME",
        invoice_date=date(2026, 10, 1),
        gl_account="5000",
        invoice_num="INV1",
        invoice_amount=Decimal("50.00"),
        cost_center="100",
        po_number="1001",
        product_code="W100",
        invoice_qty=Decimal("5"),
        unit_price=Decimal("10.00"),
        po_line=1,
    )
    values.update(overrides)
    return InvoiceLine(**values)


def misc_line(**overrides):
    values = dict(
        vendor_id="ACME",
        invoice_date=date(2026, 10, 2),
        gl_account="6100",
        invoice_num="INV2",
        invoice_amount=Decimal("42.50"),
        description="Office Supplies",
    )
    values.update(overrides)
    return InvoiceLine(**values)


def import_lines(workflow, *lines):
    return [workflow.import_invoice(invoice, GROUP) for invoice in group_invoices(lines)]


class TestInvoiceGroup:

    def test_creates_missing_group(self, workflow, port):
        workflow.ensure_group(GROUP)

        assert port.called("create_group") == [(GROUP,)]

    def test_existing_group_is_reused(self, workflow, port):
        port.groups.add(GROUP)

        workflow.ensure_group(GROUP)

        assert port.called("create_group") == []

    def test_unlock(self, workflow, port):
        workflow.unlock_group(GROUP)

        assert port.unlocked == [GROUP]


class TestReceiptLine:

    @pytest.fixture(autouse=True)
    def open_receipt(self, port):
        port.receipts = [APUninvoicedRcptLine(
            vendor_num=7, pack_slip="PS-1", pack_line=1, po_num=1001, po_line=1, part_num="W100",
        )]

    def test_receipt_is_invoiced_and_allocated(self, workflow, port):
        import_lines(workflow, po_line())

        saved = port.invoices[(7, "INV1")]
        assert saved.header.ref_po_num == 1001
        assert saved.header.invoice_vendor_amt == Decimal("50.00")
        assert saved.header.group_id == GROUP

        detail = saved.detail(1)
        assert detail.vendor_qty == Decimal("5")
        assert detail.unit_cost == Decimal("10.00")
        assert detail.ext_cost == Decimal("50.00")

        distribution = saved.latest_distribution(1)
        assert distribution.gl_account == "5000|01|100"
        assert (distribution.seg_value1, distribution.seg_value2, distribution.seg_value3) == ("5000", "01", "100")

        assert port.called("select_receipt_lines") == [([1],)]
        assert "get_new_unreceived_line" not in port.call_names()
        assert "change_vendor_id" not in port.call_names()

    def test_receipts_fetched_for_po_and_vendor(self, workflow, port):
        import_lines(workflow, po_line())

        assert port.called("get_uninvoiced_receipts") == [(7, "INV1", 1001)]

    def test_product_code_match_ignores_case(self, workflow, port):
        import_lines(workflow, po_line(po_line=None, product_code="w100"))

        assert "invoice_selected_lines" in port.call_names()
        assert port.invoices[(7, "INV1")].detail(1).vendor_qty == Decimal("5")

    def test_header_calls_in_order(self, workflow, port):
        import_lines(workflow, po_line(due_date=date(2026, 10, 31), document_id="DOC-9"))

        header_calls = [
            name for name in port.call_names()
            if name in ("get_new_header", "change_ref_po_num", "change_invoice_date",
                        "change_invoice_amount", "change_due_date", "update")
        ]
        assert header_calls[:6] == [
            "get_new_header",
            "change_ref_po_num",
            "change_invoice_date",
            "change_invoice_amount",
            "change_due_date",
            "update",
        ]
        header = port.invoices[(7, "INV1")].header
        assert header.invoice_ref == "DOC-9"
        assert header.due_date == datetime(2026, 10, 31)


class TestUnreceivedLine:

    def test_unreceived_po_line_is_added(self, workflow, port):
        import_lines(workflow, po_line(po_line=2, product_code="W200", invoice_qty=Decimal("3")))

        saved = port.invoices[(7, "INV1")]
        detail = saved.detail(1)
        assert (detail.po_num, detail.po_line, detail.part_num) == (1001, 2, "W200")
        assert detail.vendor_qty == Decimal("3")
        assert port.called("change_po_num") == [(1001,)]
        assert port.called("change_po_line") == [(2,)]
        assert "invoice_selected_lines" not in port.call_names()

    def test_unreceived_line_needs_po_line(self, workflow, port):
        invoice = group_invoices([po_line(po_line=None)])[0]

        with pytest.raises(InvoiceImportError):
            workflow.import_invoice(invoice, GROUP)

    def test_missing_quantity_fails(self, workflow):
        invoice = group_invoices([po_line(invoice_qty=None)])[0]

        with pytest.raises(InvoiceImportError):
            workflow.import_invoice(invoice, GROUP)


class TestMiscLine:

    def test_misc_line(self, workflow, port):
        import_lines(workflow, misc_line())

        saved = port.invoices[(7, "INV2")]
        detail = saved.detail(1)
        assert detail.part_num == "Office Supplies"
        assert detail.ext_cost == Decimal("42.50")
        assert saved.latest_distribution(1).gl_account == "6100"

        names = port.call_names()
        assert port.called("change_vendor_id") == [("ACME",)]
        assert "change_ref_po_num" not in names
        assert "get_uninvoiced_receipts" not in names

    def test_ext_cost_from_quantity_and_price(self, workflow, port):
        import_lines(workflow, misc_line(
            invoice_amount=Decimal("100.00"),
        ), misc_line(invoice_amount=None, invoice_qty=Decimal("2"), unit_price=Decimal("1.25")))

        assert port.called("change_ext_cost") == [(Decimal("100.00"),), (Decimal("2.50"),)]

    def test_ext_cost_cannot_be_derived(self, workflow):
        invoice = group_invoices([
            misc_line(),
            misc_line(invoice_amount=None),
        ])[0]

        with pytest.raises(InvoiceImportError):
            workflow.import_invoice(invoice, GROUP)

    def test_blank_gl_account_keeps_default_distribution(self, workflow, port):
        import_lines(workflow, misc_line(gl_account=""))

        assert port.invoices[(7, "INV2")].latest_distribution(1).gl_account == "DEFAULT"

    def test_invoice_date_defaults_to_today(self, workflow, port):
        import_lines(workflow, misc_line(invoice_date=None))

        assert port.called("change_invoice_date") == [(date(2026, 10, 19),)]


class TestHeader:

    def test_unknown_vendor(self, workflow, port):
        invoice = group_invoices([misc_line(vendor_id="NOPE")])[0]

        with pytest.raises(VendorNotFoundError, match="NOPE"):
            workflow.import_invoice(invoice, GROUP)
        assert "update" not in port.call_names()

    def test_missing_amount(self, workflow, port):
        invoice = group_invoices([misc_line(invoice_amount=None)])[0]

        with pytest.raises(InvoiceImportError):
            workflow.import_invoice(invoice, GROUP)
        assert port.invoices == {}

    def test_header_values_come_from_first_line(self, workflow, port):
        port.vendors["OTHER"] = 8
        import_lines(
            workflow,
            misc_line(),
            misc_line(vendor_id="OTHER", invoice_amount=Decimal("1.00"), description="Paper"),
        )

        assert port.called("change_vendor_id") == [("ACME",)]
        assert port.called("change_invoice_amount") == [(Decimal("42.50"),)]
        saved = port.invoices[(7, "INV2")]
        assert [row.part_num for row in saved.details] == ["Office Supplies", "Paper"]

    def test_existing_header_is_not_recreated(self, workflow, port):
        import_lines(workflow, misc_line())
        import_lines(workflow, misc_line(description="Toner"))

        assert len(port.called("get_new_header")) == 1
        saved = port.invoices[(7, "INV2")]
        assert [row.part_num for row in saved.details] == ["Office Supplies", "Toner"]


def test_gl_account_code_skips_blank_segments(workflow):
    assert workflow.gl_account_code(InvoiceLine(invoice_num="I", gl_account="5000", cost_center="100")) == "5000|100"
    assert workflow.gl_account_code(InvoiceLine(invoice_num="I")) == ""
