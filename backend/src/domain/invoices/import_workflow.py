"""Invoice import workflow.

Replays one logical Yooz invoice as the AP invoice call chain:

    group ensured -> header existence check -> header create (if absent)
    -> one line import per invoice line -> GL allocation per line

Header fields are proposed one call at a time, in a fixed order, because the
server recomputes dependent fields (vendor, terms, due date, currency) after
each change. Any exception aborts the current invoice only; the caller
decides what happens next.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Tuple

from domain.errors import DetailLineNotFoundError, InvoiceImportError, VendorNotFoundError
from .classification import (
    MiscLine,
    POReceiptLine,
    POUnreceivedLine,
    LineClassification,
    classify_line,
    find_matching_detail,
    is_po_line,
    parse_po_number,
)
from .dataset import InvoiceSession
from .models import InvoiceLine, LogicalInvoice
from .ports import APInvoicePort

logger = logging.getLogger(__name__)


class InvoiceImportWorkflow:
    """Imports logical invoices through an APInvoicePort.

    Example:
        workflow = InvoiceImportWorkflow(EpicorAPInvoiceAdapter(client, company))
        workflow.ensure_group("Y_101926")
        for invoice in group_invoices(lines):
            workflow.import_invoice(invoice, "Y_101926")
        workflow.unlock_group("Y_101926")
    """

    def __init__(
        self,
        port: APInvoicePort,
        gl_separator: str = "|",
        today: Callable[[], date] = date.today,
    ):
        self.port = port
        self.gl_separator = gl_separator
        self._today = today

    def ensure_group(self, group_id: str) -> None:
        """Create the invoice group unless it already exists."""
        logger.info(f"Looking for invoice group: {group_id}")
        if self.port.group_exists(group_id):
            logger.info("Found group.")
            return
        logger.info("Creating group.")
        self.port.create_group(group_id)

    def unlock_group(self, group_id: str) -> None:
        logger.info(f"Unlocking invoice group: {group_id}")
        self.port.unlock_group(group_id)

    def import_invoice(self, invoice: LogicalInvoice, group_id: str) -> InvoiceSession:
        """Import one logical invoice into a group.

        Returns:
            Final session after the last line was saved

        Raises:
            InvoiceImportError: Invoice data cannot be imported
            ERPApiError: Any failing remote call
        """
        logger.info(f"Adding invoice '{invoice.invoice_num}' to group '{group_id}'.")

        session = self.open_header(invoice, group_id)
        for line in invoice.lines:
            session = self.import_line(session, line)

        logger.info(f"Invoice '{invoice.invoice_num}' imported with {len(invoice.lines)} lines.")
        return session

    # Header

    def open_header(self, invoice: LogicalInvoice, group_id: str) -> InvoiceSession:
        """Load the existing header for (invoice number, group) or create it."""
        existing = self.port.find_invoice_header(invoice.invoice_num, group_id)
        if existing is not None:
            logger.info(f"Invoice '{invoice.invoice_num}' already exists in group '{group_id}', skipping header creation.")
            dataset = self.port.get_by_id(existing.vendor_num, invoice.invoice_num)
            return InvoiceSession(
                invoice_num=invoice.invoice_num,
                group_id=group_id,
                dataset=dataset,
                vendor_num=existing.vendor_num,
            )
        return self.create_header(invoice, group_id)

    def create_header(self, invoice: LogicalInvoice, group_id: str) -> InvoiceSession:
        port = self.port
        session = InvoiceSession(
            invoice_num=invoice.invoice_num,
            group_id=group_id,
            dataset=port.get_new_header(group_id),
        )

        po_num = parse_po_number(invoice.po_number)
        if po_num is not None:
            session = session.advance(port.change_ref_po_num(session.dataset, po_num))
        else:
            session = self._assign_vendor(session, invoice.vendor_id)

        invoice_date = invoice.invoice_date or self._today()
        session = session.advance(port.change_invoice_date(session.dataset, invoice_date))

        if invoice.invoice_amount is None:
            raise InvoiceImportError(f"Invoice '{invoice.invoice_num}' has no invoice amount")
        session = session.advance(port.change_invoice_amount(session.dataset, invoice.invoice_amount))

        changes = {"invoice_num": invoice.invoice_num}
        if invoice.document_id:
            changes["invoice_ref"] = invoice.document_id
        session = session.advance(session.dataset.with_header(**changes))

        if invoice.due_date is not None:
            session = session.advance(port.change_due_date(session.dataset, invoice.due_date))

        session = session.advance(port.update(session.dataset))
        logger.info(f"Invoice '{invoice.invoice_num}' created.")
        return session

    def _assign_vendor(self, session: InvoiceSession, vendor_id: str) -> InvoiceSession:
        logger.info(f"Looking up VendorNum for ID '{vendor_id}'.")
        vendor_num = self.port.find_vendor_num(vendor_id) if vendor_id else None
        if vendor_num is None:
            raise VendorNotFoundError(vendor_id)
        session = session.advance(self.port.change_vendor_id(session.dataset, vendor_id))
        return session if session.vendor_num else replace(session, vendor_num=vendor_num)

    # Lines

    def classify(self, session: InvoiceSession, line: InvoiceLine) -> Tuple[InvoiceSession, LineClassification]:
        """Classify a line, fetching open receipts for PO lines."""
        if not is_po_line(line):
            return session, classify_line(line)

        po_num = parse_po_number(line.po_number)
        dataset = self.port.get_uninvoiced_receipts(session.dataset, session.vendor_num, session.invoice_num, po_num)
        session = session.advance(dataset)
        return session, classify_line(line, dataset.receipts)

    def import_line(self, session: InvoiceSession, line: InvoiceLine) -> InvoiceSession:
        session, classification = self.classify(session, line)

        if isinstance(classification, POReceiptLine):
            logger.info(f"Invoicing receipt {classification.receipt.pack_slip}/{classification.receipt.pack_line} for PO {classification.po_num}")
            session = self._invoice_receipt(session, classification)
            session, invoice_line = self._complete_po_line(session, line)
        elif isinstance(classification, POUnreceivedLine):
            logger.info(f"No open receipt for PO {classification.po_num}, adding unreceived line")
            session = self._add_unreceived_line(session, classification)
            session, invoice_line = self._complete_po_line(session, line)
        else:
            logger.info(f"Adding misc line for part: {classification.part_num}")
            session, invoice_line = self._add_misc_line(session, line, classification)

        return self.allocate_gl(session, line, invoice_line)

    def _invoice_receipt(self, session: InvoiceSession, classification: POReceiptLine) -> InvoiceSession:
        dataset = session.dataset.with_receipt_selected(classification.receipt)
        dataset = self.port.select_receipt_lines(dataset)
        return session.advance(self.port.invoice_selected_lines(dataset))

    def _add_unreceived_line(self, session: InvoiceSession, classification: POUnreceivedLine) -> InvoiceSession:
        if classification.po_line is None:
            raise InvoiceImportError(
                f"PO {classification.po_num} has no open receipt and the invoice line has no PO line number"
            )
        port = self.port
        dataset = port.get_new_unreceived_line(session.dataset, session.vendor_num, session.invoice_num)
        dataset = port.change_po_num(dataset, classification.po_num)
        dataset = port.change_po_line(dataset, classification.po_line)
        return session.advance(port.update(dataset))

    def _complete_po_line(self, session: InvoiceSession, line: InvoiceLine) -> Tuple[InvoiceSession, int]:
        """Re-fetch the invoice, then set quantity and unit cost on the PO detail line."""
        port = self.port
        dataset = port.get_by_id(session.vendor_num, session.invoice_num)

        detail = find_matching_detail(line, dataset.details)
        if detail is None:
            raise DetailLineNotFoundError(
                f"No detail line for PO {line.po_number} line {line.po_line or line.product_code!r} "
                f"on invoice '{session.invoice_num}'"
            )
        if line.invoice_qty is None:
            raise InvoiceImportError(f"Invoice '{session.invoice_num}' PO line has no invoiced quantity")

        dataset = dataset.with_detail(detail.invoice_line)
        dataset = port.change_vendor_qty(dataset, line.invoice_qty)
        if line.unit_price is not None:
            dataset = port.change_unit_cost(dataset, line.unit_price)
        return session.advance(port.update(dataset)), detail.invoice_line

    def _add_misc_line(
        self, session: InvoiceSession, line: InvoiceLine, classification: MiscLine
    ) -> Tuple[InvoiceSession, int]:
        port = self.port
        dataset = port.get_by_id(session.vendor_num, session.invoice_num)
        dataset = port.get_new_misc_line(dataset, session.vendor_num, session.invoice_num)
        invoice_line = dataset.new_detail().invoice_line

        dataset = dataset.with_new_detail(
            part_num=classification.part_num,
            description=line.description or classification.part_num,
        )
        dataset = port.change_ext_cost(dataset, self._misc_ext_cost(session, line))
        return session.advance(port.update(dataset)), invoice_line

    @staticmethod
    def _misc_ext_cost(session: InvoiceSession, line: InvoiceLine) -> Decimal:
        if line.invoice_amount is not None:
            return line.invoice_amount
        if line.invoice_qty is not None and line.unit_price is not None:
            return line.invoice_qty * line.unit_price
        raise InvoiceImportError(f"Invoice '{session.invoice_num}' misc line has neither amount nor quantity and price")

    # GL allocation

    def gl_account_code(self, line: InvoiceLine) -> str:
        """GL account code from account, entity and cost center segments."""
        segments = [line.gl_account, line.entity, line.cost_center]
        return self.gl_separator.join(segment for segment in segments if segment)

    def allocate_gl(self, session: InvoiceSession, line: InvoiceLine, invoice_line: int) -> InvoiceSession:
        """Point the line's most recent GL distribution at the invoice's account."""
        if not line.gl_account:
            logger.warning(f"Invoice '{session.invoice_num}' line {invoice_line} has no G/L account, keeping default distribution")
            return session

        dataset = session.dataset
        distribution = dataset.latest_distribution(invoice_line)
        dataset = dataset.with_distribution(
            invoice_line,
            distribution.inv_exp_seq,
            gl_account=self.gl_account_code(line),
            seg_value1=line.gl_account,
            seg_value2=line.entity,
            seg_value3=line.cost_center,
        )
        return session.advance(self.port.update(dataset))

