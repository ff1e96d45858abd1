"""Unit tests for invoice line classification."""

from decimal import Decimal

import pytest

from domain.invoices import (
    APInvDtlRow,
    APUninvoicedRcptLine,
    InvoiceLine,
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


def receipt(po_num=1001, po_line=1, part_num="W100", pack_line=1):
    return APUninvoicedRcptLine(
        vendor_num=7, pack_slip="PS-1", pack_line=pack_line,
        po_num=po_num, po_line=po_line, part_num=part_num,
    )


class TestParsePONumber:

    @pytest.mark.parametrize("value,expected", [
        ("1001", 1001),
        (" 42 ", 42),
        ("0", None),
        ("", None),
        ("PO-1001", None),
        ("12.5", None),
        ("-3", None),
        ("١٢", None),
    ])
    def test_parse(self, value, expected):
        assert parse_po_number(value) == expected

    def test_is_po_line(self):
        assert is_po_line(InvoiceLine(invoice_num="I", po_number="1001"))
        assert not is_po_line(InvoiceLine(invoice_num="I", po_number="n/a"))


class TestClassifyLine:

    def test_po_with_matching_receipt(self):
        line = InvoiceLine(invoice_num="INV1", po_number="1001", po_line=1, product_code="W100")
        match = receipt()

        result = classify_line(line, [receipt(po_line=2, pack_line=2), match])

        assert result == POReceiptLine(po_num=1001, receipt=match)

    def test_po_without_matching_receipt(self):
        line = InvoiceLine(invoice_num="INV1", po_number="1001", po_line=3)

        result = classify_line(line, [receipt(po_line=1)])

        assert result == POUnreceivedLine(po_num=1001, po_line=3)

    def test_receipt_for_other_po_does_not_match(self):
        line = InvoiceLine(invoice_num="INV1", po_number="1001", po_line=1)

        assert isinstance(classify_line(line, [receipt(po_num=2002)]), POUnreceivedLine)

    def test_non_numeric_po_is_misc(self):
        line = InvoiceLine(invoice_num="INV2", po_number="", description="Office Supplies")

        assert classify_line(line, [receipt()]) == MiscLine(part_num="Office Supplies")

    def test_product_code_match_is_case_insensitive(self):
        line = InvoiceLine(invoice_num="INV1", po_number="1001", product_code="abc-123")
        match = receipt(po_line=4, part_num="ABC-123")

        assert classify_line(line, [match]) == POReceiptLine(po_num=1001, receipt=match)

    def test_po_line_takes_precedence_over_part_number(self):
        line = InvoiceLine(invoice_num="INV1", po_number="1001", po_line=2, product_code="W100")

        assert find_matching_receipt(line, [receipt(po_line=1, part_num="W100")]) is None

    def test_blank_product_code_never_matches(self):
        line = InvoiceLine(invoice_num="INV1", po_number="1001")

        assert find_matching_receipt(line, [receipt(part_num="")]) is None


class TestMiscPartNumber:

    @pytest.mark.parametrize("values,expected", [
        ({"product_label": "Label", "product_code": "Code", "description": "Desc"}, "Label"),
        ({"product_code": "Code", "description": "Desc"}, "Code"),
        ({"product_label": "  ", "description": "Desc"}, "Desc"),
        ({}, "INV9"),
    ])
    def test_fallback_chain(self, values, expected):
        line = InvoiceLine(invoice_num="INV9", **values)
        assert misc_part_number(line) == expected


class TestFindMatchingDetail:

    def test_latest_matching_detail_by_po_line(self):
        details = [
            APInvDtlRow(invoice_line=1, po_num=1001, po_line=1, part_num="W100"),
            APInvDtlRow(invoice_line=2, po_num=1001, po_line=2, part_num="W200"),
            APInvDtlRow(invoice_line=3, po_num=1001, po_line=1, part_num="W100"),
        ]
        line = InvoiceLine(invoice_num="INV1", po_number="1001", po_line=1, invoice_qty=Decimal("1"))

        assert find_matching_detail(line, details).invoice_line == 3

    def test_case_insensitive_part_number(self):
        details = [APInvDtlRow(invoice_line=1, po_num=1001, po_line=7, part_num="ABC-123")]
        line = InvoiceLine(invoice_num="INV1", po_number="1001", product_code="abc-123")

        assert find_matching_detail(line, details).invoice_line == 1

    def test_no_match(self):
        line = InvoiceLine(invoice_num="INV1", po_number="1001", po_line=9)

        assert find_matching_detail(line, []) is None
