"""Unit tests for export profiles and the BAQ row mapper."""

from decimal import Decimal

import pytest

from domain.errors import MissingSourceColumnError
from domain.exports import (
    CHART_OF_ACCOUNTS_CALCULATED,
    CHART_OF_ACCOUNTS_RAW,
    PAYMENTS,
    PURCHASE_ORDERS,
    VENDORS,
    chart_of_accounts_profile,
    map_row,
    map_rows,
)


def _row_for(profile, **overrides):
    row = {source: f"{source}-value" for source in profile.source_columns}
    row.update(overrides)
    return row


class TestProfiles:
    """Column layouts Yooz expects."""

    def test_chart_of_accounts_labels(self):
        assert CHART_OF_ACCOUNTS_CALCULATED.labels == (
            "GL Account Number", "GL Account Label", "Classification", "Action",
        )
        assert CHART_OF_ACCOUNTS_RAW.labels == (
            "Company", "GL Account Number", "GL Account Label", "Classification", "Action",
        )

    def test_vendor_layout_has_sixteen_fillers_before_state(self):
        labels = VENDORS.labels
        assert labels[:11] == (
            "Third_Party_Code", "Third_Party_Name", "USA_EIN_or_TIN", "Phone_Number",
            "Fax_Number", "Website", "Address", "Address2", "Zip_Code", "City",
            "Country_ISO_Code",
        )
        assert labels[11:27] == ("",) * 16
        assert labels[27] == "State_Code"
        assert len(labels) == 28

    def test_purchase_order_layout(self):
        labels = PURCHASE_ORDERS.labels
        assert len(labels) == 29
        assert labels[0] == "Action"
        assert labels[3] == "OrderNumber"
        assert labels[-1] == "AccountingCustomData"

    def test_payment_layout(self):
        assert PAYMENTS.labels == ("DOCUMENT_ID", "PAYMENT_REFERENCE", "PAYMENT_DATE", "PAYMENT_AMOUNT")

    def test_chart_of_accounts_profile_lookup(self):
        assert chart_of_accounts_profile("coa_raw") is CHART_OF_ACCOUNTS_RAW
        assert chart_of_accounts_profile("coa_calculated") is CHART_OF_ACCOUNTS_CALCULATED

    def test_unknown_chart_of_accounts_profile(self):
        with pytest.raises(ValueError, match="coa_calculated"):
            chart_of_accounts_profile("nope")

    def test_header_line_joins_labels(self):
        assert CHART_OF_ACCOUNTS_CALCULATED.header_line() == (
            "GL Account Number\tGL Account Label\tClassification\tAction"
        )


class TestMapRow:
    """map_row / map_rows behaviour."""

    def test_values_follow_profile_order_not_row_order(self):
        row = {
            "Calculated_Action": "A",
            "Calculated_Classification": "Expense",
            "Calculated_Description": "Office supplies",
            "Calculated_Account": "6000-00",
        }
        record = map_row(row, CHART_OF_ACCOUNTS_CALCULATED)

        assert record.values == ("6000-00", "Office supplies", "Expense", "A")

    def test_none_becomes_empty_string(self):
        record = map_row(_row_for(VENDORS, Vendor_FaxNum=None), VENDORS)

        assert record.get("Fax_Number") == ""

    def test_fillers_are_blank(self):
        record = map_row(_row_for(VENDORS), VENDORS)

        assert record.values[11:27] == ("",) * 16
        assert record.get("State_Code") == "Vendor_State-value"

    def test_as_dict_excludes_fillers(self):
        record = map_row(_row_for(VENDORS), VENDORS)

        assert "" not in record.as_dict()
        assert len(record.as_dict()) == 12

    def test_decimal_rendered_without_exponent(self):
        record = map_row(_row_for(PAYMENTS, Calculated_Amount=Decimal("1E+2")), PAYMENTS)

        assert record.get("PAYMENT_AMOUNT") == "100"

    def test_missing_source_column_raises(self):
        row = _row_for(PAYMENTS)
        del row["APTran_CheckNum"]

        with pytest.raises(MissingSourceColumnError) as exc_info:
            map_row(row, PAYMENTS)

        assert exc_info.value.column == "APTran_CheckNum"
        assert exc_info.value.profile == "payments"

    def test_map_rows_preserves_order(self):
        rows = [_row_for(PAYMENTS, Calculated_DocumentID=str(n)) for n in (3, 1, 2)]

        records = map_rows(rows, PAYMENTS)

        assert [r.get("DOCUMENT_ID") for r in records] == ["3", "1", "2"]
