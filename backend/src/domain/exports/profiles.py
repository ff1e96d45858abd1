"""Export profiles - the fixed column layouts Yooz expects per export type.

A profile is an ordered list of ColumnSpec entries. Each entry names the BAQ
column it reads from and the label Yooz knows it by. Filler entries have no
source column and always produce a blank value; Yooz's vendor layout reserves
a run of unused columns before State_Code.

Column order in the written file is the profile order, never the BAQ order.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ColumnKind(str, Enum):
    """How a column value is rendered by the file writers."""
    TEXT = "text"
    AMOUNT = "amount"  # two decimals
    DATE = "date"      # yyyyMMdd


@dataclass(frozen=True)
class ColumnSpec:
    """One output column.

    Attributes:
        source: BAQ column name, or None for a blank filler column
        label: Column label in the Yooz layout
        kind: Rendering kind for the writer
        nullable: Whether a blank AMOUNT/DATE value may pass through as blank
    """
    source: Optional[str]
    label: str
    kind: ColumnKind = ColumnKind.TEXT
    nullable: bool = True

    @property
    def is_filler(self) -> bool:
        return self.source is None


def filler() -> ColumnSpec:
    """A fixed blank column."""
    return ColumnSpec(source=None, label="")


@dataclass(frozen=True)
class ExportProfile:
    """Ordered column layout for one export type."""
    name: str
    columns: Tuple[ColumnSpec, ...]

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(column.label for column in self.columns)

    @property
    def source_columns(self) -> Tuple[str, ...]:
        return tuple(column.source for column in self.columns if not column.is_filler)

    def header_line(self, delimiter: str = "\t") -> str:
        """Column labels joined for a preamble header line."""
        return delimiter.join(self.labels)


# BAQ computes Classification and Action server-side.
CHART_OF_ACCOUNTS_CALCULATED = ExportProfile(
    name="coa_calculated",
    columns=(
        ColumnSpec("Calculated_Account", "GL Account Number"),
        ColumnSpec("Calculated_Description", "GL Account Label"),
        ColumnSpec("Calculated_Classification", "Classification"),
        ColumnSpec("Calculated_Action", "Action"),
    ),
)

# Plain GL account BAQ; Classification and Action come from raw columns and
# the company is exported as the first column.
CHART_OF_ACCOUNTS_RAW = ExportProfile(
    name="coa_raw",
    columns=(
        ColumnSpec("GLAccount_Company", "Company"),
        ColumnSpec("GLAccount_GLAcctDisp", "GL Account Number"),
        ColumnSpec("GLAccount_AccountDesc", "GL Account Label"),
        ColumnSpec("COAActCat_CategoryID", "Classification"),
        ColumnSpec("GLAccount_Action", "Action"),
    ),
)

VENDOR_FILLER_COLUMNS = 16

VENDORS = ExportProfile(
    name="vendors",
    columns=(
        ColumnSpec("Vendor_VendorID", "Third_Party_Code"),
        ColumnSpec("Vendor_Name", "Third_Party_Name"),
        ColumnSpec("Vendor_TaxPayerID", "USA_EIN_or_TIN"),
        ColumnSpec("Vendor_PhoneNum", "Phone_Number"),
        ColumnSpec("Vendor_FaxNum", "Fax_Number"),
        ColumnSpec("Vendor_VendURL", "Website"),
        ColumnSpec("Vendor_Address1", "Address"),
        ColumnSpec("Vendor_Address2", "Address2"),
        ColumnSpec("Vendor_ZIP", "Zip_Code"),
        ColumnSpec("Vendor_City", "City"),
        ColumnSpec("Country_ISOCode", "Country_ISO_Code"),
        *(filler() for _ in range(VENDOR_FILLER_COLUMNS)),
        ColumnSpec("Vendor_State", "State_Code"),
    ),
)

PURCHASE_ORDERS = ExportProfile(
    name="purchase_orders",
    columns=(
        ColumnSpec("Calculated_Action", "Action"),
        ColumnSpec("Vendor_VendorID", "VendorCode"),
        ColumnSpec("Vendor_Name", "VendorName"),
        ColumnSpec("POHeader_PONum", "OrderNumber"),
        ColumnSpec("Calculated_OrderDate", "OrderDate", ColumnKind.DATE),
        ColumnSpec("POHeader_TotalOrder", "Amount", ColumnKind.AMOUNT),
        ColumnSpec("Calculated_AmountExlTax", "AmountExlTax", ColumnKind.AMOUNT),
        ColumnSpec("POHeader_CurrencyCode", "Currency"),
        ColumnSpec("UserFile_Name", "OrderCreator"),
        ColumnSpec("PurAgent_BuyerID", "OrderApprover"),
        ColumnSpec("Calculated_Status", "Status"),
        # ItemNumber/ItemCode look swapped but match what Yooz expects.
        ColumnSpec("Calculated_ItemCode", "ItemNumber"),
        ColumnSpec("PODetail_PartNum", "ItemCode"),
        ColumnSpec("PODetail_LineDesc", "ItemDescription"),
        ColumnSpec("PODetail_UnitCost", "ItemUnitPrice"),
        ColumnSpec("PODetail_OrderQty", "QuantityOrdered"),
        ColumnSpec("Calculated_QtyReceived", "QuantityReceived"),
        ColumnSpec("Calculated_QtyCharged", "QuantityCharged"),
        ColumnSpec("Calculated_AmountExlTax_Dtl", "AmountExlTax_Dtl", ColumnKind.AMOUNT),
        ColumnSpec("Calculated_DiscountedAmount_Dtl", "DiscountedAmount", ColumnKind.AMOUNT),
        ColumnSpec("Calculated_TaxProfileCode", "TaxProfileCode"),
        ColumnSpec("Calculated_TaxAmount", "TaxAmount", ColumnKind.AMOUNT),
        ColumnSpec("Calculated_GLAccount", "GLAccount"),
        ColumnSpec("Calculated_CostCenterDims", "CostCenterDims"),
        ColumnSpec("Calculated_CostCenters", "CostCenters"),
        ColumnSpec("Calculated_Subsidiary", "Subsidiary"),
        ColumnSpec("Calculated_VendorItemCode", "VendorItemCode"),
        ColumnSpec("Calculated_HeaderCustomData", "HeaderCustomData"),
        ColumnSpec("Calculated_AccountingCustomData", "AccountingCustomData"),
    ),
)

# First column is the XML document id; the rest become <field> elements.
PAYMENTS = ExportProfile(
    name="payments",
    columns=(
        ColumnSpec("Calculated_DocumentID", "DOCUMENT_ID"),
        ColumnSpec("APTran_CheckNum", "PAYMENT_REFERENCE"),
        ColumnSpec("APTran_TranDate", "PAYMENT_DATE", ColumnKind.DATE, nullable=False),
        ColumnSpec("Calculated_Amount", "PAYMENT_AMOUNT", ColumnKind.AMOUNT, nullable=False),
    ),
)

_CHART_OF_ACCOUNTS_PROFILES = {
    CHART_OF_ACCOUNTS_CALCULATED.name: CHART_OF_ACCOUNTS_CALCULATED,
    CHART_OF_ACCOUNTS_RAW.name: CHART_OF_ACCOUNTS_RAW,
}


def chart_of_accounts_profile(name: str) -> ExportProfile:
    """Resolve a chart-of-accounts profile by name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return _CHART_OF_ACCOUNTS_PROFILES[name]
    except KeyError:
        raise ValueError(
            f"Unknown chart of accounts profile '{name}'. "
            f"Available: {', '.join(_CHART_OF_ACCOUNTS_PROFILES)}"
        ) from None
