"""Export domain - BAQ row mapping into Yooz fixed-layout records."""

from .formatting import format_amount, format_date, format_value
from .mapper import ExportRecord, map_row, map_rows
from .ports import BAQQueryPort
from .profiles import (
    CHART_OF_ACCOUNTS_CALCULATED,
    CHART_OF_ACCOUNTS_RAW,
    PAYMENTS,
    PURCHASE_ORDERS,
    VENDORS,
    ColumnKind,
    ColumnSpec,
    ExportProfile,
    chart_of_accounts_profile,
    filler,
)

__all__ = [
    "BAQQueryPort",
    "CHART_OF_ACCOUNTS_CALCULATED",
    "CHART_OF_ACCOUNTS_RAW",
    "ColumnKind",
    "ColumnSpec",
    "ExportProfile",
    "ExportRecord",
    "PAYMENTS",
    "PURCHASE_ORDERS",
    "VENDORS",
    "chart_of_accounts_profile",
    "filler",
    "format_amount",
    "format_date",
    "format_value",
    "map_row",
    "map_rows",
]
