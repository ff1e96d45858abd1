"""Tabular record mapper - BAQ rows to ExportRecords.

Pure column selection and reordering. No value transformation happens here;
rendering of amounts and dates is the writers' job.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from domain.errors import MissingSourceColumnError
from .profiles import ColumnSpec, ExportProfile


@dataclass(frozen=True)
class ExportRecord:
    """One flat output record, values in profile column order."""
    profile: ExportProfile
    values: Tuple[str, ...]

    def items(self) -> Iterable[Tuple[ColumnSpec, str]]:
        return zip(self.profile.columns, self.values)

    def as_dict(self) -> Dict[str, str]:
        """Label → value, fillers excluded."""
        return {
            column.label: value
            for column, value in self.items()
            if not column.is_filler
        }

    def get(self, label: str) -> str:
        for column, value in self.items():
            if column.label == label:
                return value
        raise KeyError(label)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def map_row(row: Mapping[str, Any], profile: ExportProfile) -> ExportRecord:
    """Map one BAQ row to an ExportRecord.

    Args:
        row: Column name → value as returned by the BAQ
        profile: Target layout

    Returns:
        ExportRecord with one value per profile column

    Raises:
        MissingSourceColumnError: If a profile source column is absent from the row
    """
    values: List[str] = []
    for column in profile.columns:
        if column.is_filler:
            values.append("")
            continue
        if column.source not in row:
            raise MissingSourceColumnError(column.source, profile.name)
        values.append(_to_text(row[column.source]))
    return ExportRecord(profile=profile, values=tuple(values))


def map_rows(rows: Iterable[Mapping[str, Any]], profile: ExportProfile) -> List[ExportRecord]:
    """Map BAQ rows in order."""
    return [map_row(row, profile) for row in rows]
