"""Tab-delimited writer for Yooz flat files.

Yooz reads tab-separated rows with no header record. Some layouts need a
two-line preamble: a format-version tag, then a free-text header line.

Quoting is narrower than csv.QUOTE_MINIMAL: only a field containing the
delimiter is quoted. Yooz treats quote characters in any other field as data.
Line breaks inside a field are written as a single space, since a quoted
line break would still end the row for Yooz.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from domain.exports.formatting import format_value
from domain.exports.mapper import ExportRecord

logger = logging.getLogger(__name__)

LINE_BREAKS = re.compile(r"[\r\n]+")


@dataclass(frozen=True)
class Preamble:
    """Vendor preamble written before the data rows."""
    version_line: str
    header_line: str


def _quote_field(field: str, delimiter: str, quotechar: str) -> str:
    field = LINE_BREAKS.sub(" ", field)
    if delimiter in field:
        return quotechar + field.replace(quotechar, quotechar * 2) + quotechar
    return field


def format_delimited_line(fields: Sequence[str], delimiter: str = "\t", quotechar: str = '"') -> str:
    """Join fields into one delimited line (without line terminator)."""
    return delimiter.join(_quote_field(field, delimiter, quotechar) for field in fields)


class DelimitedFileWriter:
    """Writes ExportRecords as delimited text.

    Example:
        writer = DelimitedFileWriter(preamble=Preamble("#V1", "Account\tLabel"))
        writer.write(records, Path("staging/ChartOfAccounts.csv"))
    """

    def __init__(
        self,
        delimiter: str = "\t",
        line_terminator: str = "\r\n",
        preamble: Optional[Preamble] = None,
        encoding: str = "utf-8",
    ):
        self.delimiter = delimiter
        self.line_terminator = line_terminator
        self.preamble = preamble
        self.encoding = encoding

    def render_record(self, record: ExportRecord) -> List[str]:
        """Format every value of a record for output.

        Raises:
            ValueFormatError: If an amount/date column does not parse
        """
        return [format_value(column, value) for column, value in record.items()]

    def write(self, records: Iterable[ExportRecord], path: Path) -> int:
        """Write records to path in input order.

        All values are rendered before the file is opened, so a formatting
        error never leaves a half-written file behind.

        Returns:
            Number of data rows written

        Raises:
            ValueFormatError: If an amount/date value does not parse
            OSError: On I/O failure
        """
        lines: List[str] = []
        if self.preamble is not None:
            lines.append(self.preamble.version_line)
            lines.append(self.preamble.header_line)

        row_count = 0
        for record in records:
            lines.append(format_delimited_line(self.render_record(record), self.delimiter))
            row_count += 1

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding=self.encoding, newline="") as handle:
            for line in lines:
                handle.write(line)
                handle.write(self.line_terminator)

        logger.info(f"Wrote {row_count} rows to {path}")
        return row_count
