"""Yooz invoice CSV reader.

Reads one invoice export into InvoiceLine models. Header names are matched
exactly; Yooz is inconsistent about casing between exports, and a renamed
column must fail loudly rather than import blanks.
"""

import csv
import logging
from io import StringIO
from pathlib import Path
from typing import List

import chardet
from pydantic import ValidationError

from domain.errors import InvoiceFileError
from domain.invoices.models import InvoiceLine

logger = logging.getLogger(__name__)

REQUIRED_HEADERS = (
    "Entity",
    "Vendor ID",
    "Post Date",
    "Invoice Date",
    "Due Date",
    "G/L Account",
    "Invoice Number",
    "Invoice Amount",
    "Description",
    "Cost Center",
    "Sub Account",
    "PO#",
    "Product code",
    "Product label",
    "Invoiced quantity",
    "Unit price",
    "PO line#",
)
OPTIONAL_HEADERS = ("Document ID",)


def decode_file_bytes(file_bytes: bytes) -> str:
    """Decode file content using the detected encoding."""
    detected = chardet.detect(file_bytes)
    encoding = detected['encoding'] or 'utf-8'

    try:
        text = file_bytes.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        # Fallback to utf-8 with error handling
        text = file_bytes.decode('utf-8', errors='replace')

    return text.lstrip("\ufeff")


class InvoiceCSVReader:
    """Parses Yooz invoice CSV files.

    Example:
        reader = InvoiceCSVReader()
        lines = reader.read(Path("incoming/invoices-20261019.csv"))
    """

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter

    def parse(self, text: str, source: str = "<string>") -> List[InvoiceLine]:
        """Parse CSV text into invoice lines, in file order.

        Raises:
            InvoiceFileError: Malformed CSV, missing header or a row that fails validation
        """
        reader = csv.DictReader(StringIO(text, newline=""), delimiter=self.delimiter)
        try:
            headers = reader.fieldnames or []

            missing = [name for name in REQUIRED_HEADERS if name not in headers]
            if missing:
                raise InvoiceFileError(f"{source}: missing required columns: {', '.join(missing)}")

            lines = []
            for row_num, row in enumerate(reader, start=2):  # Start at 2 (row 1 is header)
                if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
                    continue
                # DictReader files surplus cells under the None key
                row.pop(None, None)
                try:
                    lines.append(InvoiceLine.model_validate(row))
                except ValidationError as e:
                    problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
                    raise InvoiceFileError(f"{source} row {row_num}: {problems}") from e
        except csv.Error as e:
            raise InvoiceFileError(f"{source} line {reader.line_num}: malformed CSV: {e}") from e

        logger.info(f"Parsed {len(lines)} invoice lines from {source}")
        return lines

    def read(self, path: Path) -> List[InvoiceLine]:
        """Read and parse one invoice file.

        Raises:
            InvoiceFileError: File unreadable or not a valid invoice export
        """
        logger.info(f"Parsing file: {path}")
        try:
            file_bytes = path.read_bytes()
        except OSError as e:
            raise InvoiceFileError(f"Cannot read {path}: {e}") from e

        return self.parse(decode_file_bytes(file_bytes), source=path.name)
