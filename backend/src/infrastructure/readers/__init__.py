"""File readers for Yooz downloads."""

from .invoice_csv_reader import InvoiceCSVReader, OPTIONAL_HEADERS, REQUIRED_HEADERS, decode_file_bytes

__all__ = ["InvoiceCSVReader", "OPTIONAL_HEADERS", "REQUIRED_HEADERS", "decode_file_bytes"]
