"""File writers for Yooz export formats."""

from .delimited_writer import DelimitedFileWriter, Preamble, format_delimited_line
from .xml_document_writer import XmlDocumentWriter

__all__ = [
    "DelimitedFileWriter",
    "Preamble",
    "XmlDocumentWriter",
    "format_delimited_line",
]
