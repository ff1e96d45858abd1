"""Yooz GENERIC_FIELDS XML writer.

Layout:

    <message xmlns:xsi="..." xmlns:xsd="..." type="GENERIC_FIELDS">
      <document id="...">
        <field name="PAYMENT_REFERENCE" value="..."/>
        ...
      </document>
    </message>

The first column of the profile is the document id; every other non-filler
column becomes a <field> element.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, List

from domain.exports.formatting import format_value
from domain.exports.mapper import ExportRecord

logger = logging.getLogger(__name__)

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema"


class XmlDocumentWriter:
    """Writes ExportRecords as a GENERIC_FIELDS message document."""

    def __init__(self, message_type: str = "GENERIC_FIELDS"):
        self.message_type = message_type

    def build(self, records: Iterable[ExportRecord]) -> ET.Element:
        """Build the message element tree.

        Raises:
            ValueFormatError: If an amount/date value does not parse
        """
        message = ET.Element("message")
        message.set("xmlns:xsi", XSI_NAMESPACE)
        message.set("xmlns:xsd", XSD_NAMESPACE)
        message.set("type", self.message_type)

        for record in records:
            items = list(record.items())
            (_, document_id), fields = items[0], items[1:]

            document = ET.SubElement(message, "document")
            document.set("id", document_id)

            for column, value in fields:
                if column.is_filler:
                    continue
                field = ET.SubElement(document, "field")
                field.set("name", column.label)
                field.set("value", format_value(column, value))

        return message

    def write(self, records: Iterable[ExportRecord], path: Path) -> int:
        """Write records to path in input order.

        Returns:
            Number of documents written

        Raises:
            ValueFormatError: If an amount/date value does not parse
            OSError: On I/O failure
        """
        records: List[ExportRecord] = list(records)
        message = self.build(records)
        ET.indent(message)

        path.parent.mkdir(parents=True, exist_ok=True)
        ET.ElementTree(message).write(path, encoding="utf-8", xml_declaration=True)

        logger.info(f"Wrote {len(records)} documents to {path}")
        return len(records)
