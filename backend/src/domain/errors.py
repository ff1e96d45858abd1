"""Domain exceptions shared by the export and import directions.

Boundaries (who catches what):
- ConfigurationError: fatal to the whole run
- ExportError family: propagates and aborts the remaining exports
- InvoiceFileError: aborts one invoice file
- InvoiceImportError family: aborts one invoice
"""


class BridgeError(Exception):
    """Base exception for the ERP/Yooz bridge."""
    pass


class ConfigurationError(BridgeError):
    """Settings are missing, invalid or cannot be decrypted."""
    pass


class ExportError(BridgeError):
    """An export type could not be produced."""
    pass


class MissingSourceColumnError(ExportError):
    """A BAQ row lacks a column the export profile requires.

    This is a schema mismatch between the BAQ and the profile; retrying
    will not help.
    """

    def __init__(self, column: str, profile: str):
        super().__init__(f"Column '{column}' required by export profile '{profile}' is missing from BAQ results")
        self.column = column
        self.profile = profile


class ValueFormatError(ExportError):
    """An amount or date value cannot be parsed for output."""

    def __init__(self, field: str, value: object, expected: str):
        super().__init__(f"Cannot format {field}={value!r} as {expected}")
        self.field = field
        self.value = value
        self.expected = expected


class InvoiceFileError(BridgeError):
    """An invoice CSV file cannot be read or parsed."""
    pass


class InvoiceImportError(BridgeError):
    """One logical invoice could not be imported."""
    pass


class VendorNotFoundError(InvoiceImportError):
    """Vendor ID from the invoice file does not exist in the ERP."""

    def __init__(self, vendor_id: str):
        super().__init__(f"Unable to locate vendor by ID '{vendor_id}'.")
        self.vendor_id = vendor_id


class DetailLineNotFoundError(InvoiceImportError):
    """The server did not produce the expected invoice detail line."""
    pass


class DistributionNotFoundError(InvoiceImportError):
    """No GL distribution row exists for an invoice detail line."""
    pass
