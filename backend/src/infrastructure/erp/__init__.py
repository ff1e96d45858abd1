"""Epicor REST adapters."""

from .ap_invoice_adapter import EpicorAPInvoiceAdapter
from .client import EpicorRestClient, odata_quote
from .errors import (
    ERPApiError,
    ERPAuthenticationError,
    ERPBusinessError,
    ERPConnectionError,
    ERPNotFoundError,
)

__all__ = [
    "EpicorAPInvoiceAdapter",
    "EpicorRestClient",
    "ERPApiError",
    "ERPAuthenticationError",
    "ERPBusinessError",
    "ERPConnectionError",
    "ERPNotFoundError",
    "odata_quote",
]
