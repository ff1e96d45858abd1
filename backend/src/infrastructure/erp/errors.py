"""Exceptions raised by the Epicor REST client."""

from typing import Optional

from domain.errors import BridgeError


class ERPApiError(BridgeError):
    """Base exception for ERP REST API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class ERPConnectionError(ERPApiError):
    """The ERP server could not be reached or the request timed out."""
    pass


class ERPAuthenticationError(ERPApiError):
    """Authentication failed (401/403)."""
    pass


class ERPNotFoundError(ERPApiError):
    """Service, method or record not found (404)."""
    pass


class ERPBusinessError(ERPApiError):
    """The business object rejected the call (400/409/500 with an ERP message)."""
    pass
