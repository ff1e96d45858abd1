"""Epicor REST API client.

Provides an HTTP client for the Epicor v1 REST API with:
- Basic authentication plus optional API key
- Company/plant context via the CallSettings header
- BAQ execution, OData list queries and business-object method calls
- Error mapping to ERPApiError subclasses

There are no automatic retries; a failed call surfaces immediately and the
caller decides what unit of work it aborts.

Usage:
    with EpicorRestClient.from_settings(settings) as client:
        rows = client.get_baq_results("YOOZ_Vendors")
        groups = client.list_records("Erp.BO.APInvGrpSvc", "APInvGrps",
                                     filter="GroupID eq 'Y_101926'")
"""

import json
import logging
import time
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from domain.exports.ports import BAQQueryPort
from observability.metrics import erp_call_duration_seconds, erp_calls_total
from .errors import (
    ERPApiError,
    ERPAuthenticationError,
    ERPBusinessError,
    ERPConnectionError,
    ERPNotFoundError,
)

logger = logging.getLogger(__name__)


class EpicorRestClient(BAQQueryPort):
    """HTTP client for the Epicor REST API.

    One instance is one run's session: it owns a single httpx.Client and must
    be closed (or used as a context manager) when the run ends.

    Attributes:
        base_url: ``{server}/{instance}/api/v1/``
        company: Company ID sent in CallSettings
    """

    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        server: str,
        instance: str,
        username: str,
        password: str,
        company: str,
        plant: str = "",
        api_key: Optional[str] = None,
        verify_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = f"{server.rstrip('/')}/{instance.strip('/')}/api/v1/"
        self.company = company

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "CallSettings": json.dumps({
                "Company": company,
                "Plant": plant,
                "Language": "",
                "FormatCulture": "",
            }),
        }
        if api_key:
            headers["X-API-Key"] = api_key

        self._client = httpx.Client(
            base_url=self.base_url,
            auth=(username, password),
            headers=headers,
            verify=verify_ssl,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, transport: Optional[httpx.BaseTransport] = None) -> "EpicorRestClient":
        """Build a client from application Settings."""
        return cls(
            server=settings.EPICOR_SERVER,
            instance=settings.EPICOR_INSTANCE,
            username=settings.EPICOR_USER,
            password=settings.secret("EPICOR_PASSWORD"),
            company=settings.EPICOR_COMPANY,
            plant=settings.EPICOR_PLANT,
            api_key=settings.secret("EPICOR_API_KEY") or None,
            verify_ssl=settings.EPICOR_VERIFY_SSL,
            timeout=settings.EPICOR_TIMEOUT_SECONDS,
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull the ERP error text out of an error response."""
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return body.get("ErrorMessage") or body.get("ReasonPhrase") or response.text
        return response.text

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make one request to the ERP.

        Args:
            method: HTTP method
            path: Path relative to base_url (e.g. "Erp.BO.APInvoiceSvc/Update")
            params: Query parameters
            payload: JSON body

        Returns:
            Parsed JSON response (floats parsed as Decimal)

        Raises:
            ERPConnectionError: Transport failure or timeout
            ERPAuthenticationError: 401/403
            ERPNotFoundError: 404
            ERPBusinessError: Any other error status
        """
        service = path.split("/", 1)[0]
        operation = path.rsplit("/", 1)[-1] or path
        started = time.perf_counter()
        status = "error"

        try:
            response = self._client.request(method, path, params=params, json=payload)
        except httpx.TimeoutException as e:
            raise ERPConnectionError(f"Request timeout for {path}: {e}") from e
        except httpx.RequestError as e:
            raise ERPConnectionError(f"Request failed for {path}: {e}") from e
        else:
            if response.status_code < 400:
                status = "success"
        finally:
            erp_calls_total.labels(service=service, method=operation, status=status).inc()
            erp_call_duration_seconds.labels(service=service).observe(time.perf_counter() - started)

        logger.debug(f"ERP {method} {path} -> {response.status_code}")

        if response.status_code in (401, 403):
            raise ERPAuthenticationError(
                f"Authentication failed for {path}: {self._error_message(response)}",
                status_code=response.status_code,
                response_body=response.text,
            )

        if response.status_code == 404:
            raise ERPNotFoundError(
                f"Not found: {path}",
                status_code=404,
                response_body=response.text,
            )

        if response.status_code >= 400:
            raise ERPBusinessError(
                f"ERP error calling {path}: {self._error_message(response)}",
                status_code=response.status_code,
                response_body=response.text,
            )

        if not response.content:
            return {}

        try:
            return response.json(parse_float=Decimal)
        except ValueError as e:
            raise ERPApiError(
                f"Invalid JSON from {path}: {e}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

    def get_baq_results(
        self,
        baq_id: str,
        parameters: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        """Run a BAQ and return its rows."""
        logger.debug(f"Calling BAQ {baq_id}...")
        result = self._request("GET", f"BaqSvc/{baq_id}/", params=dict(parameters or {}))
        rows = result.get("value", [])
        logger.info(f"BAQ {baq_id} returned {len(rows)} rows")
        return rows

    def list_records(
        self,
        service: str,
        collection: str,
        filter: Optional[str] = None,
        select: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """OData list query against a business-object collection.

        Args:
            service: Business object service, e.g. "Erp.BO.VendorSvc"
            collection: Entity set, e.g. "Vendors"
            filter: OData $filter expression
            select: Fields to return

        Returns:
            Matching records
        """
        params: Dict[str, str] = {}
        if filter:
            params["$filter"] = filter
        if select:
            params["$select"] = ",".join(select)

        result = self._request("GET", f"{service}/{collection}", params=params)
        return result.get("value", [])

    def create_record(self, service: str, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """POST a new record into a business-object collection."""
        return self._request("POST", f"{service}/{collection}", payload=data)

    def call_method(self, service: str, method: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Invoke a business-object method.

        Returns:
            Full method response: ``{"returnObj": ..., "parameters": {...}}``
        """
        return self._request("POST", f"{service}/{method}", payload=payload or {})


def odata_quote(value: str) -> str:
    """Quote a string literal for an OData $filter expression."""
    return "'" + str(value).replace("'", "''") + "'"
