"""Authenticated async HTTP access to the HubSpot CRM API.

HubSpotHTTP owns the base URL, bearer headers and error translation shared
by the contacts client and the property provisioner. A fresh
httpx.AsyncClient is opened per call with httpx's default timeouts; there is
no retry and no cancellation once a call is issued.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from src.hubspot_bridge.config import HubSpotConfig
from src.hubspot_bridge.core.monitoring import hubspot_request_duration_seconds, hubspot_requests_total
from src.hubspot_bridge.errors import RemoteOperation, RemoteOperationError

logger = structlog.get_logger(__name__)


class HubSpotHTTP:
    """Thin request helper bound to one HubSpotConfig.

    Args:
        config: Validated runtime configuration (token, base URL, endpoints).
        transport: Optional httpx transport, used to stub HubSpot in tests.
    """

    def __init__(
        self,
        config: HubSpotConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {config.access_token}",
            "Content-Type": "application/json",
        }

    @property
    def config(self) -> HubSpotConfig:
        return self._config

    def endpoint(self, name: str) -> str:
        """Absolute URL of a named endpoint from the config table."""
        return f"{self._config.base_url}{self._config.endpoints[name]}"

    def _client(self) -> httpx.AsyncClient:
        """Create a new httpx client carrying the auth headers."""
        return httpx.AsyncClient(headers=self._headers, transport=self._transport)

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue one request and return the raw response, whatever its status.

        Transport failures (connection refused, DNS, timeouts) propagate as
        httpx.HTTPError; callers translate them with remote_error().
        """
        start_time = time.perf_counter()
        async with self._client() as client:
            try:
                response = await client.request(method, url, json=json, params=params)
            except httpx.HTTPError:
                hubspot_requests_total.labels(method=method, status_code="error").inc()
                raise
        hubspot_requests_total.labels(method=method, status_code=str(response.status_code)).inc()
        hubspot_request_duration_seconds.labels(method=method).observe(
            time.perf_counter() - start_time
        )
        return response


def error_payload(response: httpx.Response) -> Any:
    """HubSpot's structured error body, or the raw text if it is not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text[:400]


def remote_error(operation: RemoteOperation, exc: Exception) -> RemoteOperationError:
    """Translate an httpx failure into a RemoteOperationError.

    HTTP status errors keep the remote status and JSON payload as details;
    transport errors carry only their message.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        details = error_payload(response)
        message = f"Request failed with status code {response.status_code}"
        if isinstance(details, dict) and details.get("message"):
            message = f"{message}: {details['message']}"
        return RemoteOperationError(
            operation,
            message,
            details=details,
            status_code=response.status_code,
        )
    return RemoteOperationError(operation, str(exc) or exc.__class__.__name__)
