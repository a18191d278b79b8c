"""Error taxonomy for the HubSpot bridge.

A small closed set of error variants. Route handlers and the exception
handlers in main.py select the HTTP status from the variant:

- ValidationError: client-supplied data failed local rules (400)
- NotFoundError: the remote side confirmed absence (404)
- RemoteOperationError: any other HubSpot failure (500)
- ConfigurationError: invalid startup settings (fatal, never served)
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class RemoteOperation(str, Enum):
    """Which remote call failed -- carried by RemoteOperationError."""

    CREATE = "create_failed"
    RETRIEVE = "retrieval_failed"
    UPDATE = "update_failed"
    SEARCH = "search_failed"
    DELETE = "delete_failed"
    BATCH_CREATE = "batch_create_failed"
    PROPERTY_CREATE = "property_create_failed"
    PROPERTY_RETRIEVE = "property_retrieval_failed"


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    def __init__(self, message: str, details: Any = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(BridgeError):
    """Request data failed local validation; no remote call was made."""


class NotFoundError(BridgeError):
    """Remote resource does not exist.

    ``id_field`` names the response key that echoes the identifier back
    (``contactId``, ``propertyName``).
    """

    def __init__(
        self,
        message: str,
        resource_id: str,
        id_field: str = "id",
        details: Any = None,
    ) -> None:
        self.resource_id = resource_id
        self.id_field = id_field
        super().__init__(message, details)


class RemoteOperationError(BridgeError):
    """HubSpot call failed (network, auth, or remote-side validation).

    Args:
        operation: The remote operation that failed.
        message: Transport or remote error message.
        details: Structured error payload returned by HubSpot, if any.
        status_code: Remote HTTP status, None for transport failures.
    """

    def __init__(
        self,
        operation: RemoteOperation,
        message: str,
        details: Any = None,
        status_code: int | None = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        super().__init__(message, details)


class ConfigurationError(BridgeError):
    """Required configuration is missing or malformed."""

    def __init__(self, problems: list[dict[str, str]]) -> None:
        self.problems = problems
        super().__init__(
            f"Environment validation failed: {len(problems)} error(s) found",
            details=problems,
        )
