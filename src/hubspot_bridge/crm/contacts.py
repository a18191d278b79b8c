"""HubSpot contacts client -- create, read, update, search, delete, batch create.

Each method maps the camelCase contact payload through field_mapping, issues
one HubSpot CRM v3 call and returns a typed result. Remote failures are
raised as RemoteOperationError tagged with the failing operation. A remote
404 on read is not an error: get_contact returns a NOT_FOUND lookup.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx
import structlog

from src.hubspot_bridge.crm.field_mapping import (
    DEFAULT_CONTACT_PROPERTIES,
    to_create_properties,
    to_update_properties,
)
from src.hubspot_bridge.crm.http import HubSpotHTTP, remote_error
from src.hubspot_bridge.crm.schemas import (
    ContactLookup,
    ContactRecord,
    ContactSearchResult,
    LookupStatus,
)
from src.hubspot_bridge.errors import RemoteOperation, RemoteOperationError, ValidationError

logger = structlog.get_logger(__name__)


class HubSpotContactsClient:
    """Async client for the HubSpot contacts object API.

    Args:
        http: Shared HubSpot request helper (auth headers, base URL).
    """

    def __init__(self, http: HubSpotHTTP) -> None:
        self._http = http

    @property
    def _contacts_url(self) -> str:
        return self._http.endpoint("contacts")

    async def create_contact(self, data: Mapping[str, Any]) -> ContactRecord:
        """Create a contact with standard and custom candidate properties.

        Empty values are stripped from the payload before sending.

        Raises:
            RemoteOperationError: HubSpot rejected the create (CREATE).
        """
        properties = to_create_properties(data)
        logger.info("hubspot.contact_create_started", properties=properties)

        try:
            response = await self._http.request(
                "POST", self._contacts_url, json={"properties": properties}
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            error = remote_error(RemoteOperation.CREATE, exc)
            logger.error(
                "hubspot.contact_create_failed",
                error=error.message,
                details=error.details,
            )
            raise error from exc

        contact = ContactRecord.model_validate(response.json())
        logger.info(
            "hubspot.contact_created",
            contact_id=contact.id,
            properties=contact.properties,
        )
        return contact

    async def get_contact(
        self,
        contact_id: str,
        properties: Sequence[str] | str | None = None,
    ) -> ContactLookup:
        """Fetch a contact by id.

        Args:
            contact_id: HubSpot record id.
            properties: Properties to return, as a list or comma-separated
                string. Defaults to the nine mapped contact properties.

        Returns:
            ContactLookup tagged FOUND with the record, or NOT_FOUND when
            HubSpot answers 404.

        Raises:
            RemoteOperationError: Any other failure (RETRIEVE).
        """
        if properties is None:
            properties = DEFAULT_CONTACT_PROPERTIES
        props_param = properties if isinstance(properties, str) else ",".join(properties)
        logger.info("hubspot.contact_get_started", contact_id=contact_id)

        try:
            response = await self._http.request(
                "GET",
                f"{self._contacts_url}/{contact_id}",
                params={"properties": props_param},
            )
        except httpx.HTTPError as exc:
            error = remote_error(RemoteOperation.RETRIEVE, exc)
            logger.error("hubspot.contact_get_failed", contact_id=contact_id, error=error.message)
            raise error from exc

        if response.status_code == 404:
            logger.warning("hubspot.contact_not_found", contact_id=contact_id)
            return ContactLookup(status=LookupStatus.NOT_FOUND, contact_id=contact_id)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            error = remote_error(RemoteOperation.RETRIEVE, exc)
            logger.error(
                "hubspot.contact_get_failed",
                contact_id=contact_id,
                error=error.message,
                details=error.details,
            )
            raise error from exc

        contact = ContactRecord.model_validate(response.json())
        logger.info(
            "hubspot.contact_retrieved",
            contact_id=contact.id,
            properties_count=len(contact.properties),
        )
        return ContactLookup(status=LookupStatus.FOUND, contact_id=contact.id, contact=contact)

    async def update_contact(self, contact_id: str, data: Mapping[str, Any]) -> ContactRecord:
        """Partially update a contact; only fields present in ``data`` are sent.

        Raises:
            ValidationError: No recognized field was supplied. No call is made.
            RemoteOperationError: HubSpot rejected the update (UPDATE).
        """
        properties = to_update_properties(data)
        if not properties:
            raise ValidationError("No valid fields to update provided")

        logger.info("hubspot.contact_update_started", contact_id=contact_id, properties=properties)

        try:
            response = await self._http.request(
                "PATCH",
                f"{self._contacts_url}/{contact_id}",
                json={"properties": properties},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            error = remote_error(RemoteOperation.UPDATE, exc)
            logger.error(
                "hubspot.contact_update_failed",
                contact_id=contact_id,
                error=error.message,
                details=error.details,
            )
            raise error from exc

        contact = ContactRecord.model_validate(response.json())
        logger.info(
            "hubspot.contact_updated",
            contact_id=contact.id,
            updated_properties=list(properties.keys()),
        )
        return contact

    async def search_contacts(
        self,
        filters: Mapping[str, Any] | None = None,
        limit: int = 10,
    ) -> ContactSearchResult:
        """Search contacts with AND-ed equality filters on HubSpot property names.

        Filter values are sent in string form; None values are skipped.
        With no usable filters the search has no filter group at all.

        Raises:
            RemoteOperationError: Search failed (SEARCH).
        """
        filters = filters or {}
        logger.info("hubspot.contact_search_started", filters=dict(filters), limit=limit)

        predicates = [
            {"propertyName": name, "operator": "EQ", "value": str(value)}
            for name, value in filters.items()
            if value is not None
        ]
        payload: dict[str, Any] = {
            "filterGroups": [{"filters": predicates}] if predicates else [],
            "properties": DEFAULT_CONTACT_PROPERTIES,
            "limit": limit,
        }

        try:
            response = await self._http.request(
                "POST", self._http.endpoint("contacts_search"), json=payload
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            error = remote_error(RemoteOperation.SEARCH, exc)
            logger.error("hubspot.contact_search_failed", error=error.message, details=error.details)
            raise error from exc

        body = response.json()
        result = ContactSearchResult(
            contacts=[ContactRecord.model_validate(item) for item in body.get("results", [])],
            total=body.get("total", 0),
        )
        logger.info(
            "hubspot.contact_search_completed",
            total=result.total,
            returned=len(result.contacts),
        )
        return result

    async def delete_contact(self, contact_id: str) -> str:
        """Archive a contact in HubSpot and return its id.

        Raises:
            RemoteOperationError: Delete failed (DELETE).
        """
        logger.info("hubspot.contact_delete_started", contact_id=contact_id)

        try:
            response = await self._http.request("DELETE", f"{self._contacts_url}/{contact_id}")
            response.raise_for_status()
        except httpx.HTTPError as exc:
            error = remote_error(RemoteOperation.DELETE, exc)
            logger.error(
                "hubspot.contact_delete_failed",
                contact_id=contact_id,
                error=error.message,
                details=error.details,
            )
            raise error from exc

        logger.info("hubspot.contact_deleted", contact_id=contact_id)
        return contact_id

    async def batch_create_contacts(
        self, contacts: Sequence[Mapping[str, Any]]
    ) -> list[ContactRecord]:
        """Create several contacts with a single batch call.

        The batch succeeds or fails as a whole; HubSpot errors for
        individual inputs surface as one aggregate error.

        Raises:
            RemoteOperationError: Batch create failed (BATCH_CREATE).
        """
        logger.info("hubspot.contact_batch_create_started", count=len(contacts))
        inputs = [{"properties": to_create_properties(item)} for item in contacts]

        try:
            response = await self._http.request(
                "POST",
                f"{self._http.endpoint('contacts_batch')}/create",
                json={"inputs": inputs},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            error = remote_error(RemoteOperation.BATCH_CREATE, exc)
            logger.error(
                "hubspot.contact_batch_create_failed",
                error=error.message,
                details=error.details,
            )
            raise error from exc

        # 207 Multi-Status means some inputs failed
        body = response.json()
        if response.status_code == 207 or body.get("errors"):
            error = RemoteOperationError(
                RemoteOperation.BATCH_CREATE,
                f"Batch create partially failed: {len(body.get('errors', []))} input(s) rejected",
                details=body.get("errors"),
                status_code=response.status_code,
            )
            logger.error(
                "hubspot.contact_batch_create_failed",
                error=error.message,
                details=error.details,
            )
            raise error

        created = [ContactRecord.model_validate(item) for item in body.get("results", [])]
        logger.info("hubspot.contact_batch_created", created=len(created))
        return created
