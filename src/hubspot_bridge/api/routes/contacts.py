"""REST API endpoints for HubSpot contacts.

Validates inbound payloads, delegates to HubSpotContactsClient and shapes
the ``{"success": ..., "data": ...}`` responses. Remote failures propagate
as RemoteOperationError and are rendered as 500 by the handlers in main.py.
"""

from __future__ import annotations

import re
from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, Query, status

from src.hubspot_bridge.api.deps import get_contacts_client
from src.hubspot_bridge.api.validation import (
    validate_batch,
    validate_contact_create,
    validate_contact_update,
)
from src.hubspot_bridge.crm.contacts import HubSpotContactsClient
from src.hubspot_bridge.crm.field_mapping import to_search_filters
from src.hubspot_bridge.crm.schemas import ContactFields, ContactRecord
from src.hubspot_bridge.errors import NotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/contacts", tags=["contacts"])

DEFAULT_SEARCH_LIMIT = 10
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _contact_summary(contact: ContactRecord, timestamps: bool = True) -> dict[str, Any]:
    data: dict[str, Any] = {"contactId": contact.id, "properties": contact.properties}
    if timestamps:
        data["createdAt"] = contact.created_at
        data["updatedAt"] = contact.updated_at
    return data


def _parse_limit(raw: str | None) -> int:
    """Leading integer of ``raw`` (``"5abc"`` reads as 5).

    No digits, or a value below 1, falls back to the default.
    """
    match = _LEADING_INT.match(raw or "")
    limit = int(match.group(1)) if match else 0
    return limit if limit > 0 else DEFAULT_SEARCH_LIMIT


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contact(
    body: ContactFields,
    client: HubSpotContactsClient = Depends(get_contacts_client),
) -> dict[str, Any]:
    """Create a contact with standard and candidate properties."""
    data = body.model_dump(exclude_unset=True)
    validate_contact_create(data)

    contact = await client.create_contact(data)
    return {
        "success": True,
        "message": "Contact created successfully",
        "data": _contact_summary(contact, timestamps=False),
    }


@router.post("/batch", status_code=status.HTTP_201_CREATED)
async def batch_create_contacts(
    body: dict[str, Any] = Body(...),
    client: HubSpotContactsClient = Depends(get_contacts_client),
) -> dict[str, Any]:
    """Create several contacts in one HubSpot batch call.

    The whole batch is rejected if any element fails validation.
    """
    contacts = body.get("contacts")
    logger.info(
        "api.contact_batch_requested",
        count=len(contacts) if isinstance(contacts, list) else None,
    )
    items = validate_batch(contacts)

    created = await client.batch_create_contacts(items)
    return {
        "success": True,
        "message": "Contacts created successfully",
        "data": {
            "created": len(created),
            "contacts": [_contact_summary(c, timestamps=False) for c in created],
        },
    }


@router.get("")
async def search_contacts(
    firstName: str | None = Query(default=None),
    lastName: str | None = Query(default=None),
    email: str | None = Query(default=None),
    ownerId: str | None = Query(default=None),
    candidateExperience: str | None = Query(default=None),
    candidatePastCompany: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    client: HubSpotContactsClient = Depends(get_contacts_client),
) -> dict[str, Any]:
    """Search contacts by equality on any combination of supported fields."""
    filters = to_search_filters(
        {
            "firstName": firstName,
            "lastName": lastName,
            "email": email,
            "ownerId": ownerId,
            "candidateExperience": candidateExperience,
            "candidatePastCompany": candidatePastCompany,
        }
    )
    page_size = _parse_limit(limit)

    result = await client.search_contacts(filters, page_size)
    return {
        "success": True,
        "data": {
            "contacts": [_contact_summary(c) for c in result.contacts],
            "total": result.total,
            "limit": page_size,
            "filters": filters,
        },
    }


@router.get("/{contact_id}")
async def get_contact(
    contact_id: str,
    client: HubSpotContactsClient = Depends(get_contacts_client),
) -> dict[str, Any]:
    """Fetch a contact; 404 when HubSpot has no such record."""
    lookup = await client.get_contact(contact_id)
    if not lookup.found:
        raise NotFoundError("Contact not found", contact_id, id_field="contactId")

    return {"success": True, "data": _contact_summary(lookup.contact)}


@router.patch("/{contact_id}")
async def update_contact(
    contact_id: str,
    body: ContactFields,
    client: HubSpotContactsClient = Depends(get_contacts_client),
) -> dict[str, Any]:
    """Partially update a contact. Fields left out of the body are untouched."""
    data = body.model_dump(exclude_unset=True)
    validate_contact_update(data)

    contact = await client.update_contact(contact_id, data)
    return {
        "success": True,
        "message": "Contact updated successfully",
        "data": {
            "contactId": contact.id,
            "updatedProperties": list(data.keys()),
            "properties": contact.properties,
        },
    }


@router.delete("/{contact_id}")
async def delete_contact(
    contact_id: str,
    client: HubSpotContactsClient = Depends(get_contacts_client),
) -> dict[str, Any]:
    """Delete (archive) a contact."""
    deleted_id = await client.delete_contact(contact_id)
    return {
        "success": True,
        "message": "Contact deleted successfully",
        "contactId": deleted_id,
    }
