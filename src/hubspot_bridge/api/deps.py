"""FastAPI dependencies resolving the CRM clients from app.state."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from src.hubspot_bridge.crm.contacts import HubSpotContactsClient
from src.hubspot_bridge.crm.properties import PropertyProvisioner


def get_contacts_client(request: Request) -> HubSpotContactsClient:
    """Retrieve the contacts client from app.state, 503 if not available."""
    client = getattr(request.app.state, "contacts_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="HubSpot contacts client not initialized",
        )
    return client


def get_property_provisioner(request: Request) -> PropertyProvisioner:
    """Retrieve the property provisioner from app.state, 503 if not available."""
    provisioner = getattr(request.app.state, "property_provisioner", None)
    if provisioner is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="HubSpot property provisioner not initialized",
        )
    return provisioner
