"""REST API endpoints for HubSpot contact properties.

Exposes catalog status, ad-hoc property creation, one-shot catalog
provisioning and single-property lookup.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.hubspot_bridge.api.deps import get_property_provisioner
from src.hubspot_bridge.crm.properties import PropertyProvisioner, build_property_definition
from src.hubspot_bridge.crm.schemas import ProvisioningSummary
from src.hubspot_bridge.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/properties", tags=["properties"])


class CreatePropertyRequest(BaseModel):
    """Request body for creating an ad-hoc property (all optional, checked in handler)."""

    name: str | None = None
    label: str | None = None
    type: str | None = None
    fieldType: str | None = None
    description: str | None = None
    groupName: str | None = None


@router.get("")
async def get_properties_status(
    provisioner: PropertyProvisioner = Depends(get_property_provisioner),
) -> dict[str, Any]:
    """Report which catalog properties exist in HubSpot."""
    lookups = await provisioner.check_properties_exist()
    existing = sum(1 for lookup in lookups if lookup.exists)
    return {
        "success": True,
        "data": {
            "properties": [lookup.to_response() for lookup in lookups],
            "summary": {
                "total": len(lookups),
                "existing": existing,
                "missing": len(lookups) - existing,
            },
        },
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_property(
    body: CreatePropertyRequest,
    provisioner: PropertyProvisioner = Depends(get_property_provisioner),
) -> dict[str, Any]:
    """Create one property from a caller-supplied definition."""
    if not body.name or not body.label or not body.type:
        raise ValidationError("Missing required fields: name, label, and type are required")

    definition = build_property_definition(
        name=body.name,
        label=body.label,
        type=body.type,
        field_type=body.fieldType,
        description=body.description,
        group_name=body.groupName,
    )
    result = await provisioner.create_property(definition)
    return {
        "success": True,
        "message": "Custom property created successfully",
        "data": result.data,
    }


@router.post("/setup")
async def setup_properties(
    provisioner: PropertyProvisioner = Depends(get_property_provisioner),
) -> JSONResponse:
    """Provision the full catalog. 201 when every property is in place, 207 otherwise."""
    results = await provisioner.create_all_custom_properties()
    summary = ProvisioningSummary.from_results(results)
    all_ok = summary.failed == 0

    return JSONResponse(
        status_code=status.HTTP_201_CREATED if all_ok else status.HTTP_207_MULTI_STATUS,
        content={
            "success": all_ok,
            "message": (
                "All properties created successfully"
                if all_ok
                else "Some properties failed to create"
            ),
            "data": {
                "results": [r.model_dump(mode="json") for r in results],
                "summary": summary.model_dump(),
            },
        },
    )


@router.get("/{name}")
async def get_property(
    name: str,
    provisioner: PropertyProvisioner = Depends(get_property_provisioner),
) -> dict[str, Any]:
    """Fetch one property definition; 404 when it does not exist."""
    lookup = await provisioner.get_property(name)
    if not lookup.exists:
        raise NotFoundError("Property not found", name, id_field="propertyName")
    return {"success": True, "data": lookup.data}
