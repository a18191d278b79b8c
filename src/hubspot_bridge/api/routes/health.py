"""Liveness and capability endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from src.hubspot_bridge import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check.

    No HubSpot call is made -- just that the server is running.
    """
    return {
        "success": True,
        "message": "HubSpot candidate bridge is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }


@router.get("/")
async def capabilities():
    """List the available endpoints."""
    return {
        "success": True,
        "message": "HubSpot candidate bridge - custom properties and contacts API",
        "version": __version__,
        "endpoints": {
            "health": "GET /health",
            "metrics": "GET /metrics",
            "properties": {
                "status": "GET /api/properties",
                "create": "POST /api/properties",
                "setup": "POST /api/properties/setup",
                "getProperty": "GET /api/properties/:name",
            },
            "contacts": {
                "create": "POST /api/contacts",
                "get": "GET /api/contacts/:id",
                "update": "PATCH /api/contacts/:id",
                "search": "GET /api/contacts",
                "delete": "DELETE /api/contacts/:id",
                "batchCreate": "POST /api/contacts/batch",
            },
        },
    }
