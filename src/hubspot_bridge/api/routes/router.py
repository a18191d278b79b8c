"""API router -- aggregates all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.hubspot_bridge.api.routes import contacts, health, properties

router = APIRouter()

router.include_router(health.router)
router.include_router(properties.router)
router.include_router(contacts.router)
