"""Test fixtures for the HubSpot bridge.

Provides:
- FakeHubSpot: in-memory stand-in for the HubSpot CRM v3 API, served
  through httpx.MockTransport (no network)
- A validated HubSpotConfig with pacing disabled
- Contacts client and property provisioner wired to the fake
- Async HTTP client for the FastAPI app
"""

from __future__ import annotations

import json
import re
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.hubspot_bridge.config import HubSpotConfig
from src.hubspot_bridge.crm.contacts import HubSpotContactsClient
from src.hubspot_bridge.crm.http import HubSpotHTTP
from src.hubspot_bridge.crm.pacing import IntervalPacer
from src.hubspot_bridge.crm.properties import PropertyProvisioner
from src.hubspot_bridge.main import create_app

TEST_TOKEN = "pat-na1-11111111-2222-3333-4444-555555555555"
BASE_URL = "https://api.hubapi.com"

_CONTACT_PATH = re.compile(r"^/crm/v3/objects/contacts/(?P<id>[^/]+)$")
_PROPERTY_PATH = re.compile(r"^/crm/v3/properties/contacts/(?P<name>[^/]+)$")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class FakeHubSpot:
    """In-memory HubSpot CRM API double.

    Stores contacts and properties, records every request, and can be told
    to fail a route with ``fail(method, path, status, body)``. Property
    values are stored as strings, as HubSpot returns them.
    """

    def __init__(self) -> None:
        self.contacts: dict[str, dict[str, Any]] = {}
        self.properties: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self._failures: dict[tuple[str, str], tuple[int, Any]] = {}
        self._next_id = 1000
        self.transport = httpx.MockTransport(self.handle)

    # ── Test controls ──────────────────────────────────────────────────────

    def fail(self, method: str, path: str, status_code: int, body: Any = None) -> None:
        self._failures[(method, path)] = (status_code, body)

    def add_contact(self, properties: dict[str, Any]) -> str:
        contact_id = self._new_id()
        self.contacts[contact_id] = self._record(contact_id, properties)
        return contact_id

    def add_property(self, definition: dict[str, Any]) -> None:
        self.properties[definition["name"]] = dict(definition)

    def json_bodies(self, method: str, path: str) -> list[Any]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == method and r.url.path == path and r.content
        ]

    # ── Internals ──────────────────────────────────────────────────────────

    def _new_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    @staticmethod
    def _stringify(properties: dict[str, Any]) -> dict[str, Any]:
        return {k: (None if v is None else str(v)) for k, v in properties.items()}

    def _record(self, contact_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        now = _now()
        return {
            "id": contact_id,
            "properties": {
                **self._stringify(properties),
                "hs_object_id": contact_id,
                "createdate": now,
            },
            "createdAt": now,
            "updatedAt": now,
            "archived": False,
        }

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if (method, path) in self._failures:
            status_code, body = self._failures[(method, path)]
            return httpx.Response(status_code, json=body)

        body = json.loads(request.content) if request.content else None

        if path == "/crm/v3/objects/contacts" and method == "POST":
            contact_id = self._new_id()
            self.contacts[contact_id] = self._record(contact_id, body["properties"])
            return httpx.Response(201, json=self.contacts[contact_id])

        if path == "/crm/v3/objects/contacts/search" and method == "POST":
            return self._search(body)

        if path == "/crm/v3/objects/contacts/batch/create" and method == "POST":
            results = []
            for item in body["inputs"]:
                contact_id = self._new_id()
                self.contacts[contact_id] = self._record(contact_id, item["properties"])
                results.append(self.contacts[contact_id])
            return httpx.Response(201, json={"status": "COMPLETE", "results": results})

        match = _CONTACT_PATH.match(path)
        if match:
            return self._contact(method, match.group("id"), body)

        if path == "/crm/v3/properties/contacts" and method == "POST":
            if body["name"] in self.properties:
                return httpx.Response(
                    409,
                    json={
                        "status": "error",
                        "message": f"Property named '{body['name']}' already exists.",
                        "category": "OBJECT_ALREADY_EXISTS",
                    },
                )
            self.properties[body["name"]] = dict(body)
            return httpx.Response(201, json=self.properties[body["name"]])

        match = _PROPERTY_PATH.match(path)
        if match and method == "GET":
            name = match.group("name")
            if name not in self.properties:
                return httpx.Response(404, json={"status": "error", "message": "Not found"})
            return httpx.Response(200, json=self.properties[name])

        return httpx.Response(404, json={"status": "error", "message": "Unknown route"})

    def _contact(self, method: str, contact_id: str, body: Any) -> httpx.Response:
        contact = self.contacts.get(contact_id)
        if contact is None:
            return httpx.Response(
                404,
                json={"status": "error", "message": "resource not found", "category": "OBJECT_NOT_FOUND"},
            )
        if method == "GET":
            return httpx.Response(200, json=contact)
        if method == "PATCH":
            contact["properties"].update(self._stringify(body["properties"]))
            contact["updatedAt"] = _now()
            return httpx.Response(200, json=contact)
        if method == "DELETE":
            del self.contacts[contact_id]
            return httpx.Response(204)
        return httpx.Response(405)

    def _search(self, body: dict[str, Any]) -> httpx.Response:
        predicates = [f for group in body.get("filterGroups", []) for f in group["filters"]]
        matches = [
            c
            for c in self.contacts.values()
            if all(c["properties"].get(p["propertyName"]) == p["value"] for p in predicates)
        ]
        limit = body.get("limit", 10)
        return httpx.Response(200, json={"total": len(matches), "results": matches[:limit]})


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def config() -> HubSpotConfig:
    return HubSpotConfig(access_token=TEST_TOKEN, base_url=BASE_URL, property_setup_delay_ms=0)


@pytest.fixture
def fake_hubspot() -> FakeHubSpot:
    return FakeHubSpot()


@pytest.fixture
def hubspot_http(config, fake_hubspot) -> HubSpotHTTP:
    return HubSpotHTTP(config, transport=fake_hubspot.transport)


@pytest.fixture
def contacts_client(hubspot_http) -> HubSpotContactsClient:
    return HubSpotContactsClient(hubspot_http)


@pytest.fixture
def provisioner(hubspot_http) -> PropertyProvisioner:
    return PropertyProvisioner(hubspot_http, pacer_factory=lambda: IntervalPacer(0))


@pytest_asyncio.fixture
async def client(config, fake_hubspot) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the app, with HubSpot served by FakeHubSpot."""
    app = create_app(config, transport=fake_hubspot.transport)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
