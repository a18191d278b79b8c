"""API tests for the /api/contacts endpoints.

Uses the async ``client`` fixture from conftest; HubSpot is the in-memory
FakeHubSpot so every outbound call can be inspected.
"""

from __future__ import annotations

import pytest

CONTACTS_PATH = "/crm/v3/objects/contacts"


def _contact_payload(**overrides):
    payload = {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@example.com",
    }
    payload.update(overrides)
    return payload


# ── Create ───────────────────────────────────────────────────────────────────


class TestCreateContact:
    async def test_create_minimal_contact(self, client, fake_hubspot):
        response = await client.post("/api/contacts", json=_contact_payload())

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Contact created successfully"
        assert body["data"]["contactId"] in fake_hubspot.contacts
        assert body["data"]["properties"]["email"] == "jane@example.com"

        sent = fake_hubspot.json_bodies("POST", CONTACTS_PATH)[0]["properties"]
        assert sent == {"firstname": "Jane", "lastname": "Doe", "email": "jane@example.com"}
        assert not any(key.startswith("candidate_") for key in sent)

    async def test_create_with_candidate_fields(self, client, fake_hubspot):
        response = await client.post(
            "/api/contacts",
            json=_contact_payload(
                candidateExperience=5,
                candidateDateOfJoining="2024-03-15",
                candidateName="Jane Doe",
                candidatePastCompany="Acme",
                phone="",
            ),
        )

        assert response.status_code == 201
        sent = fake_hubspot.json_bodies("POST", CONTACTS_PATH)[0]["properties"]
        assert sent["candidate_experience"] == 5
        assert sent["candidate_date_of_joining"] == "2024-03-15"
        assert "phone" not in sent

    async def test_invalid_email_rejected_without_remote_call(self, client, fake_hubspot):
        response = await client.post("/api/contacts", json=_contact_payload(email="not-an-email"))

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid email format"}
        assert fake_hubspot.requests == []

    async def test_short_email_accepted(self, client):
        response = await client.post("/api/contacts", json=_contact_payload(email="a@b.co"))

        assert response.status_code == 201

    async def test_numeric_values_pass_through_unchanged(self, client, fake_hubspot):
        response = await client.post("/api/contacts", json=_contact_payload(phone=5551234))

        assert response.status_code == 201
        sent = fake_hubspot.json_bodies("POST", CONTACTS_PATH)[0]["properties"]
        assert sent["phone"] == 5551234

    async def test_missing_required_fields(self, client, fake_hubspot):
        response = await client.post("/api/contacts", json={"firstName": "Jane", "lastName": "Doe"})

        assert response.status_code == 400
        assert response.json()["error"] == (
            "Missing required fields: firstName, lastName, and email are required"
        )
        assert fake_hubspot.requests == []

    async def test_remote_failure_returns_500_with_details(self, client, fake_hubspot):
        hubspot_error = {
            "status": "error",
            "message": "Contact already exists. Existing ID: 501",
            "category": "CONFLICT",
        }
        fake_hubspot.fail("POST", CONTACTS_PATH, 409, hubspot_error)

        response = await client.post("/api/contacts", json=_contact_payload())

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "status code 409" in body["error"]
        assert body["details"] == hubspot_error

    async def test_non_json_body_is_400(self, client):
        response = await client.post(
            "/api/contacts",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"


# ── Batch create ─────────────────────────────────────────────────────────────


class TestBatchCreate:
    async def test_batch_creates_all(self, client, fake_hubspot):
        response = await client.post(
            "/api/contacts/batch",
            json={
                "contacts": [
                    _contact_payload(),
                    _contact_payload(email="john@example.com", firstName="John"),
                ]
            },
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["created"] == 2
        assert len(data["contacts"]) == 2
        assert len(fake_hubspot.json_bodies("POST", f"{CONTACTS_PATH}/batch/create")) == 1

    async def test_numeric_values_accepted_like_single_create(self, client, fake_hubspot):
        response = await client.post(
            "/api/contacts/batch",
            json={"contacts": [_contact_payload(phone=5551234)]},
        )

        assert response.status_code == 201
        sent = fake_hubspot.json_bodies("POST", f"{CONTACTS_PATH}/batch/create")[0]
        assert sent["inputs"][0]["properties"]["phone"] == 5551234

    async def test_one_bad_element_rejects_whole_batch(self, client, fake_hubspot):
        response = await client.post(
            "/api/contacts/batch",
            json={"contacts": [_contact_payload(), _contact_payload(email="bad")]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Contact at index 1 has an invalid email format"
        assert fake_hubspot.requests == []
        assert fake_hubspot.contacts == {}

    async def test_missing_fields_reports_index(self, client):
        response = await client.post(
            "/api/contacts/batch",
            json={"contacts": [{"firstName": "Only"}]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == (
            "Contact at index 0 is missing required fields (firstName, lastName, email)"
        )

    async def test_contacts_must_be_array(self, client):
        response = await client.post("/api/contacts/batch", json={"contacts": "nope"})

        assert response.status_code == 400
        assert response.json()["error"] == 'Request body must contain a "contacts" array'


# ── Read ─────────────────────────────────────────────────────────────────────


class TestGetContact:
    async def test_get_existing_contact(self, client, fake_hubspot):
        contact_id = fake_hubspot.add_contact({"firstname": "Jane", "email": "jane@example.com"})

        response = await client.get(f"/api/contacts/{contact_id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["contactId"] == contact_id
        assert data["properties"]["email"] == "jane@example.com"
        assert data["createdAt"] is not None
        assert data["updatedAt"] is not None

    async def test_unknown_contact_is_404(self, client):
        response = await client.get("/api/contacts/999999")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "Contact not found",
            "contactId": "999999",
        }

    async def test_create_then_get_round_trip(self, client):
        created = await client.post(
            "/api/contacts", json=_contact_payload(email="round@trip.com")
        )
        contact_id = created.json()["data"]["contactId"]

        response = await client.get(f"/api/contacts/{contact_id}")

        assert response.json()["data"]["properties"]["email"] == "round@trip.com"


# ── Update ───────────────────────────────────────────────────────────────────


class TestUpdateContact:
    async def test_partial_update_leaves_other_fields(self, client, fake_hubspot):
        contact_id = fake_hubspot.add_contact({"firstname": "Jane", "phone": "555"})

        response = await client.patch(
            f"/api/contacts/{contact_id}", json={"candidatePastCompany": "Acme"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["updatedProperties"] == ["candidatePastCompany"]
        assert data["properties"]["phone"] == "555"
        assert data["properties"]["candidate_past_company"] == "Acme"
        assert fake_hubspot.json_bodies("PATCH", f"{CONTACTS_PATH}/{contact_id}") == [
            {"properties": {"candidate_past_company": "Acme"}}
        ]

    async def test_empty_string_is_sent_to_clear(self, client, fake_hubspot):
        contact_id = fake_hubspot.add_contact({"firstname": "Jane", "phone": "555"})

        response = await client.patch(f"/api/contacts/{contact_id}", json={"phone": ""})

        assert response.status_code == 200
        assert fake_hubspot.json_bodies("PATCH", f"{CONTACTS_PATH}/{contact_id}") == [
            {"properties": {"phone": ""}}
        ]

    async def test_numeric_value_sent_as_is(self, client, fake_hubspot):
        contact_id = fake_hubspot.add_contact({"firstname": "Jane"})

        response = await client.patch(f"/api/contacts/{contact_id}", json={"phone": 5551234})

        assert response.status_code == 200
        assert fake_hubspot.json_bodies("PATCH", f"{CONTACTS_PATH}/{contact_id}") == [
            {"properties": {"phone": 5551234}}
        ]

    async def test_empty_body_rejected(self, client, fake_hubspot):
        response = await client.patch("/api/contacts/1", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "No valid fields to update provided"
        assert fake_hubspot.requests == []

    async def test_unknown_fields_only_rejected(self, client, fake_hubspot):
        response = await client.patch("/api/contacts/1", json={"favouriteColour": "blue"})

        assert response.status_code == 400
        assert fake_hubspot.requests == []

    async def test_invalid_email_rejected(self, client):
        response = await client.patch("/api/contacts/1", json={"email": "nope"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email format"

    async def test_update_of_missing_contact_is_500(self, client):
        response = await client.patch("/api/contacts/missing", json={"firstName": "X"})

        assert response.status_code == 500
        assert response.json()["success"] is False


# ── Search ───────────────────────────────────────────────────────────────────


class TestSearchContacts:
    async def test_search_by_first_name(self, client, fake_hubspot):
        fake_hubspot.add_contact({"firstname": "Jane", "lastname": "Doe"})
        fake_hubspot.add_contact({"firstname": "John", "lastname": "Doe"})

        response = await client.get("/api/contacts", params={"firstName": "Jane"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["limit"] == 10
        assert data["filters"] == {"firstname": "Jane"}
        assert data["contacts"][0]["properties"]["firstname"] == "Jane"

    async def test_search_combines_filters_with_and(self, client, fake_hubspot):
        fake_hubspot.add_contact({"lastname": "Doe", "candidate_past_company": "Acme"})
        fake_hubspot.add_contact({"lastname": "Doe", "candidate_past_company": "Globex"})

        response = await client.get(
            "/api/contacts",
            params={"lastName": "Doe", "candidatePastCompany": "Acme", "limit": "5"},
        )

        data = response.json()["data"]
        assert data["total"] == 1
        assert data["limit"] == 5
        body = fake_hubspot.json_bodies("POST", f"{CONTACTS_PATH}/search")[0]
        assert len(body["filterGroups"]) == 1
        assert len(body["filterGroups"][0]["filters"]) == 2

    async def test_search_without_filters(self, client, fake_hubspot):
        fake_hubspot.add_contact({"firstname": "Jane"})

        response = await client.get("/api/contacts", params={"email": ""})

        assert response.status_code == 200
        assert response.json()["data"]["filters"] == {}
        body = fake_hubspot.json_bodies("POST", f"{CONTACTS_PATH}/search")[0]
        assert body["filterGroups"] == []

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("abc", 10), ("0", 10), ("-3", 10), ("5abc", 5), (" 7", 7)],
    )
    async def test_limit_reads_leading_integer(self, client, fake_hubspot, raw, expected):
        response = await client.get("/api/contacts", params={"limit": raw})

        assert response.json()["data"]["limit"] == expected
        assert fake_hubspot.json_bodies("POST", f"{CONTACTS_PATH}/search")[0]["limit"] == expected


# ── Delete ───────────────────────────────────────────────────────────────────


class TestDeleteContact:
    async def test_delete_contact(self, client, fake_hubspot):
        contact_id = fake_hubspot.add_contact({"firstname": "Jane"})

        response = await client.delete(f"/api/contacts/{contact_id}")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Contact deleted successfully",
            "contactId": contact_id,
        }
        assert contact_id not in fake_hubspot.contacts

    async def test_delete_failure_is_500(self, client):
        response = await client.delete("/api/contacts/missing")

        assert response.status_code == 500
