"""Contact field mappings between the API shape and HubSpot properties.

Defines:
- CONTACT_PROPERTY_MAP: camelCase request fields -> HubSpot property names.
- DEFAULT_CONTACT_PROPERTIES: property projection used for reads and search.
- SEARCH_FILTER_FIELDS: request fields accepted as search filters.
- to_create_properties(): create-mode mapping (empty values stripped).
- to_update_properties(): update-mode mapping (presence-based).
- to_search_filters(): query params -> HubSpot property filters.
- from_hubspot_properties(): HubSpot properties -> camelCase fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


# ── Contact Property Mappings ──────────────────────────────────────────────

CONTACT_PROPERTY_MAP: dict[str, str] = {
    # Standard HubSpot properties
    "firstName": "firstname",
    "lastName": "lastname",
    "email": "email",
    "phone": "phone",
    "ownerId": "hubspot_owner_id",
    # Custom candidate properties
    "candidateExperience": "candidate_experience",
    "candidateDateOfJoining": "candidate_date_of_joining",
    "candidateName": "candidate_name",
    "candidatePastCompany": "candidate_past_company",
}

DEFAULT_CONTACT_PROPERTIES: list[str] = list(CONTACT_PROPERTY_MAP.values())

SEARCH_FILTER_FIELDS: tuple[str, ...] = (
    "firstName",
    "lastName",
    "email",
    "ownerId",
    "candidateExperience",
    "candidatePastCompany",
)

_EMPTY = ("", None)


# ── Conversion Functions ───────────────────────────────────────────────────


def to_create_properties(data: Mapping[str, Any]) -> dict[str, Any]:
    """Map a contact payload to the HubSpot property bag for creation.

    Every mapped field is considered; keys whose value is missing, None or
    an empty string are dropped before transmission. Values are passed
    through unchanged otherwise.
    """
    properties: dict[str, Any] = {}
    for field_name, hubspot_name in CONTACT_PROPERTY_MAP.items():
        value = data.get(field_name)
        if value is None or value == "":
            continue
        properties[hubspot_name] = value
    return properties


def to_update_properties(data: Mapping[str, Any]) -> dict[str, Any]:
    """Map a partial update to HubSpot properties.

    Only fields present in ``data`` are mapped. A present field with an
    empty value is sent as-is so HubSpot clears it; this differs from
    to_create_properties on purpose.
    """
    return {
        hubspot_name: data[field_name]
        for field_name, hubspot_name in CONTACT_PROPERTY_MAP.items()
        if field_name in data
    }


def to_search_filters(query: Mapping[str, Any]) -> dict[str, Any]:
    """Translate recognized, non-empty search params to HubSpot names."""
    filters: dict[str, Any] = {}
    for field_name in SEARCH_FILTER_FIELDS:
        value = query.get(field_name)
        if value in _EMPTY:
            continue
        filters[CONTACT_PROPERTY_MAP[field_name]] = value
    return filters


def from_hubspot_properties(properties: Mapping[str, Any]) -> dict[str, Any]:
    """Convert HubSpot contact properties back to camelCase fields.

    Unknown properties (hs_object_id, createdate, ...) are ignored.
    """
    reverse_map = {v: k for k, v in CONTACT_PROPERTY_MAP.items()}
    return {
        reverse_map[name]: value
        for name, value in properties.items()
        if name in reverse_map
    }
