"""Pydantic schemas for HubSpot contacts and contact properties.

Defines the structured types passed between the CRM clients and the API:
- Contact payloads: ContactFields (camelCase request shape)
- Contact results: ContactRecord, ContactLookup, ContactSearchResult
- Property types: PropertyDefinition, PropertyLookup, PropertyCreationResult,
  ProvisioningSummary
- LookupStatus: explicit Found / NotFound / Failed tag for existence probes
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ───────────────────────────────────────────────────────────────────


class LookupStatus(str, Enum):
    """Outcome of a fetch-by-identifier against HubSpot."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class PropertyCreationStatus(str, Enum):
    """Outcome of an idempotent property creation."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


# ── Contact Schemas ─────────────────────────────────────────────────────────


class ContactFields(BaseModel):
    """Contact fields as accepted by the API (camelCase).

    Every field is optional at the model level; required-ness depends on
    the operation and is checked in api/validation.py. Values are not
    type-checked or coerced: they reach HubSpot exactly as supplied, the
    same as items of a batch create. Dumping with ``exclude_unset=True``
    preserves which fields the caller supplied.
    """

    model_config = ConfigDict(extra="ignore")

    firstName: Any = None
    lastName: Any = None
    email: Any = None
    phone: Any = None
    ownerId: Any = None
    candidateExperience: Any = None
    candidateDateOfJoining: Any = None
    candidateName: Any = None
    candidatePastCompany: Any = None


class ContactRecord(BaseModel):
    """A HubSpot contact object as returned by the CRM API."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    properties: dict[str, Any] = Field(default_factory=dict)
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
    archived: bool = False


class ContactLookup(BaseModel):
    """Tagged result of get_contact: FOUND carries the record."""

    status: LookupStatus
    contact_id: str
    contact: ContactRecord | None = None

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND


class ContactSearchResult(BaseModel):
    """Page of search matches plus HubSpot's total match count."""

    contacts: list[ContactRecord] = Field(default_factory=list)
    total: int = 0


# ── Property Schemas ────────────────────────────────────────────────────────


class PropertyDefinition(BaseModel):
    """HubSpot contact property definition (wire shape, camelCase keys)."""

    model_config = ConfigDict(extra="allow")

    name: str
    label: str
    type: str
    fieldType: str
    description: str = ""
    groupName: str = "contactinformation"


class PropertyLookup(BaseModel):
    """Existence probe result for one property."""

    name: str
    status: LookupStatus
    data: dict[str, Any] | None = None
    error: str | None = None

    @property
    def exists(self) -> bool:
        return self.status == LookupStatus.FOUND

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"name": self.name, "exists": self.exists, "data": self.data}
        if self.error is not None:
            body["error"] = self.error
        return body


class PropertyCreationResult(BaseModel):
    """Per-item result of property provisioning."""

    name: str
    success: bool
    status: PropertyCreationStatus
    data: dict[str, Any] | None = None
    error: str | None = None


class ProvisioningSummary(BaseModel):
    """Counts over a provisioning run."""

    total: int
    successful: int
    failed: int

    @classmethod
    def from_results(cls, results: list[PropertyCreationResult]) -> ProvisioningSummary:
        successful = sum(1 for r in results if r.success)
        return cls(total=len(results), successful=successful, failed=len(results) - successful)
