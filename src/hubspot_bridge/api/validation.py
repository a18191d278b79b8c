"""Request validation rules for contact endpoints.

Violations raise ValidationError before any HubSpot call is made.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from src.hubspot_bridge.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_CONTACT_FIELDS = ("firstName", "lastName", "email")


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


def validate_contact_create(data: Mapping[str, Any]) -> None:
    """firstName, lastName and email are required; email must look like one."""
    if any(not data.get(name) for name in REQUIRED_CONTACT_FIELDS):
        raise ValidationError(
            "Missing required fields: firstName, lastName, and email are required"
        )
    if not is_valid_email(data["email"]):
        raise ValidationError("Invalid email format")


def validate_contact_update(data: Mapping[str, Any]) -> None:
    """At least one field must be supplied; a non-empty email is format-checked."""
    if data.get("email") and not is_valid_email(data["email"]):
        raise ValidationError("Invalid email format")
    if not data:
        raise ValidationError("No valid fields to update provided")


def validate_batch(contacts: Any) -> list[Mapping[str, Any]]:
    """Check a batch create body atomically.

    Every element must pass the create rule; the first offender rejects the
    whole batch.
    """
    if not isinstance(contacts, list):
        raise ValidationError('Request body must contain a "contacts" array')

    for index, contact in enumerate(contacts):
        if not isinstance(contact, Mapping) or any(
            not contact.get(name) for name in REQUIRED_CONTACT_FIELDS
        ):
            raise ValidationError(
                f"Contact at index {index} is missing required fields "
                "(firstName, lastName, email)"
            )
        if not is_valid_email(contact["email"]):
            raise ValidationError(f"Contact at index {index} has an invalid email format")
    return contacts
