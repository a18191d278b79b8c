"""Custom contact property provisioning.

Defines the fixed catalog of candidate properties and provisions it in
HubSpot idempotently: a 409 conflict on create means the property already
exists and counts as success. Catalog creation runs sequentially through an
IntervalPacer and is best-effort -- one failed property does not stop the
others.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import structlog

from src.hubspot_bridge.crm.http import HubSpotHTTP, remote_error
from src.hubspot_bridge.crm.pacing import IntervalPacer
from src.hubspot_bridge.crm.schemas import (
    LookupStatus,
    PropertyCreationResult,
    PropertyCreationStatus,
    PropertyDefinition,
    PropertyLookup,
    ProvisioningSummary,
)
from src.hubspot_bridge.errors import RemoteOperation, RemoteOperationError

logger = structlog.get_logger(__name__)

DEFAULT_GROUP_NAME = "contactinformation"

CUSTOM_PROPERTY_DEFINITIONS: tuple[PropertyDefinition, ...] = (
    PropertyDefinition(
        name="candidate_experience",
        label="Candidate Experience",
        description="Years of professional experience",
        groupName=DEFAULT_GROUP_NAME,
        type="number",
        fieldType="number",
    ),
    PropertyDefinition(
        name="candidate_date_of_joining",
        label="Candidate Date of Joining",
        description="Expected or actual date of joining",
        groupName=DEFAULT_GROUP_NAME,
        type="date",
        fieldType="date",
    ),
    PropertyDefinition(
        name="candidate_name",
        label="Candidate Name",
        description="Full name of the candidate",
        groupName=DEFAULT_GROUP_NAME,
        type="string",
        fieldType="text",
    ),
    PropertyDefinition(
        name="candidate_past_company",
        label="Candidate Past Company",
        description="Previous company or current employer",
        groupName=DEFAULT_GROUP_NAME,
        type="string",
        fieldType="text",
    ),
)


def build_property_definition(
    name: str,
    label: str,
    type: str,
    field_type: str | None = None,
    description: str | None = None,
    group_name: str | None = None,
) -> PropertyDefinition:
    """Fill in defaults for an ad-hoc property definition.

    fieldType defaults to ``text`` for strings and to the type itself
    otherwise.
    """
    return PropertyDefinition(
        name=name,
        label=label,
        type=type,
        fieldType=field_type or ("text" if type == "string" else type),
        description=description or f"Custom property: {label}",
        groupName=group_name or DEFAULT_GROUP_NAME,
    )


class PropertyProvisioner:
    """Creates and probes HubSpot contact properties.

    Args:
        http: Shared HubSpot request helper.
        pacer_factory: Builds the spacing policy for one catalog run. Each
            run gets its own pacer so concurrent runs share no state.
            Defaults to an IntervalPacer over the config's
            PROPERTY_SETUP_DELAY_MS.
    """

    def __init__(
        self,
        http: HubSpotHTTP,
        pacer_factory: Callable[[], IntervalPacer] | None = None,
    ) -> None:
        self._http = http
        self._pacer_factory = pacer_factory or self._default_pacer

    def _default_pacer(self) -> IntervalPacer:
        return IntervalPacer(self._http.config.property_setup_delay_ms / 1000.0)

    @staticmethod
    def custom_property_definitions() -> list[PropertyDefinition]:
        return list(CUSTOM_PROPERTY_DEFINITIONS)

    async def create_property(self, definition: PropertyDefinition) -> PropertyCreationResult:
        """Create one property; an existing property is not an error.

        Returns:
            CREATED with HubSpot's property data, or ALREADY_EXISTS on 409.

        Raises:
            RemoteOperationError: Any other failure (PROPERTY_CREATE).
        """
        logger.info("hubspot.property_create_started", name=definition.name)

        try:
            response = await self._http.request(
                "POST",
                self._http.endpoint("properties"),
                json=definition.model_dump(),
            )
        except httpx.HTTPError as exc:
            error = remote_error(RemoteOperation.PROPERTY_CREATE, exc)
            logger.error("hubspot.property_create_failed", name=definition.name, error=error.message)
            raise error from exc

        if response.status_code == 409:
            logger.info("hubspot.property_already_exists", name=definition.name)
            return PropertyCreationResult(
                name=definition.name,
                success=True,
                status=PropertyCreationStatus.ALREADY_EXISTS,
                data={"name": definition.name, "status": "already_exists"},
            )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            error = remote_error(RemoteOperation.PROPERTY_CREATE, exc)
            logger.error(
                "hubspot.property_create_failed",
                name=definition.name,
                error=error.message,
                details=error.details,
            )
            raise error from exc

        data = response.json()
        logger.info(
            "hubspot.property_created",
            name=data.get("name"),
            label=data.get("label"),
            type=data.get("type"),
        )
        return PropertyCreationResult(
            name=definition.name,
            success=True,
            status=PropertyCreationStatus.CREATED,
            data=data,
        )

    async def create_all_custom_properties(self) -> list[PropertyCreationResult]:
        """Provision the fixed catalog, one paced call at a time.

        Failures are recorded per property and never abort the run.
        """
        results: list[PropertyCreationResult] = []
        pacer = self._pacer_factory()
        logger.info(
            "hubspot.property_setup_started",
            total=len(CUSTOM_PROPERTY_DEFINITIONS),
            interval_s=pacer.interval,
        )

        for definition in CUSTOM_PROPERTY_DEFINITIONS:
            await pacer.wait()
            try:
                results.append(await self.create_property(definition))
            except RemoteOperationError as exc:
                results.append(
                    PropertyCreationResult(
                        name=definition.name,
                        success=False,
                        status=PropertyCreationStatus.FAILED,
                        error=exc.message,
                    )
                )

        summary = ProvisioningSummary.from_results(results)
        logger.info("hubspot.property_setup_completed", **summary.model_dump())
        return results

    async def get_property(self, name: str) -> PropertyLookup:
        """Fetch a property definition by name.

        Returns:
            PropertyLookup tagged FOUND with the definition, or NOT_FOUND on 404.

        Raises:
            RemoteOperationError: Any other failure (PROPERTY_RETRIEVE).
        """
        try:
            response = await self._http.request("GET", f"{self._http.endpoint('properties')}/{name}")
        except httpx.HTTPError as exc:
            raise remote_error(RemoteOperation.PROPERTY_RETRIEVE, exc) from exc

        if response.status_code == 404:
            return PropertyLookup(name=name, status=LookupStatus.NOT_FOUND)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            error = remote_error(RemoteOperation.PROPERTY_RETRIEVE, exc)
            logger.error("hubspot.property_get_failed", name=name, error=error.message)
            raise error from exc

        return PropertyLookup(name=name, status=LookupStatus.FOUND, data=response.json())

    async def check_properties_exist(self) -> list[PropertyLookup]:
        """Probe each catalog property; a failed probe is recorded as FAILED."""
        results: list[PropertyLookup] = []
        for definition in CUSTOM_PROPERTY_DEFINITIONS:
            try:
                results.append(await self.get_property(definition.name))
            except RemoteOperationError as exc:
                results.append(
                    PropertyLookup(
                        name=definition.name,
                        status=LookupStatus.FAILED,
                        error=exc.message,
                    )
                )
        return results
