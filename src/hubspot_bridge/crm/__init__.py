"""HubSpot CRM integration layer.

Provides:
- HubSpotHTTP: authenticated request helper shared by all clients
- HubSpotContactsClient: contact CRUD, search and batch create
- PropertyProvisioner: idempotent custom property provisioning
- IntervalPacer: fixed spacing between sequential calls
- Field mapping helpers between camelCase API fields and HubSpot properties
"""

from src.hubspot_bridge.crm.contacts import HubSpotContactsClient
from src.hubspot_bridge.crm.field_mapping import (
    CONTACT_PROPERTY_MAP,
    DEFAULT_CONTACT_PROPERTIES,
    to_create_properties,
    to_search_filters,
    to_update_properties,
)
from src.hubspot_bridge.crm.http import HubSpotHTTP
from src.hubspot_bridge.crm.pacing import IntervalPacer
from src.hubspot_bridge.crm.properties import CUSTOM_PROPERTY_DEFINITIONS, PropertyProvisioner

__all__ = [
    "HubSpotHTTP",
    "HubSpotContactsClient",
    "PropertyProvisioner",
    "IntervalPacer",
    "CUSTOM_PROPERTY_DEFINITIONS",
    "CONTACT_PROPERTY_MAP",
    "DEFAULT_CONTACT_PROPERTIES",
    "to_create_properties",
    "to_update_properties",
    "to_search_filters",
]
