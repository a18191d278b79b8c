"""HubSpot candidate bridge -- REST proxy for HubSpot contacts and custom properties."""

__version__ = "1.0.0"
