"""Application configuration via Pydantic BaseSettings.

Settings holds the raw environment values. validate_settings() turns them
into the frozen HubSpotConfig that is built once at startup and handed to
every component that needs it. A bad required value raises
ConfigurationError; a bad optional value falls back to its default and is
reported as a warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.hubspot_bridge.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.hubapi.com"
DEFAULT_PORT = 3000
TOKEN_PREFIX = "pat-"
TOKEN_MIN_LENGTH = 20

REQUIRED_SCOPES: tuple[str, ...] = (
    "crm.objects.contacts.read",
    "crm.objects.contacts.write",
    "crm.schemas.contacts.read",
    "crm.schemas.contacts.write",
)
OPTIONAL_SCOPES: tuple[str, ...] = ("crm.objects.owners.read",)

ENDPOINTS: dict[str, str] = {
    # CRM Objects API
    "contacts": "/crm/v3/objects/contacts",
    "contacts_search": "/crm/v3/objects/contacts/search",
    "contacts_batch": "/crm/v3/objects/contacts/batch",
    # Properties API
    "properties": "/crm/v3/properties/contacts",
    # Owners API
    "owners": "/crm/v3/owners",
    # Schemas API
    "schemas": "/crm/v3/schemas/contacts",
}


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # HubSpot Private App
    HUBSPOT_ACCESS_TOKEN: str = ""
    HUBSPOT_BASE_URL: str = ""

    # Server
    PORT: str = ""

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"

    # Pause between property creation calls during setup
    PROPERTY_SETUP_DELAY_MS: int = 100

    # Monitoring
    SENTRY_DSN: str = ""


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()


@dataclass(frozen=True)
class HubSpotConfig:
    """Validated, immutable runtime configuration."""

    access_token: str
    base_url: str = DEFAULT_BASE_URL
    port: int = DEFAULT_PORT
    property_setup_delay_ms: int = 100
    environment: Environment = Environment.development
    log_level: str = "INFO"
    cors_allowed_origins: str = "*"
    sentry_dsn: str = ""
    endpoints: dict[str, str] = field(default_factory=lambda: dict(ENDPOINTS))
    required_scopes: tuple[str, ...] = REQUIRED_SCOPES
    optional_scopes: tuple[str, ...] = OPTIONAL_SCOPES

    def summary(self) -> dict[str, Any]:
        """Loggable configuration summary with the token masked."""
        return {
            "base_url": self.base_url,
            "token_length": len(self.access_token),
            "token_prefix": f"{self.access_token[:8]}..." if self.access_token else "MISSING",
            "port": self.port,
            "endpoints_count": len(self.endpoints),
            "required_scopes": list(self.required_scopes),
            "optional_scopes": list(self.optional_scopes),
        }


@dataclass
class ConfigReport:
    """Validated config plus non-fatal warnings about optional values."""

    config: HubSpotConfig
    warnings: list[dict[str, str]] = field(default_factory=list)
    defaults_used: list[str] = field(default_factory=list)


# ── Validators ──────────────────────────────────────────────────────────────


def validate_access_token(value: str | None) -> str | None:
    """Return an error message for a bad token, None if it is usable."""
    if not value:
        return "Token is required"
    if len(value) < TOKEN_MIN_LENGTH:
        return f"Token appears to be too short (minimum {TOKEN_MIN_LENGTH} characters)"
    if not value.startswith(TOKEN_PREFIX):
        return f'Token should start with "{TOKEN_PREFIX}" for Private App tokens'
    return None


def validate_base_url(value: str) -> str | None:
    if not value.startswith("https://"):
        return "Base URL must start with https://"
    return None


def validate_port(value: str) -> str | None:
    try:
        port = int(value)
    except (TypeError, ValueError):
        return "Port must be a valid number"
    if port < 1 or port > 65535:
        return "Port must be between 1 and 65535"
    return None


def validate_settings(settings: Settings) -> ConfigReport:
    """Validate raw settings and build the frozen HubSpotConfig.

    Raises:
        ConfigurationError: HUBSPOT_ACCESS_TOKEN is missing or malformed.
    """
    token_error = validate_access_token(settings.HUBSPOT_ACCESS_TOKEN)
    if token_error:
        raise ConfigurationError(
            [
                {
                    "variable": "HUBSPOT_ACCESS_TOKEN",
                    "error": token_error,
                    "description": "HubSpot Private App access token",
                }
            ]
        )

    warnings: list[dict[str, str]] = []
    defaults_used: list[str] = []

    base_url = settings.HUBSPOT_BASE_URL or DEFAULT_BASE_URL
    if not settings.HUBSPOT_BASE_URL:
        defaults_used.append("HUBSPOT_BASE_URL")
    base_url_error = validate_base_url(base_url)
    if base_url_error:
        warnings.append(
            {
                "variable": "HUBSPOT_BASE_URL",
                "error": base_url_error,
                "description": "HubSpot API base URL",
                "default": DEFAULT_BASE_URL,
            }
        )
        base_url = DEFAULT_BASE_URL

    raw_port = settings.PORT or str(DEFAULT_PORT)
    if not settings.PORT:
        defaults_used.append("PORT")
    port_error = validate_port(raw_port)
    if port_error:
        warnings.append(
            {
                "variable": "PORT",
                "error": port_error,
                "description": "Server port number",
                "default": str(DEFAULT_PORT),
            }
        )
        port = DEFAULT_PORT
    else:
        port = int(raw_port)

    config = HubSpotConfig(
        access_token=settings.HUBSPOT_ACCESS_TOKEN,
        base_url=base_url.rstrip("/"),
        port=port,
        property_setup_delay_ms=max(0, settings.PROPERTY_SETUP_DELAY_MS),
        environment=settings.ENVIRONMENT,
        log_level=settings.LOG_LEVEL,
        cors_allowed_origins=settings.CORS_ALLOWED_ORIGINS,
        sentry_dsn=settings.SENTRY_DSN,
    )
    return ConfigReport(config=config, warnings=warnings, defaults_used=defaults_used)
