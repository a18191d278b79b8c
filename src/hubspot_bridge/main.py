"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, the
bridge's error handlers and the API router. Configuration is validated
before the app is built; an invalid HUBSPOT_ACCESS_TOKEN aborts startup.

Run with:
    uvicorn src.hubspot_bridge.main:create_app --factory --port 3000
or:
    python -m src.hubspot_bridge.main
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.hubspot_bridge import __version__
from src.hubspot_bridge.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.hubspot_bridge.api.routes.router import router as api_router
from src.hubspot_bridge.config import (
    REQUIRED_SCOPES,
    ConfigReport,
    HubSpotConfig,
    get_settings,
    validate_settings,
)
from src.hubspot_bridge.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.hubspot_bridge.crm.contacts import HubSpotContactsClient
from src.hubspot_bridge.crm.http import HubSpotHTTP
from src.hubspot_bridge.crm.properties import PropertyProvisioner
from src.hubspot_bridge.errors import (
    ConfigurationError,
    NotFoundError,
    RemoteOperationError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


# ── Configuration ────────────────────────────────────────────────────────────


def load_config() -> HubSpotConfig:
    """Validate environment settings and log the outcome.

    Raises:
        ConfigurationError: Required settings are missing or malformed.
    """
    settings = get_settings()
    configure_structlog(settings.ENVIRONMENT, settings.LOG_LEVEL)

    try:
        report = validate_settings(settings)
    except ConfigurationError as exc:
        log_configuration_error(exc)
        raise

    log_config_report(report)
    return report.config


def log_config_report(report: ConfigReport) -> None:
    for warning in report.warnings:
        logger.warning("config.optional_value_invalid", **warning)
    for name in report.defaults_used:
        logger.info("config.default_used", variable=name)
    logger.info("config.validated", **report.config.summary())


def log_configuration_error(exc: ConfigurationError) -> None:
    for problem in exc.problems:
        logger.error("config.required_value_invalid", **problem)
    logger.error(
        "config.setup_instructions",
        steps=[
            "Copy .env.example to .env",
            "Add your HubSpot Private App access token",
            "Ensure the token has the required scopes",
        ],
        required_scopes=list(REQUIRED_SCOPES),
    )


# ── Process-level fault handling ─────────────────────────────────────────────


def _log_unhandled_loop_exception(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    """Log exceptions from orphaned tasks and keep the server running."""
    exc = context.get("exception")
    logger.error(
        "process.unhandled_exception",
        message=context.get("message"),
        error=str(exc) if exc else None,
        exc_info=exc,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Install the loop exception handler on startup and log readiness."""
    loop = asyncio.get_running_loop()
    previous_handler = loop.get_exception_handler()
    loop.set_exception_handler(_log_unhandled_loop_exception)

    config: HubSpotConfig = app.state.config
    if config.sentry_dsn:
        init_sentry(dsn=config.sentry_dsn, environment=config.environment.value)

    logger.info("server.started", port=config.port, version=__version__)
    logger.info(
        "server.setup_hint",
        hint="Run scripts/setup_properties.py or POST /api/properties/setup to create custom properties",
    )
    yield
    loop.set_exception_handler(previous_handler)
    logger.info("server.stopped")


# ── Error handlers ───────────────────────────────────────────────────────────


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"success": False, "error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid request body",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": exc.message, exc.id_field: exc.resource_id},
        )

    @app.exception_handler(RemoteOperationError)
    async def remote_error_handler(request: Request, exc: RemoteOperationError) -> JSONResponse:
        logger.error(
            "api.remote_operation_failed",
            path=request.url.path,
            operation=exc.operation.value,
            error=exc.message,
            remote_status=exc.status_code,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": exc.message,
                "details": jsonable_encoder(exc.details),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 404:
            path = request.url.path
            if request.url.query:
                path = f"{path}?{request.url.query}"
            return JSONResponse(
                status_code=404,
                content={"success": False, "error": "Endpoint not found", "path": path},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("api.unhandled_error", path=request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "message": str(exc),
            },
        )


# ── App factory ──────────────────────────────────────────────────────────────


def create_app(
    config: HubSpotConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Pre-validated configuration. Loaded from the environment
            when omitted.
        transport: Optional httpx transport for all HubSpot calls.
    """
    if config is None:
        config = load_config()

    app = FastAPI(
        title="HubSpot Candidate Bridge",
        version=__version__,
        description="REST API for HubSpot contacts with custom candidate properties",
        lifespan=lifespan,
    )

    http = HubSpotHTTP(config, transport=transport)
    app.state.config = config
    app.state.contacts_client = HubSpotContactsClient(http)
    app.state.property_provisioner = PropertyProvisioner(http)

    # Middleware is added in reverse order (last added = outermost)

    # CORS middleware
    if config.cors_allowed_origins == "*":
        origins = ["*"]
    else:
        origins = [o.strip() for o in config.cors_allowed_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    _register_error_handlers(app)
    app.include_router(api_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


def main() -> None:
    """Validate configuration and serve the API with uvicorn."""
    import uvicorn

    try:
        config = load_config()
    except ConfigurationError:
        sys.exit(1)

    uvicorn.run(create_app(config), host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
