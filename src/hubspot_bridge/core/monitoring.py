"""Prometheus metrics for inbound API traffic and outbound HubSpot calls.

Provides:
- MetricsMiddleware: ASGI middleware for HTTP request metrics
- hubspot_requests_total / hubspot_request_duration_seconds: outbound call metrics
- init_sentry(): error reporting with bearer tokens scrubbed from events
- get_metrics_response(): response body for the /metrics endpoint
"""

from __future__ import annotations

import time

import sentry_sdk
from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ── HTTP Metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── HubSpot Metrics ──────────────────────────────────────────────────────────

hubspot_requests_total = Counter(
    "hubspot_requests_total",
    "Total outbound HubSpot API requests",
    ["method", "status_code"],
)

hubspot_request_duration_seconds = Histogram(
    "hubspot_request_duration_seconds",
    "HubSpot API request duration in seconds",
    ["method"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)


# ── Metrics Middleware ───────────────────────────────────────────────────────


class MetricsMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that records Prometheus metrics for every HTTP request.

    Uses the matched route pattern (``/api/contacts/{contact_id}``) as the
    endpoint label so contact ids do not explode label cardinality.
    Skips the /metrics endpoint itself.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        route = request.scope.get("route")
        endpoint = getattr(route, "path", None) or "unmatched"

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=str(response.status_code),
        ).inc()

        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response


# ── Sentry Integration ───────────────────────────────────────────────────────


def _scrub_authorization(event: dict, hint: dict) -> dict:
    """Drop bearer tokens from request headers before an event leaves the process."""
    headers = event.get("request", {}).get("headers")
    if isinstance(headers, dict):
        for key in list(headers):
            if key.lower() == "authorization":
                headers[key] = "[Filtered]"
    return event


def init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry SDK for the FastAPI app.

    Args:
        dsn: Sentry DSN string.
        environment: Deployment environment (development, staging, production).
    """
    traces_sample_rate = 0.1 if environment == "production" else 1.0

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            StarletteIntegration(),
            FastApiIntegration(),
        ],
        before_send=_scrub_authorization,
    )


# ── Metrics Endpoint ─────────────────────────────────────────────────────────


def get_metrics_response() -> Response:
    """Generate Prometheus exposition format response."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
