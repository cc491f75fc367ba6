"""
Sentry SDK configuration.

Implements:
- Environment-based initialization (disabled without SENTRY_DSN)
- Scrubbing of reporter identity and precise report coordinates
- Sampling tuned for a low-traffic civic API
- Loguru integration
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

HEALTH_PATHS = {"/health", "/api/health"}
HEALTH_TRANSACTIONS = {"/health", "/api/health", "GET /health", "GET /api/health"}

# Report and community payloads carry where a resident stood when reporting.
SENSITIVE_BODY_KEYS = {
    "lat",
    "lng",
    "latitude",
    "longitude",
    "center_lat",
    "center_lng",
    "address",
}


def _scrub_body(data: Any) -> Any:
    """Replace location fields in a captured request body."""
    if isinstance(data, dict):
        return {
            key: "[Filtered]" if key in SENSITIVE_BODY_KEYS else _scrub_body(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [_scrub_body(item) for item in data]
    return data


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Strip resident identity and location from an event.

    Keeps only the user id, drops cookies and the session token, and filters
    coordinates/addresses out of captured request bodies.
    """
    user = event.get("user")
    if user:
        user.pop("email", None)
        user.pop("username", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"  # Anonymized by Sentry

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for name in ("Authorization", "authorization", "Cookie", "cookie"):
                if name in headers:
                    headers[name] = "[Filtered]"
        if "data" in request:
            request["data"] = _scrub_body(request["data"])

    return event


def _before_send_transaction(event: Event, hint: Hint) -> Event | None:
    """Drop health-check transactions."""
    if event.get("transaction", "") in HEALTH_TRANSACTIONS:
        return None
    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """Trace rate per request: none for health checks, more for writes."""
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    asgi_scope = sampling_context.get("asgi_scope", {})
    path = asgi_scope.get("path", "")
    method = asgi_scope.get("method", "GET")

    if path in HEALTH_PATHS:
        return 0.0

    # Writes are rare and the interesting part of the traffic
    if method in ("POST", "PATCH", "DELETE"):
        return 0.5

    return 0.2


def init_sentry() -> None:
    """Start error monitoring when SENTRY_DSN is set. Must run before the app is built."""
    dsn = os.getenv("SENTRY_DSN")

    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[
            KeyboardInterrupt,
            SystemExit,
        ],
    )
