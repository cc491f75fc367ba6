"""Per-request context: correlation id, access log and timing headers."""

import time
from collections.abc import Awaitable, Callable

import sentry_sdk
from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from core.correlation import resolve_correlation_id, set_correlation_id
from models.config import settings

CORRELATION_HEADER = "X-Correlation-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Bind a correlation id to the request and log it with its duration.

    The id sent by the frontend is reused when it is well formed, so a
    report submission can be followed from the browser console to Sentry.
    Both the id and the elapsed time are echoed back as response headers.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = resolve_correlation_id(request.headers.get(CORRELATION_HEADER))
        set_correlation_id(correlation_id)
        sentry_sdk.set_tag("correlation_id", correlation_id)

        route = f"{request.method} {request.url.path}"
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request: {route} from {client_host}")

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        logger.info(f"Response: {route} status={response.status_code} duration={elapsed:.3f}s")
        if elapsed > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"Slow request: {route} took {elapsed:.2f}s "
                f"(threshold: {settings.SLOW_REQUEST_THRESHOLD}s)"
            )

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed:.3f}s"
        return response
