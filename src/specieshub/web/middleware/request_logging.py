"""Structured request logging middleware for FastAPI."""

import logging
import time
import uuid
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Static assets are requested with every page and would drown out the views
QUIET_PATH_PREFIXES = ("/static/",)


class StructuredRequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one structured line per request.

    A short request id is bound to structlog's context variables for the
    duration of the request, so log lines emitted by views and services
    during the request carry it too.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:12]
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        if request.url.path.startswith(QUIET_PATH_PREFIXES):
            return response

        fields: dict[str, object] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        if request.url.query:
            fields["query"] = str(request.url.query)
        if request.client:
            fields["client_host"] = request.client.host
        if user_agent := request.headers.get("user-agent"):
            fields["user_agent"] = user_agent

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s %s",
            request.method,
            request.url.path,
            response.status_code,
            extra=fields,
        )
        response.headers["X-Request-ID"] = request_id
        return response
