"""Middleware for security headers and request logging."""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from attachment_hub.core.config import get_settings
from attachment_hub.core.metrics import observe_http_request
from attachment_hub.core.request_context import new_request_id, request_id_context
from attachment_hub.core.structured_logging import log_json

logger = logging.getLogger(__name__)
settings = get_settings()

_REQUEST_ID_HEADERS = ("X-Request-ID", "X-Correlation-ID")
_MAX_REQUEST_ID_LENGTH = 128


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add basic security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")

        if settings.environment == "production":
            scheme = request.headers.get("x-forwarded-proto") or request.url.scheme
            if scheme == "https":
                response.headers.setdefault(
                    "Strict-Transport-Security",
                    "max-age=63072000; includeSubDomains",
                )

        return response


def _incoming_request_id(request: Request) -> str | None:
    """Accept a caller-supplied correlation ID if it is a sane single line."""
    for header in _REQUEST_ID_HEADERS:
        candidate = (request.headers.get(header) or "").strip()
        if (
            candidate
            and len(candidate) <= _MAX_REQUEST_ID_LENGTH
            and "\n" not in candidate
            and "\r" not in candidate
        ):
            return candidate
    return None


def _level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one JSON line per request and feed the HTTP metrics.

    The request ID is echoed back in ``X-Request-ID`` and is visible to every
    ``log_json`` call made while the request is handled.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = _incoming_request_id(request) or new_request_id()
        request.state.request_id = request_id

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        fields = {"method": request.method, "path": request.url.path, "client_ip": client_ip}

        with request_id_context(request_id):
            try:
                response = await call_next(request)
            except Exception as exc:
                log_json(
                    logger,
                    logging.ERROR,
                    "request_error",
                    status_code=500,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                    error=str(exc),
                    exception=exc.__class__.__name__,
                    **fields,
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers.setdefault("X-Request-ID", request_id)

            route_obj = request.scope.get("route")
            observe_http_request(
                method=request.method,
                route=getattr(route_obj, "path", None) or "unmatched",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            log_json(
                logger,
                _level_for_status(response.status_code),
                "request",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                **fields,
            )

            return response
