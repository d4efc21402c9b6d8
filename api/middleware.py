"""Request logging and Prometheus timing shared by the HTTP front-ends."""

from __future__ import annotations

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from api.metrics import HTTP_DURATION, HTTP_REQUESTS

logger = logging.getLogger(__name__)

# Endpoints excluded from HTTP metrics to avoid cardinality explosion
_METRICS_EXCLUDE = {"/metrics", "/openapi.json", "/docs", "/redoc"}


def _endpoint(request: Request) -> str:
    """Route template (``/api/notes/{note_id}``) rather than the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Log each request and record its count and duration for Prometheus."""

    def __init__(self, app, app_name: str) -> None:
        super().__init__(app)
        self.app_name = app_name

    async def dispatch(self, request: Request, call_next):
        """Wrap each request with timing and counting."""
        if request.url.path in _METRICS_EXCLUDE:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        endpoint = _endpoint(request)
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed * 1000,
        )
        HTTP_REQUESTS.labels(
            app=self.app_name,
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_DURATION.labels(app=self.app_name, endpoint=endpoint).observe(elapsed)
        return response
