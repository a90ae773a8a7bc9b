"""Prometheus metrics middleware.

Instruments every request: in-flight gauge, request counter by
method/endpoint/status, and a duration histogram.  Proxied Spotify paths
are collapsed to a single endpoint label so arbitrary resource paths
(track IDs, playlist IDs) do not explode label cardinality.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from spotify_relay.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

PROXY_PREFIX = "/api/spotify/"


def endpoint_label(path: str) -> str:
    if path.startswith(PROXY_PREFIX):
        return PROXY_PREFIX + "{path}"
    return path


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Prometheus scrapes would otherwise inflate the request count.
        if request.url.path == "/metrics":
            return await call_next(request)

        endpoint = endpoint_label(request.url.path)
        ACTIVE_REQUESTS.inc()
        start = time.monotonic()
        status_code: str | None = None

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        except Exception:
            # Starlette turns an unhandled exception into a 500; record it as such.
            status_code = "500"
            raise
        finally:
            duration = time.monotonic() - start
            ACTIVE_REQUESTS.dec()
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code if status_code is not None else "500",
            ).inc()
            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(duration)

        return response
