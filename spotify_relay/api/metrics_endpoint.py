"""Prometheus scrape endpoint (text exposition format, not JSON).

Besides the HTTP request series this exposes upstream_requests_total,
split by target (token/api) and outcome, which is the quickest way to
tell a Spotify outage from a relay bug.

Deployments that cannot restrict /metrics at the ingress set
METRICS_ENABLED=false; the route then answers 404 as if it did not exist.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from spotify_relay.api.dependencies import SettingsDep

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics(settings: SettingsDep) -> Response:
    if not settings.metrics_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
