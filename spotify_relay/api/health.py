"""Welcome, liveness and readiness endpoints.

  /        the SPA's "is the backend up?" ping
  /health  liveness: the process can answer
  /ready   readiness: can this instance take traffic?

The relay keeps no backing services of its own (no DB, no cache), so
readiness reduces to liveness.  Spotify being down is reported per
request, not by pulling the instance out of rotation.
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from spotify_relay.api.dependencies import SettingsDep

router = APIRouter(tags=["health"])


@router.get("/")
async def welcome() -> dict[str, str]:
    return {"message": "Welcome to the Spotify application API!"}


@router.get("/health")
async def health(settings: SettingsDep) -> dict[str, str]:
    return {"status": "ok", "env": settings.app_env}


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
