from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request, status

from spotify_relay.api.dependencies import ProxyDep, SessionDep
from spotify_relay.core.errors import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/spotify", tags=["spotify"])


@router.get("/{resource_path:path}")
async def proxy_spotify(
    resource_path: str,
    request: Request,
    session: SessionDep,
    proxy: ProxyDep,
) -> Any:
    """Relay a GET to the Spotify Web API with the session's access token.

    /api/spotify/me/playlists?limit=10 -> GET https://api.spotify.com/v1/me/playlists?limit=10
    """
    if not session.has_access_token:
        logger.warning("Spotify proxy rejected: no access_token cookie")
        raise ValidationError(
            "No access token", status_code=status.HTTP_401_UNAUTHORIZED
        )

    return await proxy.forward(
        resource_path, request.url.query, session.access_token  # type: ignore[arg-type]
    )
