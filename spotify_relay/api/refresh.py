"""Refresh endpoint: POST /api/refresh-token.

The browser cannot read expires_at directly from its HttpOnly cookie, so
it asks /api/check-tokens and calls this endpoint shortly before expiry.
We run a refresh grant with the refresh_token cookie and rewrite the
short-lived cookies.

Spotify sometimes rotates the refresh token.  When the response carries
a new one we store it; otherwise the existing cookie is left alone.

CONCURRENT REFRESHES
----------------------
Two tabs refreshing at the same moment are not coordinated.  Both grants
run against Spotify independently and whichever Set-Cookie the browser
applies last wins.  With rotation enabled one of the two refresh tokens
may already be spent; the next refresh using it fails with a 500 and the
browser has to log in again.  We accept this: there is no server-side
session to lock on.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from spotify_relay.api.dependencies import SessionDep, SettingsDep, TokenClientDep
from spotify_relay.core.errors import ValidationError
from spotify_relay.services.session_cookies import write_session_cookies

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/refresh-token")
async def refresh_token(
    response: Response,
    session: SessionDep,
    settings: SettingsDep,
    token_client: TokenClientDep,
) -> dict[str, str]:
    if not session.has_refresh_token:
        logger.warning("Refresh rejected: no refresh_token cookie")
        raise ValidationError("No refresh_token provided")

    tokens = await token_client.exchange_refresh_token(session.refresh_token)
    write_session_cookies(response, tokens, settings, initial_login=False)

    logger.info(
        "Session refreshed  expires_in=%d refresh_token_rotated=%s",
        tokens.expires_in,
        tokens.refresh_token is not None,
    )
    return {"message": "Tokens refreshed"}
