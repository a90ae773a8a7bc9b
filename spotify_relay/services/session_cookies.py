"""Cookie codec: SessionTokens <-> HTTP cookies.

Every cookie is HttpOnly so browser script never sees a token.  The
Secure flag and SameSite policy come from Settings; Settings refuses
SameSite=None without Secure, so the pair written here is always one a
browser will accept.

Lifetimes:
  access_token, expires_at, token_type   expires_in seconds (token validity)
  refresh_token                          30 days
"""

from __future__ import annotations

import logging
import time

from starlette.requests import Request
from starlette.responses import Response

from spotify_relay.core.config import Settings
from spotify_relay.models.session import (
    ACCESS_TOKEN_COOKIE,
    EXPIRES_AT_COOKIE,
    REFRESH_TOKEN_COOKIE,
    SESSION_COOKIES,
    TOKEN_TYPE_COOKIE,
    SessionTokens,
    TokenResponse,
)

logger = logging.getLogger(__name__)

REFRESH_TOKEN_MAX_AGE = 30 * 24 * 60 * 60
COOKIE_PATH = "/"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _set(response: Response, settings: Settings, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key,
        value,
        max_age=max_age,
        path=COOKIE_PATH,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def write_session_cookies(
    response: Response,
    tokens: TokenResponse,
    settings: Settings,
    *,
    initial_login: bool,
    now_ms: int | None = None,
) -> None:
    """Write the session cookies for a fresh token response.

    The refresh token cookie is written on initial login and whenever the
    provider rotated the refresh token.  A response without a refresh
    token never blanks the cookie; the browser keeps the one it has.
    """
    if now_ms is None:
        now_ms = _now_ms()
    max_age = tokens.expires_in

    _set(response, settings, ACCESS_TOKEN_COOKIE, tokens.access_token, max_age)
    _set(response, settings, EXPIRES_AT_COOKIE, str(tokens.expires_at_ms(now_ms)), max_age)
    _set(response, settings, TOKEN_TYPE_COOKIE, tokens.token_type, max_age)

    if tokens.refresh_token:
        _set(
            response,
            settings,
            REFRESH_TOKEN_COOKIE,
            tokens.refresh_token,
            REFRESH_TOKEN_MAX_AGE,
        )
        logger.debug("Refresh token cookie written  initial_login=%s", initial_login)
    elif initial_login:
        logger.warning("Code exchange returned no refresh token; refresh cookie left as is")


def read_session_cookies(request: Request) -> SessionTokens:
    """Snapshot the session from request cookies.  Never raises."""
    cookies = request.cookies
    return SessionTokens(
        access_token=cookies.get(ACCESS_TOKEN_COOKIE) or None,
        refresh_token=cookies.get(REFRESH_TOKEN_COOKIE) or None,
        expires_at=cookies.get(EXPIRES_AT_COOKIE) or None,
        token_type=cookies.get(TOKEN_TYPE_COOKIE) or None,
    )


def clear_session_cookies(response: Response, settings: Settings) -> None:
    for key in SESSION_COOKIES:
        response.delete_cookie(
            key,
            path=COOKIE_PATH,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )
