"""Code exchange endpoint: POST /api/token.

The SPA completes Spotify's consent screen, receives ?code=... on its
redirect URI, and posts that code here.  We redeem it with the client
secret (which never leaves the server) and hand the resulting tokens
back as HttpOnly cookies, so browser script never sees them.

The code is accepted as JSON ({"code": "..."}) or as a urlencoded form.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request, Response

from spotify_relay.api.dependencies import SettingsDep, TokenClientDep
from spotify_relay.core.errors import ValidationError
from spotify_relay.services.session_cookies import write_session_cookies

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


async def _read_payload(request: Request) -> dict[str, Any]:
    """Best-effort body decode; anything unreadable counts as empty."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(
        ("application/x-www-form-urlencoded", "multipart/form-data")
    ):
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


@router.post("/token")
async def exchange_token(
    request: Request,
    response: Response,
    settings: SettingsDep,
    token_client: TokenClientDep,
) -> dict[str, str]:
    """Redeem an authorization code and store the token set in cookies."""
    payload = await _read_payload(request)
    code = payload.get("code")
    # JSON numbers are codes too; objects, arrays and booleans are not
    if isinstance(code, (int, float)) and not isinstance(code, bool):
        code = str(code)

    if not code or not isinstance(code, str):
        logger.warning("Code exchange rejected: no code in request")
        raise ValidationError("No code provided in the request")

    tokens = await token_client.exchange_code(code)
    write_session_cookies(response, tokens, settings, initial_login=True)

    logger.info("Session established  expires_in=%d", tokens.expires_in)
    return {"message": "Tokens stored in cookies"}
