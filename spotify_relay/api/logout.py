"""Logout endpoint: POST /api/logout.

There is nothing server-side to revoke: the session only exists in the
browser's cookie jar.  Logging out means telling the browser to drop all
four cookies.  Calling it again is harmless and yields the same state.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from spotify_relay.api.dependencies import SettingsDep
from spotify_relay.services.session_cookies import clear_session_cookies

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/logout")
async def logout(response: Response, settings: SettingsDep) -> dict[str, str]:
    clear_session_cookies(response, settings)
    logger.info("Session cookies cleared")
    return {"message": "Logged out, cookies cleared"}
