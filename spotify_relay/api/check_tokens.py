from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from spotify_relay.api.dependencies import SessionDep

router = APIRouter(prefix="/api", tags=["auth"])


class TokenStatusOut(BaseModel):
    access_token_exists: bool
    refresh_token_exists: bool
    expires_at: str | None
    token_type: str | None


@router.get("/check-tokens", response_model=TokenStatusOut)
async def check_tokens(session: SessionDep) -> TokenStatusOut:
    """Report which session cookies are present.

    Token values are never echoed back; the browser only learns that they
    exist, plus the advisory expiry and token type.
    """
    return TokenStatusOut(
        access_token_exists=session.has_access_token,
        refresh_token_exists=session.has_refresh_token,
        expires_at=session.expires_at,
        token_type=session.token_type,
    )
