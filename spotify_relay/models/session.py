"""Session value types.

There is no server-side session.  A SessionTokens value is rebuilt from
the four cookies on every request and thrown away afterwards; losing the
cookie jar ends the session.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, field_validator

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
EXPIRES_AT_COOKIE = "expires_at"
TOKEN_TYPE_COOKIE = "token_type"

SESSION_COOKIES = (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    EXPIRES_AT_COOKIE,
    TOKEN_TYPE_COOKIE,
)

DEFAULT_TOKEN_TYPE = "Bearer"


@dataclass(frozen=True)
class SessionTokens:
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: str | None = None
    token_type: str | None = None

    @property
    def has_access_token(self) -> bool:
        return bool(self.access_token)

    @property
    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token)


class TokenResponse(BaseModel):
    """Fields we consume from the provider's token endpoint."""

    access_token: str
    expires_in: int
    refresh_token: str | None = None
    token_type: str = DEFAULT_TOKEN_TYPE
    scope: str | None = None

    @field_validator("token_type", mode="before")
    @classmethod
    def _default_token_type(cls, v: object) -> object:
        return v or DEFAULT_TOKEN_TYPE

    def expires_at_ms(self, now_ms: int) -> int:
        return now_ms + self.expires_in * 1000
