"""Token exchange client for the Spotify accounts service.

Both grants hit the same token endpoint with a form-encoded body and the
client credentials in the body:

  authorization_code   code + redirect_uri         -> access + refresh token
  refresh_token        refresh_token               -> access (+ maybe refresh)

No retry.  A failed grant surfaces to the caller immediately; the browser
decides whether to try again.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from spotify_relay.core.config import Settings
from spotify_relay.core.errors import MissingCredential, UpstreamAuthError
from spotify_relay.core.metrics import UPSTREAM_REQUESTS
from spotify_relay.models.session import TokenResponse

logger = logging.getLogger(__name__)


def response_body(response: httpx.Response) -> Any:
    """Decode an upstream body as JSON, falling back to text (None if empty)."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class TokenExchangeClient:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http_client

    async def exchange_code(self, code: str) -> TokenResponse:
        """Redeem an authorization code for a token set."""
        return await self._grant(
            "authorization_code",
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._settings.redirect_uri,
            },
            failure_message="Failed to exchange the authorization code for a token",
        )

    async def exchange_refresh_token(self, refresh_token: str | None) -> TokenResponse:
        """Mint a new access token from a refresh token."""
        if not refresh_token:
            raise MissingCredential("No refresh_token provided")
        return await self._grant(
            "refresh_token",
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            failure_message="Failed to refresh the access token",
        )

    async def _grant(
        self, grant_type: str, form: dict[str, str], *, failure_message: str
    ) -> TokenResponse:
        form = {
            **form,
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
        }

        try:
            response = await self._http.post(
                self._settings.token_url,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.RequestError as e:
            UPSTREAM_REQUESTS.labels(target="token", outcome="transport_error").inc()
            logger.error(
                "Token endpoint unreachable  grant=%s error=%s",
                grant_type,
                type(e).__name__,
            )
            raise UpstreamAuthError(failure_message) from e

        body = response_body(response)
        if not response.is_success:
            UPSTREAM_REQUESTS.labels(target="token", outcome="http_error").inc()
            logger.warning(
                "Token endpoint rejected grant  grant=%s status=%d",
                grant_type,
                response.status_code,
            )
            raise UpstreamAuthError(
                failure_message,
                upstream_status=response.status_code,
                details=body,
            )

        try:
            tokens = TokenResponse.model_validate(body)
        except PydanticValidationError as e:
            UPSTREAM_REQUESTS.labels(target="token", outcome="http_error").inc()
            logger.warning(
                "Token endpoint returned an unusable body  grant=%s status=%d",
                grant_type,
                response.status_code,
            )
            raise UpstreamAuthError(
                failure_message,
                upstream_status=response.status_code,
                details=body,
            ) from e

        UPSTREAM_REQUESTS.labels(target="token", outcome="success").inc()
        logger.info(
            "Token grant succeeded  grant=%s expires_in=%d refresh_token_returned=%s scopes=%s",
            grant_type,
            tokens.expires_in,
            tokens.refresh_token is not None,
            tokens.scope.split() if tokens.scope else [],
        )
        return tokens
