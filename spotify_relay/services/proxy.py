"""Authenticated GET pass-through to the Spotify Web API.

The browser never holds the access token, so it asks us to make the call
instead.  We attach the token from its cookie and relay the answer.

We do NOT refresh on a 401.  The upstream status reaches the browser
unchanged and the browser calls /api/refresh-token itself.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from spotify_relay.core.config import Settings
from spotify_relay.core.errors import UpstreamResourceError
from spotify_relay.core.metrics import UPSTREAM_REQUESTS
from spotify_relay.services.token_client import response_body

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Spotify request failed"


def normalize_resource_path(path: str) -> str:
    return path.strip("/")


def build_upstream_url(base_url: str, resource_path: str, query_string: str) -> str:
    """Join base, normalized path and the raw query string.

    The query string is passed through verbatim; Spotify validates it.
    """
    url = f"{base_url.rstrip('/')}/{normalize_resource_path(resource_path)}"
    if query_string:
        url = f"{url}?{query_string}"
    return url


class ProxyForwarder:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http_client

    def upstream_url(self, resource_path: str, query_string: str) -> str:
        return build_upstream_url(self._settings.api_base_url, resource_path, query_string)

    async def forward(
        self, resource_path: str, query_string: str, access_token: str
    ) -> Any:
        url = self.upstream_url(resource_path, query_string)
        # Log the path only; query strings can carry user data.
        path = normalize_resource_path(resource_path)

        try:
            response = await self._http.get(
                url, headers={"Authorization": f"Bearer {access_token}"}
            )
        except httpx.RequestError as e:
            UPSTREAM_REQUESTS.labels(target="api", outcome="transport_error").inc()
            logger.error(
                "Spotify API unreachable  path=%s error=%s", path, type(e).__name__
            )
            raise UpstreamResourceError(FAILURE_MESSAGE) from e

        body = response_body(response)
        if not response.is_success:
            UPSTREAM_REQUESTS.labels(target="api", outcome="http_error").inc()
            logger.warning(
                "Spotify API error  path=%s status=%d", path, response.status_code
            )
            raise UpstreamResourceError(
                FAILURE_MESSAGE,
                upstream_status=response.status_code,
                details=body,
            )

        UPSTREAM_REQUESTS.labels(target="api", outcome="success").inc()
        logger.debug("Spotify API ok  path=%s status=%d", path, response.status_code)
        return body
