"""FastAPI dependencies.

Settings and the shared httpx client live on app.state (set up by
create_app); these helpers hand them to route handlers so no module
reads configuration from globals.
"""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends, Request

from spotify_relay.core.config import Settings
from spotify_relay.models.session import SessionTokens
from spotify_relay.services.proxy import ProxyForwarder
from spotify_relay.services.session_cookies import read_session_cookies
from spotify_relay.services.token_client import TokenExchangeClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_session(request: Request) -> SessionTokens:
    return read_session_cookies(request)


def get_token_client(
    settings: Annotated[Settings, Depends(get_settings)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> TokenExchangeClient:
    return TokenExchangeClient(settings, http_client)


def get_proxy_forwarder(
    settings: Annotated[Settings, Depends(get_settings)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> ProxyForwarder:
    return ProxyForwarder(settings, http_client)


SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionDep = Annotated[SessionTokens, Depends(get_session)]
TokenClientDep = Annotated[TokenExchangeClient, Depends(get_token_client)]
ProxyDep = Annotated[ProxyForwarder, Depends(get_proxy_forwarder)]
