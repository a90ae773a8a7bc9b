from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl

import httpx
import pytest
from fastapi.testclient import TestClient

from spotify_relay.core.config import Settings
from spotify_relay.main import create_app

TOKEN_URL = "https://accounts.spotify.com/api/token"
API_BASE_URL = "https://api.spotify.com/v1"

LOGIN_TOKENS = {
    "access_token": "AT1",
    "refresh_token": "RT1",
    "expires_in": 3600,
    "token_type": "Bearer",
    "scope": "user-read-private user-read-email",
}


class FakeSpotify:
    """Stands in for accounts.spotify.com and api.spotify.com.

    Tests set token_reply / api_reply to (status, json_body) and inspect
    the recorded requests afterwards.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_reply: tuple[int, Any] = (200, dict(LOGIN_TOKENS))
        self.api_reply: tuple[int, Any] = (200, {"id": "spotify-user"})
        self.fail_transport = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_transport:
            raise httpx.ConnectError("connection refused", request=request)
        if str(request.url) == TOKEN_URL:
            status_code, body = self.token_reply
        else:
            status_code, body = self.api_reply
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    @property
    def token_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == TOKEN_URL]

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) != TOKEN_URL]


def form_of(request: httpx.Request) -> dict[str, str]:
    return dict(parse_qsl(request.content.decode()))


def set_cookie_headers(resp: httpx.Response) -> list[str]:
    return resp.headers.get_list("set-cookie")


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "client_id": "test-client-id",
        "client_secret": "test-client-secret",
        "redirect_uri": "http://127.0.0.1:5173/callback",
        "app_env": "test",
        "token_url": TOKEN_URL,
        "api_base_url": API_BASE_URL,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_spotify() -> FakeSpotify:
    return FakeSpotify()


@pytest.fixture
def client(settings: Settings, fake_spotify: FakeSpotify) -> TestClient:
    app = create_app(settings, transport=httpx.MockTransport(fake_spotify))
    return TestClient(app)


def login(client: TestClient, code: str = "abc123") -> httpx.Response:
    resp = client.post("/api/token", json={"code": code})
    assert resp.status_code == 200
    return resp
