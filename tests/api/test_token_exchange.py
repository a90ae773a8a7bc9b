"""Code exchange and refresh endpoint tests.

Covers:
1. POST /api/token redeems the code and stores all four cookies
2. Missing code -> 400 with no cookies
3. Upstream rejection -> 500 with the upstream body as details
4. POST /api/refresh-token requires the refresh_token cookie
5. Refresh keeps the refresh_token cookie unless Spotify rotates it
"""

from __future__ import annotations

import time

import pytest
from fastapi.testclient import TestClient

from tests.conftest import (
    LOGIN_TOKENS,
    FakeSpotify,
    form_of,
    login,
    set_cookie_headers,
)

# ---------------------------------------------------------------------------
# POST /api/token
# ---------------------------------------------------------------------------


def test_token_exchange_sets_cookies(client: TestClient, fake_spotify: FakeSpotify) -> None:
    before_ms = int(time.time() * 1000)
    resp = client.post("/api/token", json={"code": "abc123"})
    after_ms = int(time.time() * 1000)

    assert resp.status_code == 200
    assert resp.json() == {"message": "Tokens stored in cookies"}
    assert client.cookies.get("access_token") == "AT1"
    assert client.cookies.get("refresh_token") == "RT1"
    assert client.cookies.get("token_type") == "Bearer"

    expires_at = int(client.cookies.get("expires_at"))
    assert before_ms + 3_600_000 <= expires_at <= after_ms + 3_600_000


def test_token_exchange_posts_authorization_code_grant(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    login(client)

    assert len(fake_spotify.token_requests) == 1
    request = fake_spotify.token_requests[0]
    assert request.method == "POST"
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert form_of(request) == {
        "grant_type": "authorization_code",
        "code": "abc123",
        "redirect_uri": "http://127.0.0.1:5173/callback",
        "client_id": "test-client-id",
        "client_secret": "test-client-secret",
    }


def test_token_exchange_accepts_form_body(client: TestClient, fake_spotify: FakeSpotify) -> None:
    resp = client.post("/api/token", data={"code": "form-code"})
    assert resp.status_code == 200
    assert form_of(fake_spotify.token_requests[0])["code"] == "form-code"


def test_token_exchange_cookie_attributes(client: TestClient) -> None:
    resp = login(client)
    headers = {h.split("=", 1)[0]: h.lower() for h in set_cookie_headers(resp)}

    assert set(headers) == {"access_token", "refresh_token", "expires_at", "token_type"}
    for header in headers.values():
        assert "httponly" in header
        assert "samesite=strict" in header
        assert "path=/" in header
        # test settings run with COOKIE_SECURE off
        assert "secure" not in header.replace("samesite", "")
    assert "max-age=3600" in headers["access_token"]
    assert "max-age=3600" in headers["expires_at"]
    assert "max-age=3600" in headers["token_type"]
    assert f"max-age={30 * 24 * 60 * 60}" in headers["refresh_token"]


def test_token_exchange_defaults_token_type(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    body = dict(LOGIN_TOKENS)
    del body["token_type"]
    fake_spotify.token_reply = (200, body)

    login(client)
    assert client.cookies.get("token_type") == "Bearer"


def test_token_exchange_missing_code_returns_400(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    resp = client.post("/api/token", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No code provided in the request"}
    assert set_cookie_headers(resp) == []
    assert fake_spotify.requests == []


def test_token_exchange_accepts_numeric_code(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    resp = client.post("/api/token", json={"code": 123})
    assert resp.status_code == 200
    assert form_of(fake_spotify.token_requests[0])["code"] == "123"


@pytest.mark.parametrize("code", [True, ["abc"], {"value": "abc"}])
def test_token_exchange_rejects_structured_code(
    client: TestClient, fake_spotify: FakeSpotify, code: object
) -> None:
    resp = client.post("/api/token", json={"code": code})
    assert resp.status_code == 400
    assert fake_spotify.requests == []


def test_token_exchange_empty_body_returns_400(client: TestClient) -> None:
    resp = client.post("/api/token")
    assert resp.status_code == 400
    assert set_cookie_headers(resp) == []


def test_token_exchange_malformed_json_returns_400(client: TestClient) -> None:
    resp = client.post(
        "/api/token",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400


def test_token_exchange_upstream_rejection_returns_500(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    upstream_error = {"error": "invalid_grant", "error_description": "Invalid authorization code"}
    fake_spotify.token_reply = (400, upstream_error)

    resp = client.post("/api/token", json={"code": "stale"})

    assert resp.status_code == 500
    data = resp.json()
    assert data["error"] == "Failed to exchange the authorization code for a token"
    assert data["details"] == upstream_error
    assert set_cookie_headers(resp) == []


def test_token_exchange_unreachable_upstream_returns_500(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    fake_spotify.fail_transport = True

    resp = client.post("/api/token", json={"code": "abc123"})

    assert resp.status_code == 500
    assert resp.json()["details"] is None


def test_token_then_check_tokens_reports_both_tokens(client: TestClient) -> None:
    login(client)
    data = client.get("/api/check-tokens").json()
    assert data["access_token_exists"] is True
    assert data["refresh_token_exists"] is True


def test_relogin_without_refresh_token_keeps_refresh_cookie(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    login(client)
    fake_spotify.token_reply = (200, {"access_token": "AT2", "expires_in": 3600})

    resp = login(client, code="second-code")

    assert not any(h.startswith("refresh_token=") for h in set_cookie_headers(resp))
    assert client.cookies.get("refresh_token") == "RT1"
    assert client.get("/api/check-tokens").json()["refresh_token_exists"] is True


# ---------------------------------------------------------------------------
# POST /api/refresh-token
# ---------------------------------------------------------------------------


def test_refresh_without_cookie_returns_400(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    resp = client.post("/api/refresh-token")
    assert resp.status_code == 400
    assert resp.json() == {"error": "No refresh_token provided"}
    assert fake_spotify.requests == []


def test_refresh_posts_refresh_grant(client: TestClient, fake_spotify: FakeSpotify) -> None:
    login(client)
    fake_spotify.token_reply = (200, {"access_token": "AT2", "expires_in": 3600})

    resp = client.post("/api/refresh-token")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Tokens refreshed"}
    assert form_of(fake_spotify.token_requests[-1]) == {
        "grant_type": "refresh_token",
        "refresh_token": "RT1",
        "client_id": "test-client-id",
        "client_secret": "test-client-secret",
    }


def test_refresh_without_rotation_keeps_refresh_cookie(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    login(client)
    first_expires_at = int(client.cookies.get("expires_at"))
    fake_spotify.token_reply = (
        200,
        {"access_token": "AT2", "expires_in": 7200, "token_type": "Bearer"},
    )

    resp = client.post("/api/refresh-token")

    names = {h.split("=", 1)[0] for h in set_cookie_headers(resp)}
    assert names == {"access_token", "expires_at", "token_type"}
    assert client.cookies.get("access_token") == "AT2"
    assert client.cookies.get("refresh_token") == "RT1"
    assert int(client.cookies.get("expires_at")) > first_expires_at


def test_refresh_with_rotation_replaces_refresh_cookie(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    login(client)
    fake_spotify.token_reply = (
        200,
        {"access_token": "AT2", "refresh_token": "RT2", "expires_in": 3600},
    )

    client.post("/api/refresh-token")

    assert client.cookies.get("refresh_token") == "RT2"


def test_refresh_upstream_rejection_returns_500(
    client: TestClient, fake_spotify: FakeSpotify
) -> None:
    login(client)
    upstream_error = {"error": "invalid_grant", "error_description": "Refresh token revoked"}
    fake_spotify.token_reply = (400, upstream_error)

    resp = client.post("/api/refresh-token")

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Failed to refresh the access token",
        "details": upstream_error,
    }
    # the existing session is left as it was
    assert client.cookies.get("access_token") == "AT1"
