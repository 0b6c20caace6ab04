"""Tests for the session page, protected area and public entry."""

from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from discord_bridge.oauth.session import SIGN_IN_WITH_CUSTOM_TOKEN_URL
from fakes import FakeHttp, FakeResponse, sign_in_response

CREATE_SESSION_COOKIE = "discord_bridge.oauth.session.auth.create_session_cookie"
VERIFY_SESSION_COOKIE = "discord_bridge.oauth.session.auth.verify_session_cookie"


def test_login_with_valid_token_sets_cookie_and_goes_to_admin(client: TestClient, http: FakeHttp) -> None:
    http.add("POST", SIGN_IN_WITH_CUSTOM_TOKEN_URL, sign_in_response())

    with patch(CREATE_SESSION_COOKIE, return_value=b"cookie_abc"):
        resp = client.get("/login", params={"custom_token": "ctk_456"})

    assert resp.status_code == 303
    assert resp.headers["location"] == "/admin"
    set_cookie = resp.headers["set-cookie"]
    assert set_cookie.startswith("session=cookie_abc")
    assert "HttpOnly" in set_cookie
    assert "samesite=lax" in set_cookie.lower()


def test_login_with_invalid_token_goes_to_entry(client: TestClient, http: FakeHttp) -> None:
    http.add(
        "POST",
        SIGN_IN_WITH_CUSTOM_TOKEN_URL,
        FakeResponse(400, {"error": {"code": 400, "message": "INVALID_CUSTOM_TOKEN"}}),
    )

    resp = client.get("/login", params={"custom_token": "expired"})

    assert resp.status_code == 303
    assert resp.headers["location"] == "/"
    assert "set-cookie" not in resp.headers


def test_login_with_unusable_sign_in_response_goes_to_entry(client: TestClient, http: FakeHttp) -> None:
    http.add(
        "POST",
        SIGN_IN_WITH_CUSTOM_TOKEN_URL,
        FakeResponse(200, {"idToken": "idt_789", "expiresIn": {"seconds": 3600}}),
    )

    with patch(CREATE_SESSION_COOKIE) as create_cookie:
        resp = client.get("/login", params={"custom_token": "ctk_456"})

    assert resp.status_code == 303
    assert resp.headers["location"] == "/"
    assert "set-cookie" not in resp.headers
    create_cookie.assert_not_called()


def test_login_without_token_goes_to_entry(client: TestClient, http: FakeHttp) -> None:
    resp = client.get("/login")

    assert resp.status_code == 303
    assert resp.headers["location"] == "/"
    assert http.calls == []


def test_admin_requires_session(client: TestClient) -> None:
    resp = client.get("/admin")

    assert resp.status_code == 303
    assert resp.headers["location"] == "/"


def test_admin_with_session_cookie(client: TestClient) -> None:
    claims = {"uid": "discord:80351110224678912", "discord_username": "nelly<script>"}
    client.cookies.set("session", "cookie_abc")

    with patch(VERIFY_SESSION_COOKIE, return_value=claims) as verify:
        resp = client.get("/admin")

    assert resp.status_code == 200
    assert "discord:80351110224678912" in resp.text
    assert "nelly&lt;script&gt;" in resp.text
    assert verify.call_args.args[0] == "cookie_abc"


def test_index_links_to_discord_login(client: TestClient) -> None:
    resp = client.get("/", params={"auth_error": "access_denied"})

    assert resp.status_code == 200
    assert 'href="/auth/discord/authorize"' in resp.text
    assert "access_denied" in resp.text


def test_logout_clears_cookie(client: TestClient) -> None:
    resp = client.get("/logout")

    assert resp.status_code == 303
    assert resp.headers["location"] == "/"
    assert resp.headers["set-cookie"].startswith('session=""')


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}
