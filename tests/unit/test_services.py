"""Tests for the shared HTTP session and BridgeServices construction."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests
from requests.cookies import RequestsCookieJar, create_cookie

from discord_bridge.config import BridgeConfig
from discord_bridge.services import BridgeServices
from discord_bridge.utils.http import StatelessCookieJar, new_http_session
from fakes import DISCORD_USER_URL


# --------------------------------------------------------------------------- #
# Shared HTTP session                                                         #
# --------------------------------------------------------------------------- #
def test_http_session_never_keeps_cookies() -> None:
    http = new_http_session()

    http.cookies.set("__cf_bm", "user-a", domain="discord.com", path="/")
    http.cookies.set_cookie(create_cookie("__dcfduid", "user-a", domain="discord.com"))

    assert isinstance(http.cookies, StatelessCookieJar)
    assert len(http.cookies) == 0


def test_cookies_from_one_response_are_not_sent_on_the_next_request() -> None:
    http = new_http_session()
    received = RequestsCookieJar()
    received.set("__cf_bm", "user-a", domain="discord.com", path="/")

    http.cookies.update(received)
    prepared = http.prepare_request(
        requests.Request("GET", DISCORD_USER_URL, headers={"Authorization": "Bearer ptk_user_b"})
    )

    assert "Cookie" not in prepared.headers
    assert prepared.headers["Authorization"] == "Bearer ptk_user_b"
    assert prepared.headers["User-Agent"].startswith("discord-bridge/")


# --------------------------------------------------------------------------- #
# BridgeServices.from_config                                                  #
# --------------------------------------------------------------------------- #
def test_from_config_shares_one_stateless_session(config: BridgeConfig) -> None:
    firebase_app = MagicMock(name="firebase_app")

    with patch("discord_bridge.services.init_firebase_app", return_value=firebase_app):
        services = BridgeServices.from_config(config)

    assert services.discord.http is services.http
    assert services.sessions.http is services.http
    assert isinstance(services.http.cookies, StatelessCookieJar)

    with patch("discord_bridge.services.close_firebase_app") as close_app:
        services.close()

    close_app.assert_called_once_with(firebase_app)
    assert services.http is None


def test_from_config_closes_session_when_firebase_fails(config: BridgeConfig) -> None:
    http = MagicMock(name="http")

    with patch("discord_bridge.services.new_http_session", return_value=http), patch(
        "discord_bridge.services.init_firebase_app", side_effect=RuntimeError("no credentials")
    ):
        with pytest.raises(RuntimeError, match="no credentials"):
            BridgeServices.from_config(config)

    http.close.assert_called_once_with()
