"""Shared fixtures: configuration, fake transports and a wired-up app."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from discord_bridge.app import create_app
from discord_bridge.config import BridgeConfig
from discord_bridge.oauth.discord_manager import DiscordOAuthManager
from discord_bridge.oauth.session import SessionEstablisher
from discord_bridge.oauth.token_bridge import TokenBridge
from discord_bridge.services import BridgeServices
from fakes import FakeHttp


@pytest.fixture()
def config() -> BridgeConfig:
    return BridgeConfig(
        client_id="1234567890",
        client_secret="s3cr3t",
        redirect_uri="http://localhost:8000/auth/discord/callback",
        firebase_api_key="AIzaFakeKey",
        session_cookie_secure=False,
    )


@pytest.fixture()
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture()
def firebase_app() -> MagicMock:
    app = MagicMock(name="firebase_app")
    app.name = "discord-bridge-test"
    return app


@pytest.fixture()
def discord(config: BridgeConfig, http: FakeHttp) -> DiscordOAuthManager:
    return DiscordOAuthManager.from_config(config, http=http)


@pytest.fixture()
def bridge(discord: DiscordOAuthManager, firebase_app: MagicMock) -> TokenBridge:
    return TokenBridge(discord=discord, firebase_app=firebase_app)


@pytest.fixture()
def sessions(config: BridgeConfig, firebase_app: MagicMock, http: FakeHttp) -> SessionEstablisher:
    return SessionEstablisher.from_config(config, firebase_app=firebase_app, http=http)


@pytest.fixture()
def services(discord, bridge, sessions) -> BridgeServices:
    return BridgeServices(discord=discord, bridge=bridge, sessions=sessions)


@pytest.fixture()
def client(config: BridgeConfig, services: BridgeServices):
    """TestClient bound to an app using the fake services; redirects are not followed."""
    app = create_app(config, services=services)
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
