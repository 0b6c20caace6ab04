"""Client handles shared by the request handlers of one application.

The handles are built once per application (in its lifespan), reached by
routes through ``get_services``, and released when the application stops.
"""

from __future__ import annotations

from typing import Optional

import firebase_admin
import requests
from fastapi import Request

from .config import BridgeConfig
from .oauth.discord_manager import DiscordOAuthManager
from .oauth.firebase_auth import close_firebase_app, init_firebase_app
from .oauth.session import SessionEstablisher
from .oauth.token_bridge import TokenBridge
from .utils.http import new_http_session
from .utils.logging import get_logger

logger = get_logger(__name__)


class BridgeServices:
    """Explicitly constructed Discord, Firebase and HTTP clients."""

    def __init__(
        self,
        discord: DiscordOAuthManager,
        bridge: TokenBridge,
        sessions: SessionEstablisher,
        firebase_app: Optional[firebase_admin.App] = None,
        http: Optional[requests.Session] = None,
    ):
        self.discord = discord
        self.bridge = bridge
        self.sessions = sessions
        self.firebase_app = firebase_app
        self.http = http

    @classmethod
    def from_config(cls, config: BridgeConfig) -> "BridgeServices":
        """Build every handle the service needs from its configuration."""
        http = new_http_session()

        try:
            firebase_app = init_firebase_app(config)
        except RuntimeError:
            http.close()
            raise

        discord = DiscordOAuthManager.from_config(config, http=http)
        services = cls(
            discord=discord,
            bridge=TokenBridge(discord=discord, firebase_app=firebase_app),
            sessions=SessionEstablisher.from_config(config, firebase_app=firebase_app, http=http),
            firebase_app=firebase_app,
            http=http,
        )
        logger.info("Created Discord and Firebase client handles")
        return services

    def close(self) -> None:
        """Release the HTTP session and Firebase app owned by these services."""
        if self.http is not None:
            self.http.close()
            self.http = None
        if self.firebase_app is not None:
            close_firebase_app(self.firebase_app)
            self.firebase_app = None


def get_services(request: Request) -> BridgeServices:
    """FastAPI dependency returning the application's client handles."""
    return request.app.state.services
