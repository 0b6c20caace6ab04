"""Discord OAuth2 flow bridged into Firebase Authentication.

This package provides:
- Discord authorization URL building and code exchange
- Firebase custom token minting keyed on the Discord user ID
- Session establishment from custom tokens via session cookies
- FastAPI routes for the callback and the ``createToken`` RPC
"""

from .discord_manager import DiscordOAuthManager, DiscordUser, build_authorization_url
from .firebase_auth import current_session, init_firebase_app
from .session import SessionEstablished, SessionEstablisher, SessionFailed, SessionResult
from .token_bridge import BridgeError, BridgeSuccess, TokenBridge, TokenBridgeResult

__all__ = [
    "DiscordOAuthManager",
    "DiscordUser",
    "build_authorization_url",
    "current_session",
    "init_firebase_app",
    "SessionEstablished",
    "SessionEstablisher",
    "SessionFailed",
    "SessionResult",
    "BridgeError",
    "BridgeSuccess",
    "TokenBridge",
    "TokenBridgeResult",
]
