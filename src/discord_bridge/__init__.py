"""Sign in with Discord and continue as a Firebase Authentication user.

The package provides:
- Discord OAuth2 authorization-code flow (consent URL, code exchange)
- A token bridge minting Firebase custom tokens for Discord accounts
- Session establishment through Firebase session cookies
- A FastAPI application wiring the steps together
"""

__version__ = "0.1.0"

from .app import create_app
from .config import BridgeConfig
from .errors import (
    CodeExchangeError,
    ConfigurationError,
    DiscordAPIError,
    DiscordBridgeError,
    MissingParameterError,
    TokenBridgeError,
)

__all__ = [
    "__version__",
    "create_app",
    "BridgeConfig",
    "CodeExchangeError",
    "ConfigurationError",
    "DiscordAPIError",
    "DiscordBridgeError",
    "MissingParameterError",
    "TokenBridgeError",
]
