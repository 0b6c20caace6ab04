"""Runtime configuration for the Discord sign-in service.

All settings are read once from the environment by ``BridgeConfig.from_env``
and validated up front, so a misconfigured deployment fails at startup
instead of halfway through someone's login.

Environment Variables:
    DISCORD_CLIENT_ID (or CLIENT_ID): Discord application client ID (required)
    DISCORD_CLIENT_SECRET (or CLIENT_SECRET): Discord client secret (required)
    DISCORD_REDIRECT_URI (or REDIRECT_URI): OAuth2 callback URL (required)
    FIREBASE_API_KEY: Firebase Web API key used to redeem custom tokens (required)
    FIREBASE_SERVICE_ACCOUNT (or GOOGLE_APPLICATION_CREDENTIALS): service
        account JSON path; application default credentials when unset
    DISCORD_SCOPE: requested scope (default "identify")
    DISCORD_API_BASE: Discord API root (default "https://discord.com/api")
    SESSION_COOKIE_NAME / SESSION_COOKIE_TTL_SECONDS / SESSION_COOKIE_SECURE
    HTTP_TIMEOUT_SECONDS, LOG_LEVEL, HOST, PORT
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError, MissingParameterError

DISCORD_API_BASE = "https://discord.com/api"
DEFAULT_SCOPE = "identify"

# Firebase accepts session cookies living between 5 minutes and 2 weeks
MIN_SESSION_COOKIE_TTL = 5 * 60
MAX_SESSION_COOKIE_TTL = 14 * 24 * 60 * 60
DEFAULT_SESSION_COOKIE_TTL = 5 * 24 * 60 * 60

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class BridgeConfig(BaseModel):
    """Validated settings for one running instance of the service."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    redirect_uri: str
    firebase_api_key: str
    scope: str = DEFAULT_SCOPE
    discord_api_base: str = DISCORD_API_BASE
    service_account_path: Optional[str] = None
    session_cookie_name: str = "session"
    session_cookie_ttl: int = DEFAULT_SESSION_COOKIE_TTL
    session_cookie_secure: bool = True
    http_timeout: float = Field(default=10.0, gt=0)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=8000, gt=0, lt=65536)

    @field_validator("client_id", "client_secret", "firebase_api_key", "scope")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("redirect_uri", "discord_api_base")
    @classmethod
    def _http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return value

    @field_validator("discord_api_base")
    @classmethod
    def _no_trailing_slash(cls, value: str) -> str:
        # redirect_uri is left untouched: Discord compares it byte for byte
        return value.rstrip("/")

    @field_validator("session_cookie_ttl")
    @classmethod
    def _cookie_ttl_in_range(cls, value: int) -> int:
        if not MIN_SESSION_COOKIE_TTL <= value <= MAX_SESSION_COOKIE_TTL:
            raise ValueError(
                f"must be between {MIN_SESSION_COOKIE_TTL} and {MAX_SESSION_COOKIE_TTL} seconds"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        """Build the configuration from environment variables.

        Raises:
            MissingParameterError: a required variable is unset or empty
            ConfigurationError: a variable is set to an invalid value
        """
        env = os.environ if environ is None else environ

        def required(*names: str) -> str:
            for name in names:
                value = env.get(name, "").strip()
                if value:
                    return value
            raise MissingParameterError(
                names[0],
                f"Missing required environment variable: {' or '.join(names)}",
            )

        def optional(*names: str) -> Optional[str]:
            for name in names:
                value = env.get(name, "").strip()
                if value:
                    return value
            return None

        values = {
            "client_id": required("DISCORD_CLIENT_ID", "CLIENT_ID"),
            "client_secret": required("DISCORD_CLIENT_SECRET", "CLIENT_SECRET"),
            "redirect_uri": required("DISCORD_REDIRECT_URI", "REDIRECT_URI"),
            "firebase_api_key": required("FIREBASE_API_KEY"),
            "service_account_path": optional(
                "FIREBASE_SERVICE_ACCOUNT", "GOOGLE_APPLICATION_CREDENTIALS"
            ),
        }
        optional_fields = {
            "scope": "DISCORD_SCOPE",
            "discord_api_base": "DISCORD_API_BASE",
            "session_cookie_name": "SESSION_COOKIE_NAME",
            "session_cookie_ttl": "SESSION_COOKIE_TTL_SECONDS",
            "http_timeout": "HTTP_TIMEOUT_SECONDS",
            "log_level": "LOG_LEVEL",
            "host": "HOST",
            "port": "PORT",
        }
        for field, name in optional_fields.items():
            value = optional(name)
            if value is not None:
                values[field] = value

        secure = optional("SESSION_COOKIE_SECURE")
        if secure is not None:
            if secure.lower() in _TRUE_VALUES:
                values["session_cookie_secure"] = True
            elif secure.lower() in _FALSE_VALUES:
                values["session_cookie_secure"] = False
            else:
                raise ConfigurationError(
                    f"Invalid SESSION_COOKIE_SECURE value: {secure!r}",
                    parameter="SESSION_COOKIE_SECURE",
                )

        try:
            return cls(**values)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            raise ConfigurationError(
                f"Invalid configuration for {field}: {first['msg']}",
                parameter=field,
            ) from e
