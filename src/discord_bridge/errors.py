"""Exception types raised across the Discord to Firebase sign-in flow.

Every error carries the HTTP status the web layer should answer with and a
short machine-readable code, so route handlers can simply raise and let the
application's exception handler render the JSON body.
"""

from __future__ import annotations

from typing import Any, Optional


class DiscordBridgeError(Exception):
    """Base class for all errors raised by discord_bridge."""

    http_status = 500
    error = "internal_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = {key: value for key, value in details.items() if value is not None}

    def to_dict(self) -> dict[str, Any]:
        """Render the error as the JSON body returned to HTTP clients."""
        return {"error": self.error, "detail": self.message, **self.details}


class ConfigurationError(DiscordBridgeError):
    """Configuration is present but invalid."""

    error = "configuration_error"


class MissingParameterError(ConfigurationError):
    """A required parameter (environment variable, query or body field) is absent."""

    http_status = 400
    error = "missing_parameter"

    def __init__(self, parameter: str, message: Optional[str] = None):
        super().__init__(
            message or f"Missing required parameter: {parameter}",
            parameter=parameter,
        )
        self.parameter = parameter


class CodeExchangeError(DiscordBridgeError):
    """Discord refused, or could not be reached for, the authorization code exchange."""

    http_status = 502
    error = "code_exchange_failed"

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        provider_error: Optional[str] = None,
    ):
        super().__init__(
            message,
            upstream_status=upstream_status,
            provider_error=provider_error,
        )
        self.upstream_status = upstream_status
        self.provider_error = provider_error


class DiscordAPIError(DiscordBridgeError):
    """A Discord REST call made with a user access token failed."""

    http_status = 502
    error = "discord_api_error"

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message, upstream_status=upstream_status)
        self.upstream_status = upstream_status


class TokenBridgeError(DiscordBridgeError):
    """The token bridge answered with an error result instead of a custom token."""

    http_status = 502
    error = "token_bridge_failed"

    def __init__(self, reason: str):
        super().__init__(f"Could not mint a Firebase custom token: {reason}", reason=reason)
        self.reason = reason
