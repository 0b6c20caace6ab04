"""OAuth2 authorization-code flow against Discord."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlencode

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from ..config import DEFAULT_SCOPE, DISCORD_API_BASE, BridgeConfig
from ..errors import CodeExchangeError, DiscordAPIError, MissingParameterError
from ..utils.http import new_http_session
from ..utils.logging import get_logger, mask_token

logger = get_logger(__name__)


class DiscordUser(BaseModel):
    """The subset of ``GET /users/@me`` needed to identify a Discord account."""

    model_config = ConfigDict(extra="ignore")

    id: str
    username: str
    global_name: Optional[str] = None
    avatar: Optional[str] = None

    @property
    def firebase_uid(self) -> str:
        """Stable Firebase subject for this account; Discord snowflakes never change."""
        return f"discord:{self.id}"


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scope: str = DEFAULT_SCOPE,
    api_base: str = DISCORD_API_BASE,
) -> str:
    """Build the Discord consent screen URL.

    Args:
        client_id: Discord application client ID
        redirect_uri: Callback URL registered on the Discord application
        scope: Space separated OAuth2 scopes
        api_base: Discord API root

    Returns:
        Fully qualified authorization URL with ``response_type=code``

    Raises:
        MissingParameterError: client_id, redirect_uri or scope is empty
    """
    for name, value in (("client_id", client_id), ("redirect_uri", redirect_uri), ("scope", scope)):
        if not value or not value.strip():
            raise MissingParameterError(name)

    query = urlencode(
        {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": scope,
        }
    )
    return f"{api_base.rstrip('/')}/oauth2/authorize?{query}"


class DiscordOAuthManager:
    """Talks to Discord's OAuth2 and user endpoints on behalf of one application."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scope: str = DEFAULT_SCOPE,
        api_base: str = DISCORD_API_BASE,
        http: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        """Initialize OAuth manager.

        Args:
            client_id: Discord OAuth2 client ID
            client_secret: Discord OAuth2 client secret
            redirect_uri: OAuth2 redirect URI (e.g., https://your-app.com/auth/discord/callback)
            scope: Requested scopes, "identify" unless configured otherwise
            api_base: Discord API root
            http: HTTP session to issue requests with; a private one is created when omitted
            timeout: Per-request timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = scope
        self.api_base = api_base.rstrip("/")
        self.http = http if http is not None else new_http_session()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: BridgeConfig, http: Optional[requests.Session] = None) -> "DiscordOAuthManager":
        return cls(
            client_id=config.client_id,
            client_secret=config.client_secret,
            redirect_uri=config.redirect_uri,
            scope=config.scope,
            api_base=config.discord_api_base,
            http=http,
            timeout=config.http_timeout,
        )

    @property
    def token_url(self) -> str:
        return f"{self.api_base}/oauth2/token"

    @property
    def user_url(self) -> str:
        return f"{self.api_base}/users/@me"

    def create_authorization_url(self) -> str:
        """Create the consent URL the browser should be sent to."""
        return build_authorization_url(
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            scope=self.scope,
            api_base=self.api_base,
        )

    def exchange_code_for_token(self, code: str) -> str:
        """Exchange an authorization code for a Discord access token.

        A single POST is made; nothing is retried.

        Args:
            code: Authorization code from the OAuth callback

        Returns:
            The access token issued by Discord

        Raises:
            MissingParameterError: code is empty
            CodeExchangeError: Discord was unreachable, rejected the code,
                or answered without an access token
        """
        if not code or not code.strip():
            raise MissingParameterError("code")

        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        }

        try:
            response = self.http.post(
                self.token_url,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Discord token endpoint unreachable: {e}", exc_info=True)
            raise CodeExchangeError(f"Could not reach Discord token endpoint: {e}") from e

        payload = _json_or_none(response)

        if not response.ok:
            provider_error = payload.get("error") if payload else None
            description = payload.get("error_description") if payload else None
            logger.warning(
                f"Discord rejected authorization code {mask_token(code)} "
                f"(status {response.status_code}, error={provider_error})"
            )
            raise CodeExchangeError(
                description or f"Discord token endpoint returned {response.status_code}",
                upstream_status=response.status_code,
                provider_error=provider_error,
            )

        if payload is None:
            logger.error("Discord token endpoint returned a non-JSON body")
            raise CodeExchangeError(
                "Discord token endpoint returned an unreadable response",
                upstream_status=response.status_code,
            )

        access_token = payload.get("access_token")
        if not access_token or not isinstance(access_token, str):
            logger.error(f"Discord token response missing access_token (keys: {sorted(payload)})")
            raise CodeExchangeError(
                "Discord token response did not contain an access token",
                upstream_status=response.status_code,
            )

        logger.info(
            f"Exchanged authorization code for Discord access token {mask_token(access_token)} "
            f"(scope={payload.get('scope')}, expires_in={payload.get('expires_in')})"
        )
        return access_token

    def get_current_user(self, access_token: str) -> DiscordUser:
        """Resolve the Discord account an access token belongs to.

        Raises:
            DiscordAPIError: the token was rejected or the response was unusable
        """
        try:
            response = self.http.get(
                self.user_url,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Discord user endpoint unreachable: {e}", exc_info=True)
            raise DiscordAPIError(f"Could not reach Discord user endpoint: {e}") from e

        if not response.ok:
            logger.warning(
                f"Discord rejected access token {mask_token(access_token)} "
                f"(status {response.status_code})"
            )
            raise DiscordAPIError(
                f"Discord user endpoint returned {response.status_code}",
                upstream_status=response.status_code,
            )

        payload = _json_or_none(response)
        if payload is None:
            raise DiscordAPIError(
                "Discord user endpoint returned an unreadable response",
                upstream_status=response.status_code,
            )

        try:
            user = DiscordUser.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Unexpected Discord user payload: {e}")
            raise DiscordAPIError(
                "Discord user payload missing id or username",
                upstream_status=response.status_code,
            ) from e

        logger.debug(f"Resolved Discord user {user.id} ({user.username})")
        return user

    def close(self) -> None:
        self.http.close()


def _json_or_none(response: Any) -> Optional[dict[str, Any]]:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None
