"""Convert a Discord access token into a Firebase custom token.

The bridge is the only privileged step of the sign-in flow: it signs a
Firebase custom token with the service account the Firebase app was
initialized with. Failures are returned as ``BridgeError`` values rather
than raised, so callers have to branch on the result before using it.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, TypeAlias, Union

import firebase_admin
from firebase_admin import auth, exceptions
from pydantic import BaseModel, ConfigDict, Field

from ..errors import DiscordAPIError
from ..utils.logging import get_logger, mask_token
from .discord_manager import DiscordOAuthManager

logger = get_logger(__name__)

PROVIDER = "discord"


class BridgeSuccess(BaseModel):
    """A freshly minted Firebase custom token."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: Literal["success"] = "success"
    custom_token: str = Field(alias="customToken", min_length=1)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class BridgeError(BaseModel):
    """Minting failed; ``reason`` says why."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: Literal["error"] = "error"
    reason: str = Field(alias="error")
    access_token: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


TokenBridgeResult: TypeAlias = Union[BridgeSuccess, BridgeError]


class TokenBridge:
    """Mints Firebase custom tokens for Discord accounts.

    The subject of every minted token is the account's stable Discord user
    ID (``discord:<snowflake>``), never the access token itself, so the same
    Discord user always maps to the same Firebase user.
    """

    def __init__(self, discord: DiscordOAuthManager, firebase_app: firebase_admin.App):
        """Initialize the bridge.

        Args:
            discord: OAuth manager used to look up the token's owner
            firebase_app: Firebase app holding the signing service account
        """
        self.discord = discord
        self.firebase_app = firebase_app

    def create_token(self, access_token: str) -> TokenBridgeResult:
        """Exchange a Discord access token for a Firebase custom token.

        Args:
            access_token: Discord access token with the ``identify`` scope

        Returns:
            BridgeSuccess with the custom token, or BridgeError on any failure
        """
        if not access_token or not access_token.strip():
            logger.warning("Token bridge called without an access token")
            return BridgeError(reason="access_token is required", access_token=access_token)

        try:
            user = self.discord.get_current_user(access_token)
        except DiscordAPIError as e:
            logger.warning(f"Could not resolve Discord user for token {mask_token(access_token)}: {e}")
            return BridgeError(reason=e.message, access_token=access_token)

        developer_claims = {"provider": PROVIDER}
        if user.username:
            developer_claims["discord_username"] = user.username

        try:
            custom_token = auth.create_custom_token(
                user.firebase_uid,
                developer_claims=developer_claims,
                app=self.firebase_app,
            )
        except (ValueError, exceptions.FirebaseError) as e:
            logger.error(f"Failed to mint Firebase custom token for {user.firebase_uid}: {e}", exc_info=True)
            return BridgeError(reason=str(e) or type(e).__name__, access_token=access_token)

        if isinstance(custom_token, bytes):
            custom_token = custom_token.decode("utf-8")

        logger.info(f"Minted Firebase custom token for {user.firebase_uid}")
        return BridgeSuccess(custom_token=custom_token)
