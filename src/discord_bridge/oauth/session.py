"""Redeem Firebase custom tokens into browser sessions."""

from __future__ import annotations

from typing import Any, Literal, Optional, TypeAlias, Union

import firebase_admin
import requests
from firebase_admin import auth, exceptions
from pydantic import BaseModel

from ..config import DEFAULT_SESSION_COOKIE_TTL, BridgeConfig
from ..utils.http import new_http_session
from ..utils.logging import get_logger, mask_token

logger = get_logger(__name__)

SIGN_IN_WITH_CUSTOM_TOKEN_URL = (
    "https://identitytoolkit.googleapis.com/v1/accounts:signInWithCustomToken"
)

PROTECTED_PATH = "/admin"
PUBLIC_PATH = "/"


class SessionEstablished(BaseModel):
    status: Literal["authenticated"] = "authenticated"
    id_token: str
    refresh_token: Optional[str] = None
    expires_in: int = 3600
    is_new_user: bool = False
    session_cookie: str

    @property
    def redirect_path(self) -> str:
        return PROTECTED_PATH


class SessionFailed(BaseModel):
    status: Literal["unauthenticated"] = "unauthenticated"
    reason: str

    @property
    def redirect_path(self) -> str:
        return PUBLIC_PATH


SessionResult: TypeAlias = Union[SessionEstablished, SessionFailed]


class SessionEstablisher:
    """Turns a bridged custom token into a Firebase session cookie.

    Redemption goes through the Identity Toolkit ``signInWithCustomToken``
    endpoint, the same call the Firebase client SDKs make; the resulting ID
    token is then exchanged for a long-lived session cookie with the Admin
    SDK. Failures never raise: they come back as ``SessionFailed`` and the
    caller routes the user to the public page.
    """

    def __init__(
        self,
        firebase_app: firebase_admin.App,
        api_key: str,
        http: Optional[requests.Session] = None,
        cookie_ttl: int = DEFAULT_SESSION_COOKIE_TTL,
        timeout: float = 10.0,
    ):
        self.firebase_app = firebase_app
        self.api_key = api_key
        self.http = http if http is not None else new_http_session()
        self.cookie_ttl = cookie_ttl
        self.timeout = timeout

    @classmethod
    def from_config(
        cls,
        config: BridgeConfig,
        firebase_app: firebase_admin.App,
        http: Optional[requests.Session] = None,
    ) -> "SessionEstablisher":
        return cls(
            firebase_app=firebase_app,
            api_key=config.firebase_api_key,
            http=http,
            cookie_ttl=config.session_cookie_ttl,
            timeout=config.http_timeout,
        )

    def establish(self, custom_token: Optional[str]) -> SessionResult:
        """Redeem a custom token and mint a session cookie for it."""
        if not custom_token or not custom_token.strip():
            logger.warning("Session requested without a custom token")
            return SessionFailed(reason="missing custom_token")

        try:
            response = self.http.post(
                SIGN_IN_WITH_CUSTOM_TOKEN_URL,
                params={"key": self.api_key},
                json={"token": custom_token, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Identity Toolkit unreachable: {e}", exc_info=True)
            return SessionFailed(reason="identity service unreachable")

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            payload = {}

        if not response.ok:
            error = payload.get("error")
            message = error.get("message") if isinstance(error, dict) else error
            message = message or f"HTTP {response.status_code}"
            logger.warning(f"Custom token {mask_token(custom_token)} rejected: {message}")
            return SessionFailed(reason=message)

        id_token = payload.get("idToken")
        if not id_token:
            logger.error("signInWithCustomToken response missing idToken")
            return SessionFailed(reason="identity service returned no ID token")

        try:
            expires_in = int(payload.get("expiresIn") or 3600)
        except (TypeError, ValueError):
            logger.error(f"signInWithCustomToken returned unusable expiresIn: {payload.get('expiresIn')!r}")
            return SessionFailed(reason="identity service returned an invalid expiresIn")

        session_cookie = self.create_session_cookie(id_token)
        if session_cookie is None:
            return SessionFailed(reason="could not create session cookie")

        logger.info("Established Firebase session from custom token")
        return SessionEstablished(
            id_token=id_token,
            refresh_token=payload.get("refreshToken"),
            expires_in=expires_in,
            is_new_user=bool(payload.get("isNewUser", False)),
            session_cookie=session_cookie,
        )

    def create_session_cookie(self, id_token: str) -> Optional[str]:
        """Exchange an ID token for a session cookie, or None on failure."""
        try:
            cookie = auth.create_session_cookie(
                id_token,
                expires_in=self.cookie_ttl,
                app=self.firebase_app,
            )
        except (ValueError, exceptions.FirebaseError) as e:
            logger.error(f"Failed to create Firebase session cookie: {e}", exc_info=True)
            return None

        if isinstance(cookie, bytes):
            cookie = cookie.decode("utf-8")
        return cookie

    def verify_session_cookie(self, session_cookie: Optional[str]) -> Optional[dict[str, Any]]:
        """Decode a session cookie.

        Returns:
            The decoded claims, or None when the cookie is missing, invalid or expired
        """
        if not session_cookie:
            return None

        try:
            claims = auth.verify_session_cookie(session_cookie, app=self.firebase_app)

        except auth.ExpiredSessionCookieError:
            logger.info("Expired Firebase session cookie")
            return None

        except auth.InvalidSessionCookieError:
            logger.warning("Invalid Firebase session cookie")
            return None

        except auth.CertificateFetchError:
            logger.error("Failed to fetch Firebase public keys")
            return None

        except ValueError as e:
            logger.warning(f"Malformed Firebase session cookie: {e}")
            return None

        if not claims.get("uid"):
            logger.error("Session cookie verified but missing 'uid' claim")
            return None

        return claims

    def close(self) -> None:
        self.http.close()
