"""Firebase Admin app lifecycle and session verification for page routes."""

from __future__ import annotations

from typing import Any, Optional

import firebase_admin
from fastapi import Request
from firebase_admin import credentials

from ..config import BridgeConfig
from ..utils.logging import get_logger

logger = get_logger(__name__)

FIREBASE_APP_NAME = "discord-bridge"


def init_firebase_app(config: BridgeConfig, name: str = FIREBASE_APP_NAME) -> firebase_admin.App:
    """Initialize a named Firebase Admin app for this service.

    Uses the service account file from the configuration when one is set,
    otherwise application default credentials. Minting custom tokens needs
    a credential able to sign, so in production this should be a service
    account key or a runtime identity with ``iam.serviceAccounts.signBlob``.

    Raises:
        RuntimeError: the credential file is missing or unreadable
    """
    try:
        if config.service_account_path:
            credential = credentials.Certificate(config.service_account_path)
            source = config.service_account_path
        else:
            credential = credentials.ApplicationDefault()
            source = "application default credentials"
        app = firebase_admin.initialize_app(credential, name=name)
    except (IOError, ValueError) as e:
        error_msg = f"Failed to initialize Firebase app '{name}': {e}"
        if config.service_account_path:
            error_msg += (
                "\nPlease ensure FIREBASE_SERVICE_ACCOUNT points to a valid "
                "service account key JSON file."
            )
        logger.error(error_msg, exc_info=True)
        raise RuntimeError(error_msg) from e

    logger.info(f"Initialized Firebase app '{name}' using {source}")
    return app


def close_firebase_app(app: firebase_admin.App) -> None:
    firebase_admin.delete_app(app)
    logger.info(f"Deleted Firebase app '{app.name}'")


def current_session(request: Request) -> Optional[dict[str, Any]]:
    """FastAPI dependency returning the signed-in user's claims, if any.

    Reads the session cookie configured for the app and verifies it with the
    app's session establisher.

    Returns:
        Decoded session claims, or None for anonymous visitors
    """
    services = request.app.state.services
    cookie_name = request.app.state.config.session_cookie_name
    claims = services.sessions.verify_session_cookie(request.cookies.get(cookie_name))

    if claims is not None:
        logger.debug(f"Verified session for user {claims.get('uid')}")
    return claims
