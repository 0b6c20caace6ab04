"""OAuth2 routes for signing in with Discord.

Flow:
- ``GET /auth/discord/authorize`` sends the browser to Discord's consent screen
- ``GET /auth/discord/callback`` exchanges the returned code for a Discord
  access token, bridges it to a Firebase custom token and hands that token
  to ``/login``, which establishes the session
- ``POST /createToken`` exposes the token bridge as a callable RPC
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse

from ..errors import MissingParameterError, TokenBridgeError
from ..services import BridgeServices, get_services
from ..utils.logging import get_logger, mask_token
from .session import PUBLIC_PATH
from .token_bridge import BridgeError

logger = get_logger(__name__)

LOGIN_PATH = "/login"

router = APIRouter(prefix="/auth/discord", tags=["Discord OAuth"])
rpc_router = APIRouter(tags=["Token bridge"])


@router.get("/authorize")
def authorize(
    response_format: Optional[str] = Query(
        default=None,
        alias="format",
        description="'json' to receive the URL instead of a redirect",
    ),
    services: BridgeServices = Depends(get_services),
):
    """Start the Discord sign-in flow.

    Response (default):
        307 redirect to https://discord.com/api/oauth2/authorize?...

    Response (``?format=json``):
        {
            "authorization_url": "https://discord.com/api/oauth2/authorize?..."
        }
    """
    authorization_url = services.discord.create_authorization_url()
    logger.info("Generated Discord authorization URL")

    if response_format == "json":
        return JSONResponse({"authorization_url": authorization_url})
    return RedirectResponse(url=authorization_url, status_code=307)


@router.get("/callback")
def oauth_callback(
    code: Optional[str] = Query(default=None, description="Authorization code from Discord"),
    error: Optional[str] = Query(default=None, description="Error from Discord"),
    error_description: Optional[str] = Query(default=None),
    services: BridgeServices = Depends(get_services),
):
    """Handle the OAuth2 callback from Discord.

    Steps run strictly in order and nothing is retried:
    1. exchange ``code`` for a Discord access token
    2. bridge the access token into a Firebase custom token
    3. redirect to ``/login?custom_token=<token>``

    Errors:
    - Discord reported an error (user denied consent): redirect to ``/``
    - ``code`` missing: 400 ``missing_parameter``
    - code exchange failed: 502 ``code_exchange_failed``
    - token bridge returned an error: 502 ``token_bridge_failed``
    """
    if error:
        logger.warning(f"Discord authorization error: {error} ({error_description})")
        return RedirectResponse(
            url=f"{PUBLIC_PATH}?{urlencode({'auth_error': error})}",
            status_code=307,
        )

    if not code or not code.strip():
        logger.warning("OAuth callback called without an authorization code")
        raise MissingParameterError("code", "Authorization code missing from callback")

    access_token = services.discord.exchange_code_for_token(code)

    result = services.bridge.create_token(access_token)

    if isinstance(result, BridgeError):
        logger.error(f"Token bridge failed for access token {mask_token(access_token)}: {result.reason}")
        raise TokenBridgeError(result.reason)

    logger.info("Discord sign-in bridged, redirecting to session page")
    return RedirectResponse(
        url=f"{LOGIN_PATH}?{urlencode({'custom_token': result.custom_token})}",
        status_code=307,
    )


@rpc_router.post("/createToken")
def create_token(
    payload: dict[str, Any] = Body(...),
    services: BridgeServices = Depends(get_services),
):
    """Callable RPC wrapping the token bridge.

    Request:
        {"access_token": "..."}  or  {"data": {"access_token": "..."}}

    Response:
        {"status": "success", "customToken": "..."}
        {"status": "error", "error": "...", "access_token": "..."}

    Requests using the ``data`` envelope get the result wrapped in
    ``{"result": ...}``. Bridge failures are answered with 200 and an error
    status; only a missing ``access_token`` is a 400.
    """
    envelope = isinstance(payload.get("data"), dict)
    arguments = payload["data"] if envelope else payload

    access_token = arguments.get("access_token")
    if not isinstance(access_token, str) or not access_token.strip():
        raise MissingParameterError("access_token")

    result = services.bridge.create_token(access_token)
    body = result.to_payload()

    return JSONResponse({"result": body} if envelope else body)
