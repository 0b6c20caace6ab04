"""Browser-facing pages: public entry, session establishment, protected area."""

from __future__ import annotations

import html
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from .oauth.firebase_auth import current_session
from .oauth.session import PROTECTED_PATH, PUBLIC_PATH, SessionEstablished
from .services import BridgeServices, get_services
from .utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Pages"])

_PAGE = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>{title}</title></head>
<body>
<main>
{body}
</main>
</body>
</html>
"""


def _render(title: str, body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(_PAGE.format(title=html.escape(title), body=body), status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def index(auth_error: Optional[str] = Query(default=None)):
    """Public entry point with the Discord login link."""
    body = '<h1>Welcome</h1>\n<p><a href="/auth/discord/authorize">Login with Discord</a></p>'
    if auth_error:
        body += f'\n<p class="error">Sign-in failed: {html.escape(auth_error)}</p>'
    return _render("Welcome", body)


@router.get("/login")
def login(
    request: Request,
    custom_token: Optional[str] = Query(default=None),
    services: BridgeServices = Depends(get_services),
):
    """Redeem a bridged custom token and route the user.

    Success sets the session cookie and redirects to ``/admin``; any failure
    redirects to ``/`` without further explanation.
    """
    result = services.sessions.establish(custom_token)
    response = RedirectResponse(url=result.redirect_path, status_code=303)

    if isinstance(result, SessionEstablished):
        config = request.app.state.config
        response.set_cookie(
            key=config.session_cookie_name,
            value=result.session_cookie,
            max_age=config.session_cookie_ttl,
            httponly=True,
            secure=config.session_cookie_secure,
            samesite="lax",
        )
    else:
        logger.info(f"Login did not establish a session: {result.reason}")

    return response


@router.get(PROTECTED_PATH)
def admin(claims: Optional[dict[str, Any]] = Depends(current_session)):
    """Protected area; anonymous visitors are sent back to the entry page."""
    if claims is None:
        return RedirectResponse(url=PUBLIC_PATH, status_code=303)

    uid = html.escape(str(claims["uid"]))
    username = claims.get("discord_username")
    greeting = f"Signed in as {html.escape(username)}" if username else "Signed in"
    body = (
        f"<h1>Admin</h1>\n<p>{greeting} (<code>{uid}</code>).</p>\n"
        '<p><a href="/logout">Logout</a></p>'
    )
    return _render("Admin", body)


@router.get("/logout")
def logout(request: Request):
    response = RedirectResponse(url=PUBLIC_PATH, status_code=303)
    response.delete_cookie(request.app.state.config.session_cookie_name)
    return response


@router.get("/health")
def health():
    return {"status": "ok"}
