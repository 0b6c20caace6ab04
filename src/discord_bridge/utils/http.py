"""Outbound HTTP session shared by the Discord and Identity Toolkit clients."""

from __future__ import annotations

import requests
from requests.cookies import RequestsCookieJar

from .. import __version__


class StatelessCookieJar(RequestsCookieJar):
    """Cookie jar that never stores anything.

    One HTTP session serves every sign-in flow, so cookies set on one user's
    Discord or Google response must not ride along on another user's request.
    """

    def set_cookie(self, cookie, *args, **kwargs):
        return None


def new_http_session() -> requests.Session:
    http = requests.Session()
    http.cookies = StatelessCookieJar()
    http.headers["User-Agent"] = f"discord-bridge/{__version__}"
    return http
