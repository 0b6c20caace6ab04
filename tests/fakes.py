"""Fake HTTP transport and canned Discord / Identity Toolkit responses."""

from __future__ import annotations

from typing import Any, Optional, Union

from discord_bridge.oauth.session import SIGN_IN_WITH_CUSTOM_TOKEN_URL

DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"
DISCORD_USER_URL = "https://discord.com/api/users/@me"

DISCORD_USER = {
    "id": "80351110224678912",
    "username": "nelly",
    "global_name": "Nelly",
    "avatar": "8342729096ea3675442027381ff50dfe",
    "discriminator": "0",
}


class FakeResponse:
    """Just enough of ``requests.Response`` for the code under test."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeHttp:
    """Stand-in for ``requests.Session`` answering from a URL routing table."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Union[FakeResponse, Exception]] = {}
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def add(self, method: str, url: str, response: Union[FakeResponse, Exception]) -> None:
        self.routes[(method.upper(), url)] = response

    def _dispatch(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.routes.get((method, url))
        if response is None:
            raise AssertionError(f"Unexpected {method} {url}")
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._dispatch("POST", url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._dispatch("GET", url, **kwargs)

    def calls_to(self, url: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["url"] == url]

    def close(self) -> None:
        self.closed = True


def discord_token_response(access_token: str = "ptk_xyz") -> FakeResponse:
    return FakeResponse(
        200,
        {
            "access_token": access_token,
            "token_type": "Bearer",
            "expires_in": 604800,
            "refresh_token": "rtk_abc",
            "scope": "identify",
        },
    )


def sign_in_response(id_token: str = "idt_789") -> FakeResponse:
    return FakeResponse(
        200,
        {
            "kind": "identitytoolkit#VerifyCustomTokenResponse",
            "idToken": id_token,
            "refreshToken": "frt_000",
            "expiresIn": "3600",
            "isNewUser": True,
        },
    )


__all__ = [
    "DISCORD_TOKEN_URL",
    "DISCORD_USER",
    "DISCORD_USER_URL",
    "FakeHttp",
    "FakeResponse",
    "SIGN_IN_WITH_CUSTOM_TOKEN_URL",
    "discord_token_response",
    "sign_in_response",
]
