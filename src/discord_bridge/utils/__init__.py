from .http import StatelessCookieJar, new_http_session
from .logging import get_logger, mask_token, setup_logging

__all__ = [
    "StatelessCookieJar",
    "new_http_session",
    "get_logger",
    "mask_token",
    "setup_logging",
]
