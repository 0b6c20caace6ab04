"""Logging helpers shared by every discord_bridge module."""

from __future__ import annotations

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name``."""
    return logging.getLogger(name)


def setup_logging(level: Union[str, int] = "INFO") -> None:
    """Configure the root handler once; later calls only adjust the level."""
    global _configured

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not _configured:
        logging.basicConfig(level=level, format=LOG_FORMAT)
        _configured = True
    root.setLevel(level)


def mask_token(token: Optional[str], visible: int = 4) -> str:
    """Render a credential for log lines without leaking it.

    >>> mask_token("ptk_abcdefgh")
    'ptk_...(12 chars)'
    """
    if not token:
        return "<empty>"
    return f"{token[:visible]}...({len(token)} chars)"
