"""Run the service with uvicorn: ``python -m discord_bridge``."""

from __future__ import annotations

import sys

import uvicorn

from .app import create_app
from .config import BridgeConfig
from .errors import ConfigurationError
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> int:
    setup_logging()
    try:
        config = BridgeConfig.from_env()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e.message}")
        return 2

    app = create_app(config)
    logger.info(f"Starting discord-bridge on {config.host}:{config.port}")
    # Access log lines would carry callback codes and custom tokens in full.
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
