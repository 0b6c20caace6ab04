"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .config import BridgeConfig
from .errors import DiscordBridgeError
from .oauth.discord_routes import router as discord_oauth_router
from .oauth.discord_routes import rpc_router as token_bridge_router
from .pages import router as pages_router
from .services import BridgeServices
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create client handles on startup unless they were injected, and release them on shutdown."""
    owned = app.state.services is None
    if owned:
        app.state.services = BridgeServices.from_config(app.state.config)
    try:
        yield
    finally:
        if owned:
            app.state.services.close()
            app.state.services = None
            logger.info("Released Discord and Firebase client handles")


async def handle_bridge_error(request: Request, exc: DiscordBridgeError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


def create_app(
    config: Optional[BridgeConfig] = None,
    services: Optional[BridgeServices] = None,
) -> FastAPI:
    """Build the web application.

    Args:
        config: Service configuration; read from the environment when omitted
        services: Pre-built client handles. When given, the caller owns them and
            they are not closed on shutdown.
    """
    config = config or BridgeConfig.from_env()
    setup_logging(config.log_level)

    app = FastAPI(title="Discord Firebase bridge", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.services = services

    app.add_exception_handler(DiscordBridgeError, handle_bridge_error)

    app.include_router(discord_oauth_router)
    app.include_router(token_bridge_router)
    app.include_router(pages_router)

    return app
