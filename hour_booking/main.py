"""
Process entrypoint: the MCP stdio server plus the OAuth callback listener.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import anyio
import uvicorn
from fastapi import FastAPI
from mcp.server.fastmcp import FastMCP

from hour_booking import __version__
from hour_booking.api.routes import router as api_router
from hour_booking.core.config import get_settings
from hour_booking.core.logging import configure_logging, token_preview
from hour_booking.dependencies import get_booking_tools
from hour_booking.tools import register_booking_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "dept-hour-booking"

IdentityTokenCallback = Callable[[str, str, str], None]


def _log_identity_token(code: str, redirect_uri: str, id_token: str) -> None:
    logger.info(
        "Authorization code %s exchanged via %s; id token %s",
        token_preview(code, 8),
        redirect_uri,
        token_preview(id_token),
    )


def create_app(on_identity_token: Optional[IdentityTokenCallback] = None) -> FastAPI:
    """Factory for the OAuth callback application."""
    app = FastAPI(
        title="Dept Hour Booking OAuth Callback",
        version=__version__,
        description="Receives the Google authorization code redirect.",
    )
    app.state.on_identity_token = on_identity_token
    app.include_router(api_router)
    return app


def create_mcp_server() -> FastMCP:
    """Build the FastMCP server with every booking tool registered."""
    mcp = FastMCP(SERVER_NAME)
    register_booking_tools(mcp, get_booking_tools())
    return mcp


async def serve() -> None:
    """Run the stdio MCP server and the callback listener until stdin closes."""
    settings = get_settings()
    app = create_app(on_identity_token=_log_identity_token)
    mcp = create_mcp_server()
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.oauth.callback_bind_host,
            port=settings.oauth.callback_port,
            log_config=None,
        )
    )
    logger.info(
        "OAuth callback listening on %s:%s%s",
        settings.oauth.callback_bind_host,
        settings.oauth.callback_port,
        settings.oauth.callback_path,
    )

    async with anyio.create_task_group() as task_group:
        task_group.start_soon(server.serve)
        try:
            await mcp.run_stdio_async()
        finally:
            server.should_exit = True
    logger.info("%s stopped", SERVER_NAME)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting %s (%s)", SERVER_NAME, settings.environment)
    anyio.run(serve)


if __name__ == "__main__":
    main()


__all__ = ["create_app", "create_mcp_server", "main", "serve"]
