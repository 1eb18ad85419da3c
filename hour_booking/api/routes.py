"""
FastAPI routes for the local OAuth callback listener.
"""

from __future__ import annotations

import html
import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from hour_booking.core.config import get_settings
from hour_booking.dependencies import get_auth_session, get_google_oauth_client

router = APIRouter()
logger = logging.getLogger(__name__)

_SUCCESS_PAGE = (
    "<html><body>"
    "<h1>Authentication successful</h1>"
    "<p>You can close this window and return to your assistant.</p>"
    "</body></html>"
)


def _error_page(message: str) -> str:
    return f"<html><body><h1>Authentication failed</h1><p>{html.escape(message)}</p></body></html>"


def _callback_redirect_uri(request: Request, fallback: str) -> str:
    host = request.headers.get("host")
    if not host:
        return fallback
    return f"http://{host}{request.url.path}"


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get(get_settings().oauth.callback_path, response_class=HTMLResponse)
async def handle_google_oauth_callback(
    request: Request,
    session: Annotated[Any, Depends(get_auth_session)],
    oauth_client: Annotated[Any, Depends(get_google_oauth_client)],
    code: str | None = None,
) -> HTMLResponse:
    """Exchange the authorization code and publish the Google identity token."""
    if not code:
        return HTMLResponse("Missing code parameter.", status_code=HTTPStatus.BAD_REQUEST)

    redirect_uri = _callback_redirect_uri(request, oauth_client.redirect_uri)
    try:
        id_token = await oauth_client.exchange_code_for_id_token(code, redirect_uri)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Google authorization code exchange failed")
        return HTMLResponse(_error_page(str(exc)), status_code=HTTPStatus.INTERNAL_SERVER_ERROR)

    session.publish_identity_token(id_token)
    logger.info("Published new Google identity token")

    on_identity_token = getattr(request.app.state, "on_identity_token", None)
    if on_identity_token is not None:
        on_identity_token(code, redirect_uri, id_token)

    return HTMLResponse(_SUCCESS_PAGE, status_code=HTTPStatus.OK)


__all__ = ["router"]
