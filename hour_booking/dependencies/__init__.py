"""Expose dependency helpers for the MCP server and FastAPI routers."""

from .clients import (
    get_access_token_provider,
    get_auth_session,
    get_booking_service,
    get_booking_tools,
    get_budget_resolver,
    get_credential_cache,
    get_dept_api_client,
    get_dept_token_client,
    get_google_oauth_client,
)

__all__ = [
    "get_access_token_provider",
    "get_auth_session",
    "get_booking_service",
    "get_booking_tools",
    "get_budget_resolver",
    "get_credential_cache",
    "get_dept_api_client",
    "get_dept_token_client",
    "get_google_oauth_client",
]
