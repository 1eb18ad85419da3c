"""
Factory functions to provide the shared session, clients and services.

Each factory is cached so the MCP tools and the OAuth callback route see the
same instances; tests override them through ``app.dependency_overrides`` or by
clearing the caches.
"""

from datetime import timedelta
from functools import lru_cache

from hour_booking.clients import DeptApiClient, DeptTokenClient, GoogleOAuthClient
from hour_booking.core.config import get_settings
from hour_booking.models import AuthSession
from hour_booking.services import (
    AccessTokenProvider,
    BookingService,
    BudgetResolver,
    CredentialCache,
    CredentialCipher,
)
from hour_booking.tools import BookingTools


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_credential_cache() -> CredentialCache | None:
    """Provide the encrypted credential cache when ``TOKEN_CACHE_PATH`` is set."""
    settings = _settings()
    path = settings.security.token_cache_path
    if path is None:
        return None
    secret = settings.security.token_encryption_secret or settings.dept.client_secret
    return CredentialCache(path, CredentialCipher(secret=secret))


@lru_cache()
def get_auth_session() -> AuthSession:
    """Provide the process-wide authentication session."""
    cache = get_credential_cache()
    return AuthSession(credentials=cache.load() if cache is not None else None)


@lru_cache()
def get_google_oauth_client() -> GoogleOAuthClient:
    """Create a singleton Google OAuth client."""
    settings = _settings()
    return GoogleOAuthClient(settings.google, settings.oauth)


@lru_cache()
def get_dept_token_client() -> DeptTokenClient:
    """Provide the Dept token endpoint client."""
    return DeptTokenClient(_settings().dept)


@lru_cache()
def get_access_token_provider() -> AccessTokenProvider:
    """Provide the access token provider bound to the shared session."""
    settings = _settings()
    return AccessTokenProvider(
        get_auth_session(),
        get_dept_token_client(),
        get_google_oauth_client(),
        refresh_window=timedelta(seconds=settings.oauth.refresh_margin_seconds),
        cache=get_credential_cache(),
    )


@lru_cache()
def get_dept_api_client() -> DeptApiClient:
    """Provide the authenticated Dept API gateway."""
    return DeptApiClient(str(_settings().dept.api_base_url), get_access_token_provider())


@lru_cache()
def get_budget_resolver() -> BudgetResolver:
    """Provide the description-to-budget resolver."""
    settings = _settings()
    return BudgetResolver(
        get_dept_api_client(),
        default_budget_id=settings.dept.default_budget_id,
        default_corporation_id=settings.dept.corporation_id,
    )


def get_booking_service() -> BookingService:
    """Build a booking service from the shared clients."""
    return BookingService(get_dept_api_client(), get_budget_resolver(), _settings().dept)


def get_booking_tools() -> BookingTools:
    """Build the MCP tool adapter around the booking service."""
    return BookingTools(get_booking_service())


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
