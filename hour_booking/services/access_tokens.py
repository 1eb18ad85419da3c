"""
Helpers for obtaining a valid Dept access token, refreshing or re-running the
Google identity exchange when necessary.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from hour_booking.clients.dept_auth import DeptTokenClient, DeptTokenExchangeError
from hour_booking.clients.google_auth import GoogleOAuthClient
from hour_booking.models.session import AuthSession, CredentialSet, TokenResponse
from hour_booking.services.credential_cache import CredentialCache

logger = logging.getLogger(__name__)


class AuthenticationRequired(Exception):
    """No usable credential chain; the user must sign in at ``authorization_url``.

    Tool handlers return this as ordinary content instead of failing the call.
    """

    def __init__(self, authorization_url: str, message: str) -> None:
        super().__init__(message)
        self.authorization_url = authorization_url
        self.message = message


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccessTokenProvider:
    """Hands out access tokens from the session, exchanging credentials on demand."""

    _REFRESH_WINDOW = timedelta(seconds=60)

    def __init__(
        self,
        session: AuthSession,
        token_client: DeptTokenClient,
        oauth_client: GoogleOAuthClient,
        *,
        refresh_window: timedelta | None = None,
        cache: CredentialCache | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session = session
        self._tokens = token_client
        self._oauth = oauth_client
        self._refresh_window = refresh_window if refresh_window is not None else self._REFRESH_WINDOW
        self._cache = cache
        self._clock = clock

    async def get_valid_access_token(self) -> str:
        """Return the cached token unless it expires within the refresh window."""
        credentials = self._session.credentials
        if credentials is not None and credentials.expires_at > self._clock() + self._refresh_window:
            return credentials.access_token
        return await self.refresh_access_token()

    async def refresh_access_token(self) -> str:
        credentials = self._session.credentials
        if credentials is None or not credentials.refresh_token:
            return (await self.initial_exchange()).access_token

        issued_at = self._clock()
        try:
            token = await self._tokens.refresh(credentials.refresh_token)
        except DeptTokenExchangeError:
            # A restart must not reload the rejected refresh token.
            if self._cache is not None:
                try:
                    self._cache.clear()
                except OSError as exc:
                    logger.warning("Could not clear credential cache: %s", exc)
            raise
        logger.info("Refreshed Dept access token")
        return self._store(token, issued_at).access_token

    async def initial_exchange(self) -> CredentialSet:
        """Exchange the published Google identity token for a first credential set."""
        google_id_token = self._session.google_id_token
        if not google_id_token:
            url = self._oauth.build_authorization_url()
            raise AuthenticationRequired(
                url,
                "Google ID token is missing.\n\n"
                "To authorize, please visit the following URL in your browser and sign in:\n\n"
                f"{url}\n\n"
                "After authorization, retry the request.",
            )

        issued_at = self._clock()
        try:
            token = await self._tokens.exchange_google_id_token(google_id_token)
        except DeptTokenExchangeError as exc:
            if exc.rejects_identity_token:
                logger.warning("Google ID token rejected; prompting for re-authentication")
                url = self._oauth.build_authorization_url()
                raise AuthenticationRequired(
                    url,
                    f"{exc.body}\n\nTo re-authorize, please visit:\n\n{url}",
                ) from exc
            raise
        return self._store(token, issued_at)

    def _store(self, token: TokenResponse, issued_at: datetime) -> CredentialSet:
        credentials = self._session.replace_credentials(
            CredentialSet.from_token_response(token, issued_at=issued_at)
        )
        if self._cache is not None:
            try:
                self._cache.save(credentials)
            except OSError as exc:
                logger.warning("Could not write credential cache: %s", exc)
        return credentials


__all__ = ["AccessTokenProvider", "AuthenticationRequired"]
