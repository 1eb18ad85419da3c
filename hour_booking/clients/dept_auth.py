"""
Client for the Dept token endpoint.

Performs the two exchanges the backend supports: a Google identity token for a
first credential set, and a refresh token for a renewed one.
"""

from __future__ import annotations

import logging

import httpx

from hour_booking.core.config import ConfigurationError, DeptSettings
from hour_booking.core.logging import token_preview
from hour_booking.models.session import TokenResponse

logger = logging.getLogger(__name__)


class DeptTokenExchangeError(Exception):
    """Raised when the Dept token endpoint rejects an exchange."""

    # Lower-cased fragments of error bodies caused by a stale or bad identity token.
    IDENTITY_FAILURE_MARKERS = (
        "google authentication failed",
        "invalid token",
        "google",
        "jwt",
    )

    def __init__(self, operation: str, status_code: int, reason: str, body: str) -> None:
        super().__init__(f"{operation} failed: {status_code} {reason} - {body}")
        self.status_code = status_code
        self.body = body

    @property
    def rejects_identity_token(self) -> bool:
        text = self.body.lower()
        return any(marker in text for marker in self.IDENTITY_FAILURE_MARKERS)


class DeptTokenClient:
    """Exchange credentials at the Dept OAuth token endpoint."""

    def __init__(
        self,
        settings: DeptSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def exchange_google_id_token(self, google_id_token: str) -> TokenResponse:
        """Trade a Google identity token for backend access and refresh tokens."""
        logger.info("Exchanging Google ID token %s", token_preview(google_id_token))
        return await self._request_token(
            "Initial token exchange",
            {"grant_type": "google", "google_id_token": google_id_token},
        )

    async def refresh(self, refresh_token: str) -> TokenResponse:
        """Trade a refresh token for a new credential set."""
        return await self._request_token(
            "Token refresh",
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
        )

    def _client_credentials(self) -> dict[str, str]:
        missing = [
            name
            for name, value in (
                ("DEPT_CLIENT_ID", self._settings.client_id),
                ("DEPT_CLIENT_SECRET", self._settings.client_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required credentials: {', '.join(missing)}"
            )
        return {
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
        }

    async def _request_token(self, operation: str, grant: dict[str, str]) -> TokenResponse:
        payload = {**self._client_credentials(), **grant}
        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            response = await client.post(str(self._settings.token_url), data=payload)

        if not response.is_success:
            logger.error(
                "%s failed: %s %s", operation, response.status_code, response.text
            )
            raise DeptTokenExchangeError(
                operation, response.status_code, response.reason_phrase, response.text
            )
        return TokenResponse.model_validate(response.json())


__all__ = ["DeptTokenClient", "DeptTokenExchangeError"]
