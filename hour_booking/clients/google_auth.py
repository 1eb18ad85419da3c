"""
Google OAuth utilities.

These helpers build the consent URL shown to the user and exchange the
authorization code delivered to the local callback for a Google identity token.
"""

from __future__ import annotations

from urllib.parse import urlencode

import httpx

from fastapi import status

from hour_booking.core.config import GoogleSettings, OAuthSettings


class OAuthTokenExchangeError(Exception):
    """Raised when the Google token endpoint returns an error."""


class GoogleOAuthClient:
    """Build Google authorization URLs and exchange authorization codes."""

    AUTH_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    SCOPES = ("openid", "email", "profile")

    def __init__(
        self,
        google_settings: GoogleSettings,
        oauth_settings: OAuthSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._google = google_settings
        self._oauth = oauth_settings
        self._transport = transport

    @property
    def redirect_uri(self) -> str:
        return self._oauth.redirect_uri

    def build_authorization_url(self, redirect_uri: str | None = None) -> str:
        """Construct the Google OAuth consent URL."""
        params = {
            "client_id": self._google.client_id,
            "redirect_uri": redirect_uri or self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}"

    async def exchange_code_for_id_token(self, code: str, redirect_uri: str) -> str:
        """Exchange an authorization code for a Google ID token."""
        payload = {
            "code": code,
            "client_id": self._google.client_id,
            "client_secret": self._google.client_secret,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }

        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            response = await client.post(self.TOKEN_URL, data=payload)

        if response.status_code != status.HTTP_200_OK:
            raise OAuthTokenExchangeError(
                f"Google token exchange failed: {response.status_code} "
                f"{response.reason_phrase} - {response.text}"
            )

        id_token = response.json().get("id_token")
        if not id_token:
            raise OAuthTokenExchangeError("No id_token returned from Google")
        return id_token


__all__ = ["GoogleOAuthClient", "OAuthTokenExchangeError"]
