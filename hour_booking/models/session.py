"""
Process-wide authentication state shared by the token provider and the
OAuth callback receiver.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """Payload returned by the Dept token endpoint."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: int
    token_type: Optional[str] = None


class CredentialSet(BaseModel):
    """Backend credentials; always replaced as a whole, never mutated."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: datetime = Field(..., description="Instant the access token expires.")

    @classmethod
    def from_token_response(
        cls, payload: TokenResponse, *, issued_at: datetime
    ) -> "CredentialSet":
        return cls(
            access_token=payload.access_token,
            refresh_token=payload.refresh_token,
            expires_at=issued_at + timedelta(seconds=payload.expires_in),
        )


class AuthSession:
    """Single credential set and latest Google identity token for this process.

    Owned by the composition root and handed by reference to the access token
    provider and the OAuth callback receiver. Both attributes are replaced by
    plain assignment, so readers see either the old or the new value.
    """

    def __init__(
        self,
        credentials: CredentialSet | None = None,
        google_id_token: str | None = None,
    ) -> None:
        self.credentials = credentials
        self.google_id_token = google_id_token

    def publish_identity_token(self, id_token: str) -> None:
        self.google_id_token = id_token

    def replace_credentials(self, credentials: CredentialSet) -> CredentialSet:
        self.credentials = credentials
        return credentials


__all__ = ["AuthSession", "CredentialSet", "TokenResponse"]
