"""Authentication state models."""

from .session import AuthSession, CredentialSet, TokenResponse

__all__ = ["AuthSession", "CredentialSet", "TokenResponse"]
