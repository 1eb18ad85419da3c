"""Expose constructed client wrappers."""

from .dept_api import DeptApiClient, DeptApiError
from .dept_auth import DeptTokenClient, DeptTokenExchangeError
from .google_auth import GoogleOAuthClient, OAuthTokenExchangeError

__all__ = [
    "DeptApiClient",
    "DeptApiError",
    "DeptTokenClient",
    "DeptTokenExchangeError",
    "GoogleOAuthClient",
    "OAuthTokenExchangeError",
]
