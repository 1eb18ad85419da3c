"""
Application configuration models and helpers.

Centralizes settings management so the MCP tool server and the OAuth callback
receiver share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing at the point of use."""


class _Settings(BaseSettings):
    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")


class DeptSettings(_Settings):
    """Connection details and booking defaults for the Dept time-tracking API."""

    api_base_url: AnyHttpUrl = Field(
        "https://deptapps-api.deptagency.com/public/api/v1",
        validation_alias="DEPT_API_BASE_URL",
    )
    token_url: AnyHttpUrl = Field(..., validation_alias="DEPT_TOKEN_URL")
    client_id: str = Field(..., validation_alias="DEPT_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="DEPT_CLIENT_SECRET")
    employee_id: Optional[int] = Field(None, validation_alias="DEPT_EMPLOYEE_ID")
    corporation_id: Optional[int] = Field(None, validation_alias="DEPT_CORPORATION_ID")
    default_activity_id: Optional[int] = Field(
        None, validation_alias="DEPT_DEFAULT_ACTIVITY_ID"
    )
    default_project_id: Optional[int] = Field(
        None, validation_alias="DEPT_DEFAULT_PROJECT_ID"
    )
    default_company_id: Optional[int] = Field(
        None, validation_alias="DEPT_DEFAULT_COMPANY_ID"
    )
    default_budget_id: Optional[int] = Field(
        None,
        validation_alias="DEPT_DEFAULT_BUDGET_ID",
        description="Budget used when neither search tier finds a match.",
    )

    @field_validator(
        "employee_id",
        "corporation_id",
        "default_activity_id",
        "default_project_id",
        "default_company_id",
        "default_budget_id",
        mode="before",
    )
    @classmethod
    def _blank_as_none(cls, value: object) -> object:
        """Treat empty environment values as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value


class GoogleSettings(_Settings):
    """OAuth client used to obtain Google identity tokens."""

    client_id: str = Field(..., validation_alias="GOOGLE_AUTH_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="GOOGLE_AUTH_CLIENT_SECRET")


class OAuthSettings(_Settings):
    """Local callback receiver and token lifecycle configuration."""

    callback_host: str = Field("127.0.0.1", validation_alias="OAUTH_CALLBACK_HOST")
    callback_bind_host: str = Field(
        "0.0.0.0",
        validation_alias="OAUTH_CALLBACK_BIND_HOST",
        description="Interface the callback listener binds to.",
    )
    callback_port: int = Field(3005, validation_alias="OAUTH_CALLBACK_PORT")
    callback_path: str = Field("/oauth2callback", validation_alias="OAUTH_CALLBACK_PATH")
    refresh_margin_seconds: int = Field(
        60,
        validation_alias="TOKEN_REFRESH_MARGIN_SECONDS",
        description="Access tokens expiring within this window are refreshed.",
    )

    @field_validator("callback_path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.callback_host}:{self.callback_port}{self.callback_path}"


class SecuritySettings(_Settings):
    """Optional on-disk credential cache."""

    token_cache_path: Optional[Path] = Field(
        None,
        validation_alias="TOKEN_CACHE_PATH",
        description="When set, the credential set is cached here (encrypted).",
    )
    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for the credential cache. "
            "Defaults to the Dept client secret."
        ),
    )


class AppSettings(_Settings):
    """Root settings object for the hour booking server."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    dept: DeptSettings = Field(default_factory=DeptSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    model_config = SettingsConfigDict(
        populate_by_name=True,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "ConfigurationError",
    "DeptSettings",
    "GoogleSettings",
    "OAuthSettings",
    "SecuritySettings",
    "get_settings",
]
