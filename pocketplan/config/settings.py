"""
Configuration Management for PocketPlan

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here: the backend location, where the
auth token is persisted between runs, and the view-layer defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Finance backend connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETPLAN_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:8000/api",
        description="Root URL of the finance REST API"
    )
    # No timeout by default: requests wait for the backend
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Optional request timeout in seconds"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended with a leading slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"API base URL must be http(s): {v}")
        return v.rstrip("/")


class AuthSettings(BaseSettings):
    """Session token persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETPLAN_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    token_dir: str = Field(
        default=str(Path.home() / ".pocketplan"),
        description="Directory holding the persisted session token"
    )
    token_key: str = Field(
        default="auth_token",
        min_length=1,
        description="File name of the persisted session token"
    )

    @property
    def token_path(self) -> Path:
        """Full path of the token file."""
        return Path(self.token_dir) / self.token_key


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local structured logs"
    )

    # Budget month picker
    year_window: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Years shown before and after the current year"
    )
    unknown_category_label: str = Field(
        default="Unknown Category",
        description="Label shown for references to missing categories"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus {setting_name}_error
    entries describing anything that failed.
    Useful for startup checks.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    for name in ("api", "auth", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValidationError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
