"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str | None = Field(
        default=None,
        description="IANA timezone name or UTC offset used for stored timestamps",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:8081"],
        description="Origins allowed to call the API from a browser",
    )
    expo_push_url: str = Field(
        default="https://exp.host/--/api/v2/push/send",
        description="Expo push API endpoint",
    )
    expo_access_token: str | None = Field(
        default=None,
        description="Expo access token, required when enhanced push security is enabled",
    )
    expo_request_timeout: float = Field(
        default=10.0,
        description="Seconds to wait for the Expo push API",
        gt=0,
    )
    fcm_credentials_path: str | None = Field(
        default=None,
        description="Path to the Firebase service account JSON used for FCM",
    )
    fcm_project_id: str | None = Field(
        default=None,
        description="Firebase project id, overrides the one in the service account",
    )
    fcm_request_timeout: float = Field(
        default=10.0,
        description="Seconds to wait for each FCM HTTP request",
        gt=0,
    )
    reconciliation_max_attempts: int = Field(
        default=2,
        description="Attempts made to clear invalid push tokens before giving up",
        ge=1,
    )

    @model_validator(mode="after")
    def _validate_fcm_pair(self) -> "Settings":
        if self.fcm_project_id and not self.fcm_credentials_path:
            raise ValueError(
                "FCM_PROJECT_ID requires FCM_CREDENTIALS_PATH to enable FCM delivery"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
