"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import (
    DEMO_ASSET_BASE_URL,
    FACEBOOK_API_TIMEOUT_SECONDS,
    FACEBOOK_GRAPH_API_VERSION,
    REPLY_SERVICE_BASE_URL,
    REPLY_SERVICE_MAX_RETRIES,
    REPLY_SERVICE_TIMEOUT_SECONDS,
    RETRY_BACKOFF_SECONDS,
    SEND_MAX_RETRIES,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Messenger Configuration (all required: the app refuses to start without them)
    messenger_app_secret: str = Field(
        ..., min_length=1, description="App secret used to verify x-hub-signature"
    )
    messenger_validation_token: str = Field(
        ..., min_length=1, description="Webhook verification token (hub.verify_token)"
    )
    messenger_page_access_token: str = Field(
        ..., min_length=1, description="Page access token for the Send API"
    )
    graph_api_version: str = Field(
        default=FACEBOOK_GRAPH_API_VERSION, description="Graph API version"
    )

    # Reply Service (Parse Server cloud code)
    reply_service_base_url: str = Field(
        default=REPLY_SERVICE_BASE_URL,
        description="Base URL of the cloud functions endpoint",
    )
    reply_service_app_id: str = Field(
        default="myAppId", description="X-Parse-Application-Id header value"
    )
    reply_service_rest_key: str = Field(
        default="myRestKey", description="X-Parse-REST-API-Key header value"
    )

    # Demo payloads
    demo_asset_base_url: str = Field(
        default=DEMO_ASSET_BASE_URL,
        description="Base URL for the demo image/audio/video/file attachments",
    )

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    # ==========================================================================
    # Timeout and Retry Configuration
    # ==========================================================================
    # Defaults are sourced from src/constants.py.

    facebook_api_timeout_seconds: float = Field(
        default=FACEBOOK_API_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for Facebook Graph API calls (seconds)",
    )
    reply_service_timeout_seconds: float = Field(
        default=REPLY_SERVICE_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for reply-service calls (seconds)",
    )
    send_max_retries: int = Field(
        default=SEND_MAX_RETRIES,
        ge=0,
        description="Retries for Send API calls on transport errors / 5xx",
    )
    reply_service_max_retries: int = Field(
        default=REPLY_SERVICE_MAX_RETRIES,
        ge=0,
        description="Retries for reply-service calls on transport errors / 5xx",
    )
    retry_backoff_seconds: float = Field(
        default=RETRY_BACKOFF_SECONDS,
        ge=0,
        description="Base delay for exponential backoff between retries (seconds)",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
