"""
Centralized configuration management for the social publishing service.

This module provides a Pydantic Settings-based configuration system that:
- Validates environment variables
- Provides type coercion (strings to ints, bools, etc.)
- Groups related settings for better organization
- Exposes methods to check if features are configured
- Supports .env file loading

Usage:
    from sfs_social.config import get_settings

    settings = get_settings()
    if settings.publisher.publisher_enabled:
        ...

OAuth credentials and the encryption key are read through
``OAuthSettings()`` / ``EncryptionSettings()`` at the point of use so that the
current environment is always honoured.
"""

from functools import lru_cache
from typing import List, Literal, Optional, Tuple

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sfs_social.types.social import PLATFORM_CONFIGS, SocialPlatform

DEFAULT_FRONTEND_URL = "http://localhost:5173"


# =============================================================================
# Encryption Settings
# =============================================================================


class EncryptionSettings(BaseSettings):
    """Configuration for the token encryption key."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    encryption_key: Optional[SecretStr] = Field(
        default=None,
        description="Base64-encoded 32-byte key for AES-256-GCM",
    )


# =============================================================================
# OAuth Settings
# =============================================================================


class OAuthSettings(BaseSettings):
    """Client credentials for each supported platform."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    frontend_url: Optional[str] = Field(
        default=None,
        description="Base URL used to build OAuth redirect URIs",
    )

    facebook_app_id: Optional[str] = None
    facebook_app_secret: Optional[SecretStr] = None
    instagram_client_id: Optional[str] = None
    instagram_client_secret: Optional[SecretStr] = None
    twitter_client_id: Optional[str] = None
    twitter_client_secret: Optional[SecretStr] = None
    linkedin_client_id: Optional[str] = None
    linkedin_client_secret: Optional[SecretStr] = None
    tiktok_client_key: Optional[str] = None
    tiktok_client_secret: Optional[SecretStr] = None
    youtube_client_id: Optional[str] = None
    youtube_client_secret: Optional[SecretStr] = None
    pinterest_app_id: Optional[str] = None
    pinterest_app_secret: Optional[SecretStr] = None

    @property
    def base_url(self) -> str:
        """Frontend base URL without trailing slash."""
        return (self.frontend_url or DEFAULT_FRONTEND_URL).rstrip("/")

    def _pair(self, platform: SocialPlatform) -> Tuple[Optional[str], Optional[str]]:
        config = PLATFORM_CONFIGS[platform]
        client_id = getattr(self, config.client_id_env.lower())
        secret = getattr(self, config.client_secret_env.lower())
        return client_id or None, secret.get_secret_value() if secret else None

    def credentials_for(self, platform: SocialPlatform) -> Tuple[Optional[str], Optional[str]]:
        """
        Get the (client_id, client_secret) pair for a platform.

        Instagram logins go through a Facebook app, so Instagram falls back
        to the Facebook app credentials when it has none of its own.
        """
        client_id, secret = self._pair(platform)
        if platform == SocialPlatform.INSTAGRAM and not (client_id and secret):
            fb_id, fb_secret = self._pair(SocialPlatform.FACEBOOK)
            client_id = client_id or fb_id
            secret = secret or fb_secret
        return client_id, secret

    def is_configured(self, platform: SocialPlatform) -> bool:
        """A platform is configured when both client id and secret are present."""
        client_id, secret = self.credentials_for(platform)
        return bool(client_id and secret)


# =============================================================================
# Publisher Settings
# =============================================================================


class PublisherSettings(BaseSettings):
    """Configuration for the scheduled publisher."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    publisher_enabled: bool = Field(
        default=True,
        description="Run the scheduled publisher",
    )
    publisher_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between scheduler ticks",
    )
    publisher_max_concurrent_posts: int = Field(
        default=5,
        ge=1,
        description="Maximum posts published concurrently within a tick",
    )
    publisher_http_timeout: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Timeout in seconds for provider API requests",
    )
    token_refresh_leeway_seconds: int = Field(
        default=300,
        ge=0,
        description="Refresh access tokens this many seconds before expiry",
    )


# =============================================================================
# Logging Settings
# =============================================================================


class LoggingSettings(BaseSettings):
    """Configuration for logging."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format_json: bool = Field(
        default=False,
        description="Force JSON log format in development",
    )
    environment: str = Field(
        default="development",
        description="Deployment environment name",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")


# =============================================================================
# Main Settings
# =============================================================================


class Settings(BaseSettings):
    """Aggregates all configuration groups."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    encryption: EncryptionSettings = Field(default_factory=EncryptionSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    publisher: PublisherSettings = Field(default_factory=PublisherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_encryption_configured(self) -> bool:
        """Check if an encryption key is present."""
        return self.encryption.encryption_key is not None

    @property
    def configured_platforms(self) -> List[str]:
        return [p.value for p in SocialPlatform if self.oauth.is_configured(p)]

    def get_config_summary(self) -> dict:
        """
        Summary of configuration status for logging.

        Never includes secrets.
        """
        return {
            "environment": self.logging.environment,
            "encryption_configured": self.is_encryption_configured,
            "configured_platforms": self.configured_platforms,
            "publisher_enabled": self.publisher.publisher_enabled,
            "publisher_interval_seconds": self.publisher.publisher_interval_seconds,
            "publisher_max_concurrent_posts": self.publisher.publisher_max_concurrent_posts,
            "publisher_http_timeout": self.publisher.publisher_http_timeout,
            "log_level": self.logging.log_level,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Call reload_settings() to pick up environment changes.
    """
    return Settings()


def reload_settings() -> Settings:
    """Clear the cache and return fresh settings."""
    get_settings.cache_clear()
    return get_settings()
