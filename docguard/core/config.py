"""
Configuration management using Pydantic Settings.

This module provides type-safe, validated configuration loading from environment
variables.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic

Usage:
    from docguard.core.config import settings

    endpoint = settings.telemetry_endpoint
    if settings.is_production:
        ...
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docguard.core.enums import Environment

_DEFAULT_SHARED_SECRET = "change-me"


class Settings(BaseSettings):
    """
    Main application settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. Default values (only for non-sensitive config)

    Returns:
        Settings: Application configuration loaded from environment.
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Runtime environment (development, testing, ci, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Local persistence
    storage_prefix: str = Field(
        default="docguard:",
        description="Namespace prefix for every persisted key",
    )
    storage_path: str | None = Field(
        default=None,
        description="JSON file backing the key/value store (None = in-memory)",
    )

    # Rate limits
    max_overlay_opens: int = Field(default=20, gt=0)
    overlay_window_ms: int = Field(default=60_000, gt=0)
    max_document_clicks: int = Field(default=50, gt=0)
    document_window_ms: int = Field(default=60_000, gt=0)

    # Lockout
    max_failed_attempts: int = Field(
        default=5,
        gt=0,
        description="Violations within the violation window that trigger a lockout",
    )
    lockout_duration_ms: int = Field(default=300_000, gt=0)
    violation_window_ms: int = Field(default=300_000, gt=0)

    # Telemetry delivery
    telemetry_enabled: bool = Field(default=True)
    telemetry_endpoint: str = Field(
        default="http://localhost:8000/log",
        description="Collector URL receiving event batches",
    )
    telemetry_api_key: str = Field(
        default=_DEFAULT_SHARED_SECRET,
        description="Shared secret sent as X-API-Key (must match the collector)",
    )
    telemetry_origin: str | None = Field(
        default=None,
        description="Origin header sent with batches (must be allow-listed by the collector)",
    )
    batch_size: int = Field(default=10, gt=0)
    flush_interval_ms: int = Field(default=30_000, gt=0)
    requeue_ceiling: int = Field(
        default=100,
        gt=0,
        description="Failed batches at or above this size are dropped",
    )
    beacon_timeout_seconds: float = Field(default=2.0, gt=0)

    # User-facing messages
    locale: str = Field(default="ca", description="Denial message language (ca, en)")

    # Collector
    collector_api_key: str = Field(default=_DEFAULT_SHARED_SECRET)
    collector_allowed_origins: str = Field(
        default="https://joanfelipgithub.github.io,https://insscf.clickedu.eu",
        description="Allowed Origin header values (comma-separated)",
    )
    collector_rate_limit_per_minute: int = Field(
        default=100,
        ge=0,
        description="Requests accepted per client IP per minute (0 disables)",
    )
    collector_max_events: int = Field(default=10_000, gt=0)

    # Data integrity
    integrity_expected_hash: str | None = Field(
        default=None,
        description="Expected SHA-256 digest ('sha256-<hex>' or bare hex)",
    )
    integrity_store_history: bool = Field(default=True)
    integrity_allow_bypass: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("collector_allowed_origins")
    @classmethod
    def parse_allowed_origins(cls, v: str) -> list[str]:
        """
        Parse comma-separated collector origins.

        Args:
            v: Comma-separated origins string.

        Returns:
            list[str]: List of origin URLs.
        """
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @field_validator("locale")
    @classmethod
    def normalize_locale(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def reject_default_secrets_in_production(self) -> "Settings":
        """
        Refuse to start a production deployment with the placeholder secrets.

        Raises:
            ValueError: If a shared secret still holds the default value.
        """
        if self.environment == Environment.PRODUCTION and _DEFAULT_SHARED_SECRET in (
            self.telemetry_api_key,
            self.collector_api_key,
        ):
            raise ValueError("Shared API keys must be set explicitly in production")
        return self

    # Convenience properties for environment checks
    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()


# Global settings instance (singleton pattern)
settings = get_settings()
