"""
Configuration module for the subtitle-only service.

Uses pydantic-settings to load configuration from environment variables.
Everything here is read-only process state: the dispatch layer reads it
and never writes it.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Every field carries an unprefixed alias, so the environment uses the
    short names below (e.g., DURATION_LIMIT or HOST). populate_by_name=True
    keeps keyword construction by field name working in code and tests:
    Settings(duration_limit=3600).

    Environment Variables:
        HOST: Server host (default: 0.0.0.0)
        PORT: Server port (default: 9000)
        LOG_LEVEL: Logging level, one of critical, error, warning, info, debug (default: info)
        DURATION_LIMIT: Maximum content duration in seconds (default: 10800)
            Reported to clients in minutes when content is too long.
        API_PROXY: Proxy URL handed to extractors that make several outbound calls
        API_SOURCE_ADDRESS: Local address to bind outbound connections to
        IMPERSONATE_TARGET: Browser to impersonate for TLS fingerprinting, e.g. "chrome" (default: unset)
        REQUEST_TIMEOUT: Socket timeout for extractor network calls in seconds (default: 30)
        RATE_LIMIT_ENABLED: Enable rate limiting (default: true)
        RATE_LIMIT_PER_MINUTE: Requests per minute per IP (default: 20)
        ENABLE_SECURITY_HEADERS: Enable security headers middleware (default: true)
    """

    # ========== Server Configuration ==========

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=9000, alias="PORT")
    log_level: Literal["critical", "error", "warning", "info", "debug"] = Field(default="info", alias="LOG_LEVEL")

    # ========== Extraction Settings ==========

    # Longest content accepted by extractors, in seconds (3 hours)
    duration_limit: int = Field(default=10800, alias="DURATION_LIMIT")

    # Shared transport options; only reach extractors that take a dispatcher
    api_proxy: str | None = Field(default=None, alias="API_PROXY")
    api_source_address: str | None = Field(default=None, alias="API_SOURCE_ADDRESS")
    # Requires curl_cffi; disabled unless configured
    impersonate_target: str | None = Field(default=None, alias="IMPERSONATE_TARGET")

    request_timeout: int = Field(default=30, alias="REQUEST_TIMEOUT")

    # ========== Security Settings ==========

    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_per_minute: int = Field(default=20, alias="RATE_LIMIT_PER_MINUTE")

    enable_security_headers: bool = Field(default=True, alias="ENABLE_SECURITY_HEADERS")

    model_config = SettingsConfigDict(
        env_prefix="SUBTITLES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def duration_limit_minutes(self) -> float:
        """Duration limit in minutes, rounded to 2 decimals for error context."""
        return round(self.duration_limit / 60, 2)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        """Accept LOG_LEVEL in any case (e.g. DEBUG)."""
        return value.lower() if isinstance(value, str) else value


# Global settings instance - loaded at startup with environment variables
settings = Settings()
