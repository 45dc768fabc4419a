"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CURRENCIES = ["GBP", "EUR", "CAD", "AED", "INR"]


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development. Override via
    environment variables (prefixed with CFX_) or .env file.

    Examples:
        CFX_BASE_CURRENCY=GBP
        CFX_VENDOR_CURRENCIES='["GBP", "EUR", "USD"]'
        CFX_LOG_LEVEL=DEBUG
        CFX_ENVIRONMENT=production
    """

    model_config = SettingsConfigDict(
        env_prefix="CFX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Catalog FX"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = Field(default=False, description="Enable debug mode")

    # Database
    sqlite_path: Path = Field(
        default=Path("catalog_fx.db"),
        description="SQLite database file path",
    )

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # API Server
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_reload: bool = Field(
        default=False, description="Enable auto-reload (development only)"
    )

    # Currency normalization
    base_currency: str = Field(
        default="GBP",
        min_length=3,
        max_length=3,
        description="Canonical currency every catalog price is stored in",
    )
    price_decimals: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Minor-unit precision of the base currency",
    )
    vendor_currencies: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CURRENCIES),
        description="Currencies an administrator may assign to a vendor",
    )

    # Rate provider
    rate_target_currencies: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CURRENCIES),
        description="Currencies fetched on every rate refresh",
    )
    rate_api_url: str = "https://api.frankfurter.app/latest"
    rate_api_timeout: float = Field(default=15.0, gt=0)
    rate_source_label: str = "frankfurter.app"

    # Importer integration
    import_source_marker: str = Field(
        default="syncspider",
        description="import_source value that marks products saved by the importer",
    )

    @field_validator("base_currency", mode="before")
    @classmethod
    def normalize_base_currency(cls, v: str) -> str:
        return str(v).strip().upper()

    @field_validator("vendor_currencies", "rate_target_currencies", mode="after")
    @classmethod
    def normalize_currency_list(cls, v: list[str]) -> list[str]:
        """Upper-case codes, drop blanks and keep the first occurrence of each."""
        seen: list[str] = []
        for code in v:
            code = code.strip().upper()
            if code and code not in seen:
                seen.append(code)
        return seen

    @model_validator(mode="after")
    def base_currency_is_allowed(self) -> "Settings":
        if self.base_currency not in self.vendor_currencies:
            self.vendor_currencies = [self.base_currency, *self.vendor_currencies]
        return self

    @field_validator("debug", mode="before")
    @classmethod
    def set_debug_from_environment(cls, v: bool, info) -> bool:
        """Auto-enable debug in development environment."""
        if info.data.get("environment") == Environment.DEVELOPMENT:
            return True
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
