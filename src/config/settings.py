"""Centralized configuration management using pydantic-settings.

This module provides type-safe configuration with environment variable loading,
validation, and sensible defaults for all chef-analyze settings.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChefServerSettings(BaseSettings):
    """Chef Infra Server connection configuration."""

    model_config = SettingsConfigDict(env_prefix="CHEF_", extra="ignore")

    server_url: str | None = Field(
        default=None,
        description="Chef Infra Server URL, including the organization path",
    )
    client_name: str | None = Field(
        default=None,
        description="Chef Infra Server API client username",
    )
    client_key: str | None = Field(
        default=None,
        description="Path to the API client private key (PEM)",
    )
    ssl_verify: bool = Field(
        default=True,
        description="SSL verification flag",
    )
    timeout_s: float = Field(
        default=30.0,
        description="Request timeout in seconds",
    )
    search_rows: int = Field(
        default=1000,
        ge=1,
        description="Page size for node searches",
    )

    @field_validator("server_url")
    @classmethod
    def normalize_server_url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.rstrip("/")

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of validation error messages. Empty list means valid.
        """
        errors: list[str] = []

        if not self.server_url:
            errors.append("CHEF_SERVER_URL is required (or pass --chef-server-url)")

        if not self.client_name:
            errors.append("CHEF_CLIENT_NAME is required (or pass --client-name)")

        if not self.client_key:
            errors.append("CHEF_CLIENT_KEY is required (or pass --client-key)")
        else:
            key_path = Path(self.client_key).expanduser()
            if not key_path.exists():
                errors.append(f"CHEF_CLIENT_KEY file does not exist: {self.client_key}")
            elif not key_path.is_file():
                errors.append(f"CHEF_CLIENT_KEY is not a file: {self.client_key}")

        return errors


class CookstyleSettings(BaseSettings):
    """Cookstyle static analyzer configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    binary: str = Field(
        default="cookstyle",
        validation_alias="COOKSTYLE_BIN",
        description="Cookstyle executable name or path",
    )
    timeout_s: float = Field(
        default=300.0,
        validation_alias="COOKSTYLE_TIMEOUT",
        description="Maximum seconds a single cookstyle run may take",
    )


class ReportSettings(BaseSettings):
    """Report generation limits."""

    model_config = SettingsConfigDict(extra="ignore")

    workers: int = Field(
        default=10,
        ge=1,
        validation_alias="REPORT_WORKERS",
        description="Maximum number of concurrent cookbook stage calls",
    )
    timeout_s: float | None = Field(
        default=None,
        validation_alias="REPORT_TIMEOUT",
        description="Overall report deadline in seconds (unset means no deadline)",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    debug_all: bool = Field(
        default=False,
        validation_alias="DEBUG_ALL",
        description="Enable debug logging for all libraries",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level for the chef_analyze namespace",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.upper()
        return v


class Settings(BaseSettings):
    """Root settings class with all nested configurations.

    Usage:
        from src.config import get_settings

        settings = get_settings()
        server_url = settings.chef.server_url
        workers = settings.report.workers
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    chef: ChefServerSettings = Field(default_factory=ChefServerSettings)
    cookstyle: CookstyleSettings = Field(default_factory=CookstyleSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Singleton pattern for settings
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance.

    Returns:
        The singleton Settings instance with all configuration loaded.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
