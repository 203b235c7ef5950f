"""Configuration module for chef-analyze.

This module provides centralized, type-safe configuration management
using pydantic-settings with environment variable loading.

Usage:
    from src.config import get_settings

    settings = get_settings()

    # Access Chef Infra Server settings
    server_url = settings.chef.server_url

    # Access report limits
    workers = settings.report.workers
"""

from src.config.settings import (
    ChefServerSettings,
    CookstyleSettings,
    LoggingSettings,
    ReportSettings,
    Settings,
    get_settings,
    reset_settings,
)

__all__ = [
    "ChefServerSettings",
    "CookstyleSettings",
    "LoggingSettings",
    "ReportSettings",
    "Settings",
    "get_settings",
    "reset_settings",
]
