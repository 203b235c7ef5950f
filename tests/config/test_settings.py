"""Tests for centralized configuration settings."""

import pytest
from pydantic import ValidationError

from src.config import (
    ChefServerSettings,
    CookstyleSettings,
    LoggingSettings,
    ReportSettings,
    Settings,
    get_settings,
    reset_settings,
)


class TestChefServerSettings:
    """Tests for Chef Infra Server configuration."""

    def test_default_values(self, monkeypatch):
        for name in ("CHEF_SERVER_URL", "CHEF_CLIENT_NAME", "CHEF_CLIENT_KEY"):
            monkeypatch.delenv(name, raising=False)

        settings = ChefServerSettings()
        assert settings.server_url is None
        assert settings.client_name is None
        assert settings.client_key is None
        assert settings.ssl_verify is True
        assert settings.timeout_s == 30.0
        assert settings.search_rows == 1000

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CHEF_SERVER_URL", "https://chef.example/organizations/acme")
        monkeypatch.setenv("CHEF_CLIENT_NAME", "reporter")
        monkeypatch.setenv("CHEF_SSL_VERIFY", "false")
        monkeypatch.setenv("CHEF_SEARCH_ROWS", "50")

        settings = ChefServerSettings()
        assert settings.server_url == "https://chef.example/organizations/acme"
        assert settings.client_name == "reporter"
        assert settings.ssl_verify is False
        assert settings.search_rows == 50

    def test_server_url_normalized(self, monkeypatch):
        monkeypatch.setenv("CHEF_SERVER_URL", "https://chef.example/organizations/acme/")

        settings = ChefServerSettings()
        assert settings.server_url == "https://chef.example/organizations/acme"

    def test_search_rows_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("CHEF_SEARCH_ROWS", "0")

        with pytest.raises(ValidationError):
            ChefServerSettings()

    def test_validate_config_missing_everything(self, monkeypatch):
        for name in ("CHEF_SERVER_URL", "CHEF_CLIENT_NAME", "CHEF_CLIENT_KEY"):
            monkeypatch.delenv(name, raising=False)

        errors = ChefServerSettings().validate_config()
        assert any("CHEF_SERVER_URL" in e for e in errors)
        assert any("CHEF_CLIENT_NAME" in e for e in errors)
        assert any("CHEF_CLIENT_KEY" in e for e in errors)

    def test_validate_config_missing_key_file(self, tmp_path):
        settings = ChefServerSettings(
            server_url="https://chef.example/organizations/acme",
            client_name="reporter",
            client_key=str(tmp_path / "missing.pem"),
        )

        errors = settings.validate_config()
        assert errors == [
            f"CHEF_CLIENT_KEY file does not exist: {tmp_path / 'missing.pem'}"
        ]

    def test_validate_config_key_is_directory(self, tmp_path):
        settings = ChefServerSettings(
            server_url="https://chef.example/organizations/acme",
            client_name="reporter",
            client_key=str(tmp_path),
        )

        errors = settings.validate_config()
        assert any("is not a file" in e for e in errors)

    def test_validate_config_valid(self, tmp_path):
        key = tmp_path / "reporter.pem"
        key.write_text("key")
        settings = ChefServerSettings(
            server_url="https://chef.example/organizations/acme",
            client_name="reporter",
            client_key=str(key),
        )

        assert settings.validate_config() == []


class TestCookstyleSettings:
    """Tests for Cookstyle configuration."""

    def test_default_values(self, monkeypatch):
        monkeypatch.delenv("COOKSTYLE_BIN", raising=False)
        monkeypatch.delenv("COOKSTYLE_TIMEOUT", raising=False)

        settings = CookstyleSettings()
        assert settings.binary == "cookstyle"
        assert settings.timeout_s == 300.0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("COOKSTYLE_BIN", "/opt/chef-workstation/bin/cookstyle")
        monkeypatch.setenv("COOKSTYLE_TIMEOUT", "60")

        settings = CookstyleSettings()
        assert settings.binary == "/opt/chef-workstation/bin/cookstyle"
        assert settings.timeout_s == 60.0


class TestReportSettings:
    """Tests for report limits."""

    def test_default_values(self, monkeypatch):
        monkeypatch.delenv("REPORT_WORKERS", raising=False)
        monkeypatch.delenv("REPORT_TIMEOUT", raising=False)

        settings = ReportSettings()
        assert settings.workers == 10
        assert settings.timeout_s is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("REPORT_WORKERS", "4")
        monkeypatch.setenv("REPORT_TIMEOUT", "120")

        settings = ReportSettings()
        assert settings.workers == 4
        assert settings.timeout_s == 120.0

    def test_workers_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("REPORT_WORKERS", "0")

        with pytest.raises(ValidationError):
            ReportSettings()


class TestLoggingSettings:
    """Tests for logging configuration."""

    def test_default_values(self, monkeypatch):
        monkeypatch.delenv("DEBUG_ALL", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = LoggingSettings()
        assert settings.debug_all is False
        assert settings.log_level == "INFO"

    def test_log_level_uppercase(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = LoggingSettings()
        assert settings.log_level == "DEBUG"


class TestSettings:
    """Tests for root Settings class."""

    def test_has_all_nested_settings(self):
        settings = Settings()
        assert isinstance(settings.chef, ChefServerSettings)
        assert isinstance(settings.cookstyle, CookstyleSettings)
        assert isinstance(settings.report, ReportSettings)
        assert isinstance(settings.logging, LoggingSettings)

    def test_nested_values_accessible(self, monkeypatch):
        monkeypatch.setenv("CHEF_CLIENT_NAME", "reporter")
        monkeypatch.setenv("REPORT_WORKERS", "3")

        settings = Settings()
        assert settings.chef.client_name == "reporter"
        assert settings.report.workers == 3


class TestGetSettings:
    """Tests for the get_settings singleton function."""

    def test_returns_settings_instance(self):
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_singleton_pattern(self):
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2

    def test_reset_clears_singleton(self):
        settings1 = get_settings()
        reset_settings()
        settings2 = get_settings()
        assert settings1 is not settings2

    def test_env_changes_after_reset(self, monkeypatch):
        monkeypatch.setenv("COOKSTYLE_BIN", "cookstyle-a")
        assert get_settings().cookstyle.binary == "cookstyle-a"

        monkeypatch.setenv("COOKSTYLE_BIN", "cookstyle-b")
        reset_settings()

        assert get_settings().cookstyle.binary == "cookstyle-b"
