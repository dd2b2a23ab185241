"""
Unit Tests for Settings
=======================

Tests for environment-driven configuration.
"""

import pytest
from pydantic import ValidationError

from quick_html_pdf.config.logging import get_logging_config
from quick_html_pdf.config.settings import Settings, get_settings, reload_settings


class TestSettings:
    """Test settings parsing and validation."""

    def test_testing_environment_loaded(self):
        settings = get_settings()
        assert settings.environment == "testing"
        assert settings.settle_delay_ms == 10
        assert settings.print_grace_delay_ms == 100
        assert settings.max_pages == 1000

    def test_env_prefix(self, monkeypatch, temp_dir):
        monkeypatch.setenv("QUICK_HTML_PDF_MAX_PAGES", "25")
        monkeypatch.setenv("QUICK_HTML_PDF_OUTPUT_PATH", str(temp_dir / "pdfs"))

        settings = Settings()

        assert settings.max_pages == 25
        assert (temp_dir / "pdfs").is_dir()

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="staging")

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_allowed_hosts_from_string(self):
        assert Settings(allowed_hosts="a.com, b.com").allowed_hosts == ["a.com", "b.com"]
        assert Settings(allowed_hosts='["x.org"]').allowed_hosts == ["x.org"]

    def test_reload_settings(self, monkeypatch):
        original = get_settings()
        monkeypatch.setenv("QUICK_HTML_PDF_PORT", "9001")
        try:
            assert reload_settings().port == 9001
        finally:
            monkeypatch.delenv("QUICK_HTML_PDF_PORT")
            reload_settings()
        assert get_settings().port == original.port


class TestLoggingConfig:
    """Test logging configuration per environment."""

    def test_no_file_handlers_in_testing(self):
        config = get_logging_config(Settings(environment="testing"))
        assert set(config["handlers"]) == {"console"}

    def test_production_uses_json_and_files(self, temp_dir):
        config = get_logging_config(Settings(environment="production", storage_path=temp_dir))

        assert config["handlers"]["console"]["formatter"] == "json"
        assert "file" in config["handlers"]
        assert config["handlers"]["error_file"]["level"] == "ERROR"
