"""Tests for configuration loading."""

import pytest
from decimal import Decimal

from piggybank.config import AppSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory so no .env file leaks in."""
    monkeypatch.chdir(tmp_path)
    for name in [
        "STORAGE_BACKEND",
        "SEED_DEMO_DATA",
        "CURRENCY_SYMBOL",
        "QUICK_ADD_AMOUNTS",
        "LOG_LEVEL",
        "GOOGLE_SHEETS_CREDENTIALS_PATH",
        "GOOGLE_SHEETS_SPREADSHEET_ID",
    ]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:

    def test_defaults(self):
        settings = AppSettings()
        assert settings.storage_backend == "memory"
        assert settings.seed_demo_data is True
        assert settings.currency_symbol == "$"
        assert settings.quick_add_amounts_list == [Decimal("5"), Decimal("10")]
        assert settings.log_level == "INFO"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "google_sheets")
        monkeypatch.setenv("QUICK_ADD_AMOUNTS", "1, 2.50 ,")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = get_settings().app
        assert settings.storage_backend == "google_sheets"
        assert settings.quick_add_amounts_list == [Decimal("1"), Decimal("2.50")]
        assert settings.log_level == "DEBUG"

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "postgres")
        with pytest.raises(ValueError):
            AppSettings()

    def test_unknown_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ValueError):
            AppSettings()


class TestValidateAllSettings:

    def test_google_sheets_not_configured(self):
        status = validate_all_settings()
        assert status["app"] is True
        assert status["google_sheets"] is False
        assert "google_sheets_error" in status

    def test_google_sheets_configured(self, monkeypatch, tmp_path):
        credentials = tmp_path / "credentials.json"
        credentials.write_text("{}")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-id")

        status = validate_all_settings()
        assert status["google_sheets"] is True
