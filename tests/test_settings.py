"""
Tests for configuration loading.

Each test runs in an empty temporary directory so a developer's .env
file is never picked up.
"""

import pytest
from pydantic import ValidationError

from budget_assistant.config import (
    AppSettings,
    DatabaseSettings,
    GeminiSettings,
    GoogleSheetsSettings,
    Settings,
    get_settings,
    validate_all_settings,
)


CONFIG_VARS = [
    "GEMINI_API_KEY",
    "GEMINI_MAX_TOOL_ROUNDS",
    "GOOGLE_SHEETS_CREDENTIALS_PATH",
    "GOOGLE_SHEETS_SPREADSHEET_ID",
    "DATABASE_URL",
    "STORAGE_BACKEND",
    "TOOLS_ENABLED",
    "HISTORY_WINDOW",
    "CONVERSATION_ID",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self):
        settings = AppSettings()

        assert settings.storage_backend == "sql"
        assert settings.tools_enabled is True
        assert settings.conversation_id == "budget-chat"
        assert settings.history_window == 20
        assert settings.recent_transactions_limit == 10
        assert settings.default_alert_threshold == 80.0
        assert settings.mcp_endpoint == "/mcp/messages"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TOOLS_ENABLED", "false")
        monkeypatch.setenv("HISTORY_WINDOW", "5")
        monkeypatch.setenv("STORAGE_BACKEND", "google_sheets")

        settings = AppSettings()

        assert settings.tools_enabled is False
        assert settings.history_window == 5
        assert settings.storage_backend == "google_sheets"

    def test_only_settings_the_app_reads(self):
        assert set(AppSettings.model_fields) == {
            "log_level",
            "json_logs",
            "storage_backend",
            "tools_enabled",
            "conversation_id",
            "history_window",
            "recent_transactions_limit",
            "default_alert_threshold",
            "mcp_endpoint",
        }

    def test_unknown_storage_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "postgres-direct")

        with pytest.raises(ValidationError):
            AppSettings()


class TestSectionSettings:
    """Tests for the prefixed sub-settings."""

    def test_database_default_is_local_sqlite(self):
        assert DatabaseSettings().url == "sqlite:///budget_assistant.db"

    def test_database_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
        assert DatabaseSettings().url == "sqlite:///:memory:"

    def test_gemini_requires_api_key(self):
        with pytest.raises(ValidationError):
            GeminiSettings()

    def test_gemini_from_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "abc")
        monkeypatch.setenv("GEMINI_MAX_TOOL_ROUNDS", "3")

        settings = GeminiSettings()

        assert settings.api_key == "abc"
        assert settings.max_tool_rounds == 3
        assert settings.model_name == "gemini-1.5-flash"

    def test_missing_credentials_file_only_warns(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", "missing.json")
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-id")

        with pytest.warns(UserWarning):
            settings = GoogleSheetsSettings()

        assert settings.budgets_sheet_name == "Budgets"
        assert settings.transactions_sheet_name == "Transactions"


class TestValidateAllSettings:
    def test_reports_missing_sections(self):
        status = validate_all_settings(Settings())

        assert status["database"] is True
        assert status["app"] is True
        assert status["gemini"] is False
        assert "gemini_error" in status
        assert status["google_sheets"] is False

    def test_gemini_configured(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "abc")
        assert validate_all_settings(Settings())["gemini"] is True

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()
