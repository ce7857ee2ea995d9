"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from expense_tracker.config import (
    DEFAULT_ASSET_MANIFEST,
    AppSettings,
    OfflineCacheSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the settings groups."""

    def test_cache_defaults(self):
        settings = OfflineCacheSettings()
        assert settings.cache_name == "expense-tracker-cache-v1"
        assert settings.assets == DEFAULT_ASSET_MANIFEST
        assert settings.shell_path == "./index.html"

    def test_cache_version_from_environment(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_CACHE_VERSION", "v7")
        assert OfflineCacheSettings().cache_name == "expense-tracker-cache-v7"

    def test_state_key_rejects_path_separators(self):
        with pytest.raises(PydanticValidationError):
            StorageSettings(state_key="../escape")

    def test_app_defaults(self):
        settings = AppSettings()
        assert settings.chart_months_back == 6
        assert settings.recent_transactions_limit == 5
        assert settings.export_filename == "expense-tracker-data.json"

    def test_debug_mode_forces_debug_logging(self):
        assert AppSettings(log_level="WARNING").effective_log_level == "WARNING"
        assert AppSettings(log_level="WARNING", debug_mode=True).effective_log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            AppSettings(log_level="LOUD")

    def test_validate_all_settings(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_CACHE_REQUEST_TIMEOUT_SECONDS", "-1")
        get_settings.cache_clear()
        try:
            results = validate_all_settings()
        finally:
            get_settings.cache_clear()
        assert results["storage"] is True
        assert results["app"] is True
        assert results["offline_cache"] is False
        assert "offline_cache_error" in results


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
