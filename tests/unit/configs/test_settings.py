import pytest
from pydantic import ValidationError

from src.configs.settings import IngestSettings, get_settings


def test_settings_default_values(monkeypatch):
    """Test default values for settings."""
    for name in ("RETURN_WINDOW_DAYS", "MAX_WORKERS", "EMAIL_MASK", "LOG_LEVEL", "JSON_LOGS"):
        monkeypatch.delenv(f"ORDER_INGEST_{name}", raising=False)
    settings = IngestSettings(_env_file=None)
    assert settings.RETURN_WINDOW_DAYS == 30
    assert settings.MAX_WORKERS == 1
    assert settings.EMAIL_MASK == "****"
    assert settings.LOG_LEVEL == "INFO"
    assert settings.JSON_LOGS is False


def test_settings_from_environment(monkeypatch):
    """Test that ORDER_INGEST_* variables are picked up."""
    monkeypatch.setenv("ORDER_INGEST_RETURN_WINDOW_DAYS", "45")
    monkeypatch.setenv("ORDER_INGEST_JSON_LOGS", "true")
    settings = IngestSettings(_env_file=None)
    assert settings.RETURN_WINDOW_DAYS == 45
    assert settings.JSON_LOGS is True


def test_settings_reject_negative_window():
    """Test that a negative return window is invalid."""
    with pytest.raises(ValidationError):
        IngestSettings(_env_file=None, RETURN_WINDOW_DAYS=-1)


def test_get_settings_is_cached():
    """Test that get_settings returns a singleton."""
    assert get_settings() is get_settings()
