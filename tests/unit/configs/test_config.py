"""
Unit tests for the config module.

Tests for Config path resolution, IngestConfig merging and YAML loading.
"""

from datetime import UTC, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError
from src.configs.config import Config, IngestConfig, load_ingest_config
from src.configs.settings import IngestSettings


class TestConfigPaths:
    """Tests for Config path attributes."""

    def test_config_dir_exists(self):
        """CONFIG_DIR should exist."""
        assert isinstance(Config.CONFIG_DIR, Path)
        assert Config.CONFIG_DIR.exists()

    def test_project_root_exists(self):
        """PROJECT_ROOT should exist."""
        assert Config.PROJECT_ROOT.exists()

    def test_ingestion_config_path(self):
        """INGESTION_CONFIG_PATH should point at the bundled YAML."""
        assert Config.INGESTION_CONFIG_PATH.name == "ingestion.yaml"
        assert Config.INGESTION_CONFIG_PATH.exists()


class TestLoadIngestionConfig:
    """Tests for Config.load_ingestion_config."""

    def test_returns_dict_with_ingest_section(self):
        """Bundled config should contain the ingest defaults."""
        config = Config.load_ingestion_config()
        assert isinstance(config, dict)
        assert config["ingest"]["return_window_days"] == 30

    def test_cached(self):
        """Repeated loads should return the same object."""
        assert Config.load_ingestion_config() is Config.load_ingestion_config()


class TestIngestConfig:
    """Tests for IngestConfig."""

    def test_defaults(self):
        config = IngestConfig()
        assert config.return_window_days == 30
        assert config.as_of is None
        assert config.max_workers == 1
        assert config.email_mask == "****"

    def test_camel_case_aliases(self):
        config = IngestConfig.model_validate({"returnWindowDays": 45, "maxWorkers": 4})
        assert config.return_window_days == 45
        assert config.max_workers == 4

    def test_naive_as_of_becomes_utc(self):
        config = IngestConfig(as_of=datetime(2025, 8, 20))
        assert config.as_of == datetime(2025, 8, 20, tzinfo=UTC)

    @pytest.mark.parametrize("field,value", [("return_window_days", -1), ("max_workers", 0)])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            IngestConfig(**{field: value})

    def test_from_settings(self):
        settings = IngestSettings(
            _env_file=None, RETURN_WINDOW_DAYS=14, MAX_WORKERS=2, EMAIL_MASK="xx"
        )
        config = IngestConfig.from_settings(settings)
        assert config.return_window_days == 14
        assert config.max_workers == 2
        assert config.email_mask == "xx"

    def test_merged_none_returns_self(self):
        config = IngestConfig()
        assert config.merged(None) is config

    def test_merged_mapping_only_overrides_given_fields(self):
        base = IngestConfig(max_workers=3, as_of=datetime(2025, 8, 20, tzinfo=UTC))
        merged = base.merged({"returnWindowDays": 45})
        assert merged.return_window_days == 45
        assert merged.max_workers == 3
        assert merged.as_of == datetime(2025, 8, 20, tzinfo=UTC)

    def test_merged_config_instance(self):
        merged = IngestConfig(max_workers=3).merged(IngestConfig(return_window_days=7))
        assert merged.return_window_days == 7
        assert merged.max_workers == 3

    def test_merged_rejects_invalid_override(self):
        with pytest.raises(ValidationError):
            IngestConfig().merged({"returnWindowDays": -5})


class TestLoadIngestConfig:
    """Tests for load_ingest_config."""

    def test_bundled_defaults(self):
        config = load_ingest_config()
        assert config.return_window_days == 30

    def test_custom_file(self, tmp_path):
        path = tmp_path / "ingest.yaml"
        path.write_text("ingest:\n  returnWindowDays: 60\n  max_workers: 2\n")
        config = load_ingest_config(path)
        assert config.return_window_days == 60
        assert config.max_workers == 2

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_ingest_config(path).email_mask

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Missing config"):
            load_ingest_config(tmp_path / "nope.yaml")
