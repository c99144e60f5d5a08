"""Tests for configuration models and YAML loading."""

from pathlib import Path

import pytest

from tendersync.core.config.catalog import unknown_filters
from tendersync.core.config.loader import load_app_config, load_sync_settings
from tendersync.core.config.models import AppConfig, DEFAULT_SOURCE_URL
from tendersync.core.errors import ConfigurationError


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadAppConfig:
    """Test suite for load_app_config."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_app_config(tmp_path / "absent.yaml")

        assert config == AppConfig()
        assert config.source.url == DEFAULT_SOURCE_URL
        assert config.elasticsearch.tenders_index == "tenders"

    def test_env_expansion(self, tmp_path, monkeypatch):
        """${VAR} and ${VAR:-default} are expanded before validation."""
        monkeypatch.setenv("ES_URL", "https://search.internal:9200")
        monkeypatch.delenv("ES_USER", raising=False)
        path = _write(
            tmp_path / "app.yaml",
            "elasticsearch:\n"
            "  url: ${ES_URL}\n"
            "  username: ${ES_USER:-elastic}\n"
            "  auth_required: true\n"
            "scheduler:\n"
            "  interval_minutes: 15\n"
            "  settings:\n"
            "    pageSize: 100\n"
            "    tenderCategory: 2\n",
        )

        config = load_app_config(path)

        assert config.elasticsearch.url == "https://search.internal:9200"
        assert config.elasticsearch.username == "elastic"
        assert config.elasticsearch.auth_required is True
        assert config.scheduler.interval_minutes == 15
        assert config.scheduler.settings.page_size == 100
        assert config.scheduler.settings.tender_category == 2

    def test_path_from_environment(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "custom.yaml", "source:\n  timeout_seconds: 12\n")
        monkeypatch.setenv("TENDERSYNC_CONFIG", str(path))

        assert load_app_config().source.timeout_seconds == 12

    def test_invalid_values(self, tmp_path):
        path = _write(tmp_path / "app.yaml", "scheduler:\n  interval_minutes: 0\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_app_config(path)

        assert exc_info.value.path == path
        assert "interval_minutes" in exc_info.value.details

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path / "app.yaml", "source: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_app_config(path)

    def test_non_mapping_top_level(self, tmp_path):
        path = _write(tmp_path / "app.yaml", "- a\n- b\n")

        with pytest.raises(ConfigurationError):
            load_app_config(path)

    def test_ensure_directories(self, tmp_path):
        config = AppConfig(
            data_dir=tmp_path / "data",
            logging={"file": tmp_path / "logs" / "app.log"},
        )

        config.ensure_directories()

        assert (tmp_path / "data").is_dir()
        assert (tmp_path / "logs").is_dir()


class TestLoadSyncSettings:
    """Test suite for load_sync_settings."""

    def test_loads_camel_case_file(self, tmp_path):
        path = _write(
            tmp_path / "sync.yaml",
            "pageSize: 30\ntenderAreasIdString: 5\nfields:\n  - tenderId\n  - agencyName\n",
        )

        settings = load_sync_settings(path)

        assert settings.page_size == 30
        assert settings.tender_areas_id == 5
        assert settings.requested_fields == ["tenderId", "agencyName"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_sync_settings(tmp_path / "nope.yaml")


class TestCatalog:
    """Test suite for filter catalog checks."""

    def test_known_values(self):
        assert unknown_filters(tender_category=2, tender_activity_id=9, tender_areas_id=1) == []

    def test_unknown_values(self):
        notes = unknown_filters(tender_category=3, tender_activity_id=99, tender_areas_id=42)

        assert len(notes) == 3
        assert "TenderCategory=3" in notes[0]
