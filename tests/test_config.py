"""
Config System (config.py)

Tests ConfigLoader layering and ScanSettings validation.
"""

import json
import os

import pytest

from litewire.config import ConfigError, ConfigLoader, ScanSettings


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run every test in an empty directory with no LW_ variables set."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("LW_"):
            monkeypatch.delenv(key)
    return tmp_path


# ============================================================================
# ScanSettings
# ============================================================================

class TestScanSettings:

    def test_defaults_are_valid(self):
        settings = ScanSettings().validate()
        assert settings.strategy == "sequential"
        assert settings.max_workers == 4
        assert "org.springframework.stereotype.Service" in settings.managed_markers

    def test_bad_strategy(self):
        with pytest.raises(ConfigError, match="scan.strategy"):
            ScanSettings(strategy="parallel").validate()

    @pytest.mark.parametrize("workers", [0, -1, True])
    def test_bad_workers(self, workers):
        with pytest.raises(ConfigError, match="scan.max_workers"):
            ScanSettings(max_workers=workers).validate()

    def test_bad_timeout(self):
        with pytest.raises(ConfigError, match="scan.timeout"):
            ScanSettings(timeout=0).validate()

    def test_incomplete_default_datasource(self):
        with pytest.raises(ConfigError, match="missing 'url'"):
            ScanSettings(default_datasource={"driver": "d", "username": "u", "password": "p"}).validate()

    def test_is_ignored(self):
        settings = ScanSettings()
        assert settings.is_ignored("java.util.List")
        assert not settings.is_ignored("com.acme.Foo")


# ============================================================================
# ConfigLoader
# ============================================================================

class TestConfigLoader:

    def test_no_sources(self):
        loader = ConfigLoader.load()
        assert loader.to_dict() == {}
        assert loader.scan_settings() == ScanSettings()

    def test_yaml_file(self, isolated):
        path = isolated / "scan.yaml"
        path.write_text("scan:\n  strategy: concurrent\n  max_workers: 8\n", encoding="utf-8")
        settings = ConfigLoader.load(paths=[str(path)]).scan_settings()
        assert settings.strategy == "concurrent"
        assert settings.max_workers == 8

    def test_json_file(self, isolated):
        path = isolated / "scan.json"
        path.write_text(json.dumps({"scan": {"timeout": 5}}), encoding="utf-8")
        settings = ConfigLoader.load(paths=[str(path)]).scan_settings()
        assert settings.timeout == 5.0
        assert isinstance(settings.timeout, float)

    def test_default_file_detected(self, isolated):
        (isolated / "litewire.yml").write_text("scan:\n  max_workers: 2\n", encoding="utf-8")
        assert ConfigLoader.load().get("scan.max_workers") == 2

    def test_later_files_override(self, isolated):
        (isolated / "a.yaml").write_text("scan:\n  max_workers: 2\n  timeout: 9\n", encoding="utf-8")
        (isolated / "b.yaml").write_text("scan:\n  max_workers: 6\n", encoding="utf-8")
        loader = ConfigLoader.load(paths=["a.yaml", "b.yaml"])
        assert loader.get("scan.max_workers") == 6
        assert loader.get("scan.timeout") == 9

    def test_glob_pattern(self, isolated):
        conf = isolated / "conf"
        conf.mkdir()
        (conf / "10-base.yaml").write_text("scan:\n  max_workers: 2\n", encoding="utf-8")
        (conf / "20-local.yaml").write_text("scan:\n  max_workers: 3\n", encoding="utf-8")
        assert ConfigLoader.load(paths=["conf/*.yaml"]).get("scan.max_workers") == 3

    def test_unmatched_glob_is_fine(self):
        assert ConfigLoader.load(paths=["conf/*.yaml"]).to_dict() == {}

    def test_missing_file(self):
        with pytest.raises(ConfigError, match="does not exist"):
            ConfigLoader.load(paths=["missing.yaml"])

    def test_invalid_yaml(self, isolated):
        (isolated / "bad.yaml").write_text("scan: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="invalid YAML"):
            ConfigLoader.load(paths=["bad.yaml"])

    def test_invalid_json(self, isolated):
        (isolated / "bad.json").write_text("{", encoding="utf-8")
        with pytest.raises(ConfigError, match="invalid JSON"):
            ConfigLoader.load(paths=["bad.json"])

    def test_env_overrides_file(self, isolated, monkeypatch):
        (isolated / "litewire.yaml").write_text("scan:\n  max_workers: 2\n", encoding="utf-8")
        monkeypatch.setenv("LW_SCAN__MAX_WORKERS", "12")
        monkeypatch.setenv("LW_SCAN__MAPPER_SUFFIXES", "Mapper,Repo")
        settings = ConfigLoader.load().scan_settings()
        assert settings.max_workers == 12
        assert settings.mapper_suffixes == ["Mapper", "Repo"]

    def test_env_value_parsing(self, monkeypatch):
        monkeypatch.setenv("LW_A", "yes")
        monkeypatch.setenv("LW_B", "1.5")
        monkeypatch.setenv("LW_C", '{"x": 1}')
        monkeypatch.setenv("LW_D", "plain")
        loader = ConfigLoader.load()
        assert loader.get("a") is True
        assert loader.get("b") == 1.5
        assert loader.get("c") == {"x": 1}
        assert loader.get("d") == "plain"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("LW_SCAN__STRATEGY", "concurrent")
        loader = ConfigLoader.load(overrides={"scan": {"strategy": "sequential"}})
        assert loader.scan_settings().strategy == "sequential"

    def test_get_default(self):
        assert ConfigLoader.load().get("scan.nothing", "fallback") == "fallback"


class TestScanSettingsFromConfig:

    def test_unknown_key(self):
        loader = ConfigLoader.load(overrides={"scan": {"max_wokers": 2}})
        with pytest.raises(ConfigError) as exc_info:
            loader.scan_settings()
        assert exc_info.value.metadata["key"] == "scan.max_wokers"

    def test_type_mismatch(self):
        loader = ConfigLoader.load(overrides={"scan": {"max_workers": "many"}})
        with pytest.raises(ConfigError, match="scan.max_workers"):
            loader.scan_settings()

    def test_single_marker_wrapped(self):
        loader = ConfigLoader.load(overrides={"scan": {"managed_markers": "com.acme.Managed"}})
        assert loader.scan_settings().managed_markers == ["com.acme.Managed"]

    def test_single_mapper_scan_marker_wrapped(self):
        loader = ConfigLoader.load(overrides={"scan": {"mapper_scan_markers": "com.acme.ScanMappers"}})
        assert loader.scan_settings().mapper_scan_markers == ["com.acme.ScanMappers"]

    def test_default_datasource_merged(self):
        loader = ConfigLoader.load(overrides={"scan": {"default_datasource": {"url": "jdbc:h2:mem"}}})
        datasource = loader.scan_settings().default_datasource
        assert datasource["url"] == "jdbc:h2:mem"
        assert datasource["driver"] == ScanSettings().default_datasource["driver"]

    def test_invalid_value_rejected(self):
        loader = ConfigLoader.load(overrides={"scan": {"timeout": -1}})
        with pytest.raises(ConfigError, match="scan.timeout"):
            loader.scan_settings()
