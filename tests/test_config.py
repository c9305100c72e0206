"""Tests for nourish.config — YAML + environment configuration."""
from __future__ import annotations

from pathlib import Path

import pytest

from nourish.config import NourishConfig


class TestNourishConfig:
    def test_defaults_when_file_missing(self, tmp_path):
        config = NourishConfig.load(tmp_path / "missing.yaml", env={})
        assert config.hydration_interval_minutes == 120
        assert config.repeat_horizon_days == 14
        assert config.log_level == "WARNING"

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "data_dir: {}\n"
            "hydration_interval_minutes: 90\n"
            "repeat_horizon_days: 7\n"
            "log_level: debug\n".format(tmp_path / "data"),
            encoding="utf-8",
        )
        config = NourishConfig.load(path, env={})
        assert config.data_dir == tmp_path / "data"
        assert config.hydration_interval_minutes == 90
        assert config.repeat_horizon_days == 7
        assert config.log_level == "DEBUG"
        assert config.settings_path == tmp_path / "data" / "settings.json"
        assert config.notifications_db_path == tmp_path / "data" / "notifications.db"

    def test_env_overrides_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("hydration_interval_minutes: 90\n", encoding="utf-8")
        config = NourishConfig.load(
            path,
            env={
                "NOURISH_HYDRATION_INTERVAL": "45",
                "NOURISH_DATA_DIR": str(tmp_path / "env"),
                "NOURISH_LOG_LEVEL": "info",
            },
        )
        assert config.hydration_interval_minutes == 45
        assert config.data_dir == Path(tmp_path / "env")
        assert config.log_level == "INFO"

    def test_broken_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("hydration_interval_minutes: [unclosed\n", encoding="utf-8")
        config = NourishConfig.load(path, env={})
        assert config.hydration_interval_minutes == 120

    def test_non_mapping_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        assert NourishConfig.load(path, env={}).repeat_horizon_days == 14

    @pytest.mark.parametrize("value", [0, -1, "abc"])
    def test_invalid_interval_rejected(self, value):
        with pytest.raises(ValueError):
            NourishConfig.from_dict({"hydration_interval_minutes": value})

    def test_default_path_respects_xdg(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert NourishConfig.get_default_path() == tmp_path / "nourish" / "config.yaml"

    def test_to_dict(self, tmp_path):
        config = NourishConfig(data_dir=tmp_path)
        assert config.to_dict()["data_dir"] == str(tmp_path)
