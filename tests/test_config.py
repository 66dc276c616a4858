"""Tests for chartcore.config: settings resolution, validation and overrides."""

import dataclasses
import json
import os
import subprocess
import sys
from pathlib import Path
from unittest import mock

import pytest

from chartcore import config
from chartcore.config import Settings, configure, get_settings, load_settings, reset_settings


@pytest.fixture(autouse=True)
def fresh_settings(tmp_path, monkeypatch):
    """Run each test in an empty directory with CHARTCORE_DIR pointing inside it."""
    monkeypatch.chdir(tmp_path)
    reset_settings()
    with mock.patch.dict(os.environ, {"CHARTCORE_DIR": str(tmp_path / "data")}):
        os.environ.pop("CHARTCORE_CONFIG", None)
        yield
    reset_settings()


def _write_config(path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload) if not isinstance(payload, str) else payload)
    return path


class TestDefaults:
    def test_defaults_without_config_file(self, tmp_path):
        settings = get_settings()
        assert settings.data_dir == (tmp_path / "data").resolve()
        assert settings.log_dir == settings.data_dir / "logs"
        assert settings.console_format == "simple"
        assert settings.log_to_file is False
        assert settings.warn_on_redefine is True
        assert settings.max_display_points == 5_000
        assert settings.gl_threshold == 100_000

    def test_settings_are_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            get_settings().gl_threshold = 1


class TestConfigFile:
    def test_reads_config_json_in_data_dir(self, tmp_path):
        _write_config(tmp_path / "data" / "config.json", {
            "console_format": "full",
            "log_to_file": True,
            "warn_on_redefine": False,
            "plotly": {"max_display_points": 200, "gl_threshold": 10},
        })
        settings = get_settings()
        assert settings.console_format == "full"
        assert settings.log_to_file is True
        assert settings.warn_on_redefine is False
        assert settings.max_display_points == 200
        assert settings.gl_threshold == 10

    def test_chartcore_config_env_points_elsewhere(self, tmp_path):
        path = _write_config(tmp_path / "elsewhere.json", {"console_format": "clean"})
        with mock.patch.dict(os.environ, {"CHARTCORE_CONFIG": str(path)}):
            assert load_settings().console_format == "clean"

    def test_invalid_json_raises(self, tmp_path):
        _write_config(tmp_path / "data" / "config.json", "{not json")
        with pytest.raises(ValueError, match="Invalid chartcore config file"):
            load_settings()

    def test_non_object_json_raises(self, tmp_path):
        _write_config(tmp_path / "data" / "config.json", [1, 2])
        with pytest.raises(ValueError, match="must hold a JSON object"):
            load_settings()

    def test_unknown_console_format_raises(self, tmp_path):
        _write_config(tmp_path / "data" / "config.json", {"console_format": "fancy"})
        with pytest.raises(ValueError, match="console_format must be one of"):
            load_settings()


class TestDataDir:
    def test_default_is_home_chartcore(self, tmp_path):
        os.environ.pop("CHARTCORE_DIR", None)
        with mock.patch.object(config.Path, "home", return_value=tmp_path / "home"):
            assert load_settings().data_dir == tmp_path / "home" / ".chartcore"

    def test_config_key_used_without_env(self, tmp_path):
        os.environ.pop("CHARTCORE_DIR", None)
        target = tmp_path / "config-dir"
        path = _write_config(tmp_path / "c.json", {"data_dir": str(target)})
        with mock.patch.dict(os.environ, {"CHARTCORE_CONFIG": str(path)}):
            assert load_settings().data_dir == target.resolve()

    def test_env_var_beats_config_key(self, tmp_path):
        path = _write_config(tmp_path / "c.json", {"data_dir": str(tmp_path / "cfg-dir")})
        with mock.patch.dict(os.environ, {"CHARTCORE_CONFIG": str(path)}):
            assert load_settings().data_dir == (tmp_path / "data").resolve()

    def test_tilde_expansion(self):
        with mock.patch.dict(os.environ, {"CHARTCORE_DIR": "~/my-chart-data"}):
            result = load_settings().data_dir
        assert "~" not in str(result)
        assert result == (Path.home() / "my-chart-data").resolve()

    def test_dotenv_in_working_directory(self, tmp_path):
        os.environ.pop("CHARTCORE_DIR", None)
        target = tmp_path / "dotenv-dir"
        (tmp_path / ".env").write_text(f"CHARTCORE_DIR={target}\n")
        assert load_settings().data_dir == target.resolve()


class TestCaching:
    def test_result_is_cached(self, tmp_path):
        first = get_settings()
        with mock.patch.dict(os.environ, {"CHARTCORE_DIR": str(tmp_path / "other")}):
            assert get_settings() is first

    def test_reset_allows_re_resolution(self, tmp_path):
        first = get_settings()
        reset_settings()
        with mock.patch.dict(os.environ, {"CHARTCORE_DIR": str(tmp_path / "other")}):
            second = get_settings()
        assert second is not first
        assert second.data_dir == (tmp_path / "other").resolve()


class TestConfigure:
    def test_override_single_setting(self):
        settings = configure(gl_threshold=10)
        assert settings.gl_threshold == 10
        assert get_settings() is settings
        assert settings.max_display_points == 5_000

    def test_overrides_stack(self):
        configure(warn_on_redefine=False)
        configure(console_format="clean")
        settings = get_settings()
        assert settings.warn_on_redefine is False
        assert settings.console_format == "clean"

    def test_data_dir_accepts_string(self, tmp_path):
        settings = configure(data_dir=str(tmp_path / "x"))
        assert settings.data_dir == (tmp_path / "x").resolve()

    def test_unknown_setting_raises(self):
        with pytest.raises(TypeError):
            configure(colour="red")

    def test_invalid_value_keeps_previous_settings(self):
        before = get_settings()
        with pytest.raises(ValueError, match="max_display_points"):
            configure(max_display_points=0)
        assert get_settings() is before

    def test_from_mapping_ignores_missing_plotly_section(self, tmp_path):
        settings = Settings.from_mapping({"plotly": None}, tmp_path)
        assert settings.gl_threshold == 100_000


class TestHostApplicationModules:
    def test_host_config_and_rendering_modules_are_not_shadowed(self, tmp_path):
        app = tmp_path / "app"
        (app / "rendering").mkdir(parents=True)
        (app / "config.py").write_text("HOST_CONFIG = True\n")
        (app / "rendering" / "__init__.py").write_text("HOST_RENDERING = True\n")
        code = (
            "import chartcore, chartcore.rendering, config, rendering\n"
            "assert config.HOST_CONFIG\n"
            "assert rendering.HOST_RENDERING\n"
            "assert chartcore.get_settings().gl_threshold == 100000\n"
            "assert hasattr(chartcore.rendering, 'FigureTarget')\n"
        )
        repo_root = Path(__file__).resolve().parents[1]
        env = dict(os.environ, PYTHONPATH=str(repo_root), CHARTCORE_DIR=str(tmp_path / "data"))
        result = subprocess.run(
            [sys.executable, "-c", code], cwd=app, env=env, capture_output=True, text=True,
        )
        assert result.returncode == 0, result.stderr
