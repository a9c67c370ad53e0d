"""Tests for shellhow/config/settings.py — Settings and config_path."""

from pathlib import Path

from shellhow.config.settings import get_settings


class TestSettings:

    def test_defaults(self, override_settings, monkeypatch):
        monkeypatch.delenv("AI_SHELL_CONFIG_DIR", raising=False)
        override_settings()
        s = get_settings()
        assert s.log_level == "WARNING"
        assert s.log_file == ""
        assert s.request_timeout == 60.0
        assert s.connect_timeout == 10.0

    def test_default_config_path_under_home(self, override_settings, monkeypatch, tmp_path):
        monkeypatch.delenv("AI_SHELL_CONFIG_DIR", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        override_settings()
        assert get_settings().config_path == tmp_path / ".ai-shell-js"

    def test_config_dir_override(self, override_settings, tmp_path):
        override_settings(CONFIG_DIR=str(tmp_path / "custom"))
        assert get_settings().config_path == tmp_path / "custom"

    def test_config_dir_expands_user(self, override_settings):
        override_settings(CONFIG_DIR="~/shell-config")
        assert get_settings().config_path == Path.home() / "shell-config"

    def test_env_override(self, override_settings):
        override_settings(LOG_LEVEL="DEBUG", REQUEST_TIMEOUT="5", CONNECT_TIMEOUT="2.5")
        s = get_settings()
        assert s.log_level == "DEBUG"
        assert s.request_timeout == 5.0
        assert s.connect_timeout == 2.5
