"""Tests for configuration parsing."""

import json

import pytest

from src import config as config_module
from src.config import Settings
from src.errors import ConfigError


class TestTargetValidation:
    """Tests for TARGET validation rules."""

    def test_accepts_hostname(self):
        settings = Settings(target="example.com")
        assert settings.target == "example.com"
        assert settings.is_url_target is False

    def test_allows_ipv4(self):
        settings = Settings(target="192.168.1.10")
        assert settings.target == "192.168.1.10"

    def test_accepts_url(self):
        settings = Settings(target="https://example.com/health?full=1&x=2")
        assert settings.is_url_target is True

    def test_strips_whitespace(self):
        assert Settings(target="  example.com ").target == "example.com"

    @pytest.mark.parametrize("target", [
        "example.com;rm -rf /",
        "$(reboot)",
        "host name",
        "",
        "a" * 254,
    ])
    def test_rejects_bad_hosts(self, target):
        with pytest.raises(ValueError):
            Settings(target=target)

    def test_rejects_url_without_host(self):
        with pytest.raises(ValueError):
            Settings(target="http://")


class TestPingInterval:
    """Tests for ping_interval defaults."""

    def test_default(self):
        assert Settings().ping_interval == 300

    def test_zero_falls_back_to_default(self):
        assert Settings(ping_interval=0).ping_interval == 300

    def test_explicit_value(self):
        assert Settings(ping_interval=60).ping_interval == 60

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            Settings(ping_interval=-5)

    def test_env_zero_falls_back(self, monkeypatch):
        monkeypatch.setenv("PING_INTERVAL", "0")
        assert Settings().ping_interval == 300


class TestTelegramConfigured:
    """Tests for telegram_configured property."""

    def test_configured_with_token_and_chat(self):
        settings = Settings(bot_token="123:abc", chat_id="42")
        assert settings.telegram_configured is True

    def test_missing_chat(self):
        assert Settings(bot_token="123:abc").telegram_configured is False

    def test_missing_token(self):
        assert Settings(chat_id="42").telegram_configured is False

    def test_numeric_chat_id_becomes_string(self):
        assert Settings(chat_id=-100123).chat_id == "-100123"


class TestSettingsOptions:
    """Tests for model-level settings options."""

    def test_unknown_keys_ignored(self):
        settings = Settings(unknown_key="value")
        assert not hasattr(settings, "unknown_key")
        assert Settings.model_config["extra"] == "ignore"
        assert Settings.model_config["env_file"] == ".env"

    def test_build_metadata_from_environment(self, monkeypatch):
        monkeypatch.setenv("APP_BUILD_DATE", "2025-01-01T00:00:00Z")
        monkeypatch.setenv("APP_GIT_COMMIT", "abc1234")

        settings = Settings()
        assert settings.app_build_date == "2025-01-01T00:00:00Z"
        assert settings.app_git_commit == "abc1234"

    def test_build_metadata_defaults(self, monkeypatch):
        monkeypatch.delenv("APP_BUILD_DATE", raising=False)
        monkeypatch.delenv("APP_GIT_COMMIT", raising=False)

        settings = Settings()
        assert settings.app_build_date is None
        assert settings.app_git_commit is None


class TestJsonConfigFile:
    """Tests for loading settings from a JSON config file."""

    def test_reads_config_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TARGET", raising=False)
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "target": "https://example.com",
            "bot_token": "123:abc",
            "chat_id": 987654,
            "ping_interval": 0,
        }))
        monkeypatch.setenv("CONFIG_FILE", str(path))

        settings = Settings()

        assert settings.target == "https://example.com"
        assert settings.bot_token == "123:abc"
        assert settings.chat_id == "987654"
        assert settings.ping_interval == 300
        assert settings.telegram_configured is True

    def test_env_overrides_config_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"target": "file.example.com", "ping_interval": 60}))
        monkeypatch.setenv("CONFIG_FILE", str(path))
        monkeypatch.setenv("PING_INTERVAL", "30")

        settings = Settings()

        assert settings.ping_interval == 30

    def test_missing_file_is_ignored_by_settings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONFIG_FILE", str(tmp_path / "missing.json"))
        assert Settings().ping_interval == 300

    def test_check_config_file_missing_explicit(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONFIG_FILE", str(tmp_path / "missing.json"))
        with pytest.raises(ConfigError):
            config_module.check_config_file()

    def test_check_config_file_present(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text("{}")
        monkeypatch.setenv("CONFIG_FILE", str(path))
        config_module.check_config_file()

    def test_check_config_file_unset(self, monkeypatch):
        monkeypatch.delenv("CONFIG_FILE", raising=False)
        config_module.check_config_file()


def test_config_file_path_default(monkeypatch):
    monkeypatch.delenv("CONFIG_FILE", raising=False)
    assert str(config_module.config_file_path()) == "config.json"
