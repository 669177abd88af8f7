"""Tests for logging setup and startup."""

import json
import logging
import sys
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from src.errors import ConfigError


def _settings(**overrides):
    values = dict(
        log_level="INFO",
        log_format="text",
        log_file=None,
        target="example.com",
        is_url_target=False,
        ping_interval=300,
        telegram_configured=False,
        web_host="127.0.0.1",
        web_port=8080,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def restore_root_logger():
    handlers = list(logging.root.handlers)
    level = logging.root.level
    yield
    logging.root.handlers = handlers
    logging.root.setLevel(level)


def test_configure_logging_text(restore_root_logger):
    from src.main import configure_logging

    configure_logging(_settings(log_level="DEBUG"))

    assert len(logging.root.handlers) == 1
    assert logging.root.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_configure_logging_defaults_without_settings(restore_root_logger):
    from src.main import configure_logging

    configure_logging()

    assert len(logging.root.handlers) == 1
    assert logging.root.level == logging.INFO


def test_configure_logging_json_with_file(tmp_path, restore_root_logger):
    from src.main import configure_logging

    log_file = tmp_path / "logs" / "app.log"
    configure_logging(_settings(log_format="json", log_file=log_file))

    assert len(logging.root.handlers) == 2
    assert log_file.parent.is_dir()
    formatter = logging.root.handlers[0].formatter
    record = logging.LogRecord("src.test", logging.INFO, __file__, 1, "hello", None, None)
    output = formatter.format(record)
    assert '"service": "net-monitor-bot"' in output
    assert '"level": "INFO"' in output

    for handler in logging.root.handlers:
        handler.close()


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_returns_global_settings(self, monkeypatch):
        from src import config
        from src.main import load_settings

        monkeypatch.delenv("CONFIG_FILE", raising=False)
        assert load_settings() is config.settings

    def test_missing_explicit_config_file(self, tmp_path, monkeypatch):
        from src.main import load_settings

        monkeypatch.setenv("CONFIG_FILE", str(tmp_path / "missing.json"))

        with pytest.raises(ConfigError, match="not found"):
            load_settings()

    def test_invalid_config_value_becomes_config_error(self, tmp_path, monkeypatch):
        from src.main import load_settings

        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"ping_interval": "often"}))
        monkeypatch.setenv("CONFIG_FILE", str(config_file))
        monkeypatch.delitem(sys.modules, "src.config")

        with pytest.raises(ConfigError, match="invalid configuration"):
            load_settings()


def test_main_exits_on_missing_config(restore_root_logger):
    from src import main as main_module

    with patch.object(main_module, "load_settings", side_effect=ConfigError("config file not found")), \
         patch.object(main_module.uvicorn, "run") as run_mock:
        with pytest.raises(SystemExit) as exc_info:
            main_module.main()

    assert exc_info.value.code == 1
    run_mock.assert_not_called()


def test_main_logs_invalid_config_and_exits(tmp_path, monkeypatch, capsys, restore_root_logger):
    from src import main as main_module

    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"ping_interval": "often"}))
    monkeypatch.setenv("CONFIG_FILE", str(config_file))
    monkeypatch.delitem(sys.modules, "src.config")

    with patch.object(main_module.uvicorn, "run") as run_mock:
        with pytest.raises(SystemExit) as exc_info:
            main_module.main()

    assert exc_info.value.code == 1
    run_mock.assert_not_called()
    out = capsys.readouterr().out
    assert "CRITICAL" in out
    assert "Failed to load config" in out
    assert "ping_interval" in out


def test_main_runs_uvicorn(restore_root_logger):
    from src import main as main_module

    with patch.object(main_module, "load_settings", return_value=_settings(web_port=9090)), \
         patch.object(main_module.uvicorn, "run") as run_mock:
        main_module.main()

    assert run_mock.call_args.kwargs["port"] == 9090
