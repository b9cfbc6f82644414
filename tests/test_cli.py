import json
import logging

import pytest

from notion_gallery import cli
from notion_gallery.config import AppConfig


@pytest.fixture
def restore_root_handlers():
    original_handlers = list(logging.getLogger().handlers)
    original_level = logging.getLogger().level
    for handler in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(handler)
    yield
    for handler in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(handler)
        handler.close()
    for handler in original_handlers:
        logging.getLogger().addHandler(handler)
    logging.getLogger().setLevel(original_level)


def test_configure_logging_defaults_to_console_only(restore_root_handlers):
    cli.configure_logging("INFO")

    handlers = logging.getLogger().handlers
    assert any(isinstance(handler, logging.StreamHandler) for handler in handlers)
    assert not any(isinstance(handler, logging.FileHandler) for handler in handlers)


def test_configure_logging_with_log_file_creates_file_handler(restore_root_handlers, tmp_path):
    log_path = tmp_path / "nested" / "custom.log"
    cli.configure_logging("INFO", str(log_path))

    assert log_path.exists()
    handlers = logging.getLogger().handlers
    assert any(isinstance(handler, logging.FileHandler) for handler in handlers)


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        cli.configure_logging("LOUD")


def test_main_serves_with_cli_overrides(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setenv("NOTION_TOKEN", "secret_abc")
    monkeypatch.setenv("ALLOWED_DATABASE_IDS", "abc")

    captured = {}

    def fake_serve(service, settings, host, port):
        captured.update(service=service, settings=settings, host=host, port=port)

    monkeypatch.setattr(cli, "serve", fake_serve)

    exit_code = cli.main(["--host", "127.0.0.1", "--port", "9000"])

    assert exit_code == 0
    assert captured["host"] == "127.0.0.1"
    assert captured["port"] == 9000
    assert captured["service"].guard.allow_list == ["abc"]
    assert captured["service"].source.token == "secret_abc"


def test_main_loads_config_and_env_file(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setenv("ALLOWED_DATABASE_IDS", "")

    app_config = AppConfig(env_file="env.xml")
    app_config.feed.default_limit = 7
    monkeypatch.setattr(cli, "parse_app_config", lambda path: app_config)
    monkeypatch.setattr(cli, "parse_env_config", lambda path: {"ALLOWED_DATABASE_IDS": "x-y"})

    captured = {}
    monkeypatch.setattr(cli, "serve", lambda service, settings, host, port: captured.update(service=service))

    assert cli.main(["--config", "config.xml"]) == 0
    assert captured["service"].default_limit == 7
    assert captured["service"].guard.allow_list == ["x-y"]


def test_main_diagnose_prints_report_without_token(monkeypatch, capsys):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setenv("NOTION_TOKEN", "secret_abc")
    monkeypatch.setenv("ALLOWED_DATABASE_IDS", "*")
    monkeypatch.setattr(cli, "serve", lambda *args: pytest.fail("should not serve"))

    assert cli.main(["--diagnose", "ab-cd"]) == 0

    output = capsys.readouterr().out
    report = json.loads(output)
    assert report["db"]["normalized"] == "abcd"
    assert report["env"]["allowedAny"] is True
    assert "secret_abc" not in output


def test_main_returns_error_for_missing_config(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    assert cli.main(["--config", str(tmp_path / "missing.xml")]) == 1
