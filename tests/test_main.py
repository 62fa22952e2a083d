import json
import logging
import textwrap

import pytest

import cdnscli.__main__ as entry
import cdnscli.providers
from conftest import FakeProvider

from cdnscli.app import CdnsApp


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.delenv("CLOUDFLARE_API_TOKEN", raising=False)
    monkeypatch.setattr(entry, "LOG_FILE", tmp_path / "logs" / "cdnscli.log")
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent("""
        default_provider: cf
        client_timeout: 10s
        providers:
          cf:
            type: cloudflare
            credentials:
              api_token: abc
    """))
    return path


@pytest.fixture
def launched(monkeypatch):
    apps = []
    monkeypatch.setattr(CdnsApp, "run", lambda self: apps.append(self))
    return apps


@pytest.fixture
def fake_registry(monkeypatch, provider):
    class Registry:
        def create(self, name, config):
            return provider

    monkeypatch.setattr(cdnscli.providers, "default_registry", Registry)
    return provider


def test_setup_logging_writes_to_file_only(tmp_path, capsys):
    log_file = tmp_path / "out" / "cdnscli.log"
    entry.setup_logging(True, log_file)

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], logging.FileHandler)
    assert root.level == logging.DEBUG

    logging.getLogger("cdnscli.test").debug("hello from the log")
    root.handlers[0].flush()
    assert "hello from the log" in log_file.read_text()
    captured = capsys.readouterr()
    assert captured.out == captured.err == ""


def test_setup_logging_defaults_to_warning():
    entry.setup_logging(False)
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert root.handlers[0].baseFilename == str(entry.LOG_FILE)


def test_config_error_exits_with_status_1(tmp_path, capsys, launched):
    path = tmp_path / "bad.yaml"
    path.write_text("client_timeout: -1\n")
    with pytest.raises(SystemExit) as exc:
        entry.main(["--config", str(path)])
    assert exc.value.code == 1
    assert "Configuration Error" in capsys.readouterr().err
    assert launched == []


def test_unknown_provider_exits_with_status_1(config_file, capsys, launched):
    with pytest.raises(SystemExit) as exc:
        entry.main(["--config", str(config_file), "--provider", "nope"])
    assert exc.value.code == 1
    assert "Provider Error" in capsys.readouterr().err
    assert launched == []


def test_tui_gets_flag_overrides(config_file, launched):
    entry.main(["--config", str(config_file), "--timeout", "3", "--debug"])

    assert len(launched) == 1
    app = launched[0]
    assert app.model.client_timeout == 3.0
    assert app.model.styles.title == "Cloudflare DNS CLI"
    assert logging.getLogger().level == logging.DEBUG


def test_tui_uses_config_timeout(config_file, launched):
    entry.main(["--config", str(config_file)])
    assert launched[0].model.client_timeout == 10.0
    assert logging.getLogger().level == logging.WARNING


def test_subcommand_prints_json(config_file, fake_registry, capsys, launched):
    entry.main(["--config", str(config_file), "-o", "json", "zone", "list"])
    data = json.loads(capsys.readouterr().out)
    assert [z["name"] for z in data] == ["example.com", "test.com"]
    assert launched == []


def test_subcommand_none_output(config_file, fake_registry, capsys):
    entry.main(["--config", str(config_file), "-o", "none", "rr", "list", "-z", "example.com"])
    assert capsys.readouterr().out == ""
    assert fake_registry.calls == [("list_records", "example.com")]


def test_subcommand_provider_error_exits_with_status_1(config_file, fake_registry, capsys):
    fake_registry.fail.add("list_zones")
    with pytest.raises(SystemExit) as exc:
        entry.main(["--config", str(config_file), "zone", "list"])
    assert exc.value.code == 1
    assert "list_zones failed" in capsys.readouterr().err


def test_output_format_from_config(tmp_path, fake_registry, capsys):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent("""
        output_format: json
        providers:
          cf:
            type: cloudflare
            credentials:
              api_token: abc
    """))
    entry.main(["--config", str(path), "rr", "list", "-z", "test.com"])
    assert [r["id"] for r in json.loads(capsys.readouterr().out)] == ["r3"]
