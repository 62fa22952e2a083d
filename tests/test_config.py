import textwrap

import pytest

from cdnscli.config import Config, ConfigError, ProviderConfig, _parse_duration
from cdnscli.providers import ProviderNotFoundError


@pytest.fixture(autouse=True)
def no_env_token(monkeypatch):
    monkeypatch.delenv("CLOUDFLARE_API_TOKEN", raising=False)


def write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent(text))
    return path


def test_load_full_config(tmp_path):
    path = write(tmp_path, """
        default_provider: cf
        client-timeout: 15s
        output_format: json
        debug: true
        providers:
          cf:
            type: cloudflare
            credentials:
              api_token: abc
          ru:
            type: regru
            credentials:
              username: user
              password: secret
            options:
              display_name: Reg
    """)
    config = Config.load(path)

    assert config.default_provider == "cf"
    assert config.client_timeout == 15.0
    assert config.output_format == "json"
    assert config.debug is True
    assert set(config.providers) == {"cf", "ru"}
    assert config.providers["cf"].credential("api_token") == "abc"
    assert config.providers["ru"].options == {"display_name": "Reg"}
    config.validate()


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "CONFIG_PATHS", [tmp_path / "nope.yaml"])
    config = Config.load()
    assert config.providers == {}
    assert config.client_timeout == 10.0
    assert config.output_format == "text"


def test_env_token_adds_cloudflare_provider(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "CONFIG_PATHS", [tmp_path / "nope.yaml"])
    monkeypatch.setenv("CLOUDFLARE_API_TOKEN", "env-token")
    config = Config.load()
    assert config.get_provider().credential("api_token") == "env-token"


def test_find_config_file_uses_first_existing(tmp_path, monkeypatch):
    second = tmp_path / "b.yaml"
    second.write_text("{}")
    monkeypatch.setattr(Config, "CONFIG_PATHS", [tmp_path / "a.yaml", second])
    assert Config.find_config_file() == second


def test_invalid_yaml(tmp_path):
    path = write(tmp_path, "providers: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to read config file"):
        Config.load(path)


def test_non_mapping_config(tmp_path):
    path = write(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigError, match="must contain a mapping"):
        Config.load(path)


def test_invalid_timeout(tmp_path):
    path = write(tmp_path, "client_timeout: soon\n")
    with pytest.raises(ConfigError, match="Invalid client_timeout"):
        Config.load(path)


@pytest.mark.parametrize("value,expected", [
    (5, 5.0),
    (2.5, 2.5),
    ("10s", 10.0),
    ("500ms", 0.5),
    ("1m", 60.0),
    ("7", 7.0),
])
def test_parse_duration(value, expected):
    assert _parse_duration(value) == expected


def test_validate_collects_problems():
    config = Config(
        default_provider="missing",
        client_timeout=0,
        output_format="xml",
        providers={
            "cf": ProviderConfig(type="cloudflare", credentials={"api_key": "k"}),
            "ru": ProviderConfig(type="regru", credentials={}),
            "none": ProviderConfig(),
        },
    )
    with pytest.raises(ConfigError) as exc:
        config.validate()
    message = str(exc.value)
    assert message.startswith("configuration validation failed: ")
    assert "client_timeout: must be greater than 0" in message
    assert "output_format: must be one of: text, json, none (got: xml)" in message
    assert "providers.cf.credentials: need either api_token or api_key + email" in message
    assert "providers.ru.credentials.username: is required" in message
    assert "providers.ru.credentials.password: is required" in message
    assert "providers.none.type: provider type is required" in message
    assert "default_provider: provider 'missing' not found in providers list" in message


def test_key_and_email_is_valid_cloudflare():
    config = Config(providers={
        "cf": ProviderConfig(type="cloudflare",
                             credentials={"api_key": "k", "email": "me@example.com"}),
    })
    config.validate()


def test_get_provider_falls_back_to_single_provider():
    only = ProviderConfig(type="cloudflare", credentials={"api_token": "t"})
    assert Config(providers={"cf": only}).get_provider() is only


def test_get_provider_unknown():
    config = Config(providers={
        "a": ProviderConfig(type="cloudflare"),
        "b": ProviderConfig(type="regru"),
    })
    with pytest.raises(ProviderNotFoundError):
        config.get_provider()
    with pytest.raises(ProviderNotFoundError):
        config.get_provider("c")
