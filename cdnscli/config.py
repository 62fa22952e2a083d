"""Configuration management for cdnscli."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_TIMEOUT = 10.0
DEFAULT_OUTPUT_FORMAT = "text"
OUTPUT_FORMATS = ("text", "json", "none")


class ConfigError(Exception):
    """Configuration error."""
    pass


@dataclass
class ProviderConfig:
    type: str = ""                                          # "cloudflare" or "regru"
    credentials: dict = field(default_factory=dict)         # api_token / api_key / email / username / password
    options: dict = field(default_factory=dict)

    def credential(self, key: str) -> str:
        """Return a credential accepting both ``api_token`` and ``api-token`` spellings."""
        value = self.credentials.get(key)
        if value is None:
            value = self.credentials.get(key.replace("_", "-"))
        return str(value).strip() if value is not None else ""

    def problems(self, name: str) -> list[str]:
        """Return a list of human-readable configuration problems."""
        problems: list[str] = []
        ptype = self.type.lower()
        if not ptype:
            problems.append(f"providers.{name}.type: provider type is required")
        elif ptype == "cloudflare":
            if not self.credential("api_token") and not (
                self.credential("api_key") and self.credential("email")
            ):
                problems.append(
                    f"providers.{name}.credentials: need either api_token "
                    "or api_key + email"
                )
        elif ptype == "regru":
            if not self.credential("username"):
                problems.append(f"providers.{name}.credentials.username: is required")
            if not self.credential("password"):
                problems.append(f"providers.{name}.credentials.password: is required")
        return problems


@dataclass
class Config:
    default_provider: str = ""
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    client_timeout: float = DEFAULT_CLIENT_TIMEOUT     # seconds, per provider request
    output_format: str = DEFAULT_OUTPUT_FORMAT
    debug: bool = False

    CONFIG_PATHS = [
        Path.home() / ".cdnscli.yaml",
        Path(".cdnscli.yaml"),
        Path.home() / ".config" / "cdnscli" / "config.yaml",
    ]

    @classmethod
    def find_config_file(cls) -> Optional[Path]:
        """Find the first existing config file."""
        for path in cls.CONFIG_PATHS:
            if path.exists():
                return path
        return None

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Load configuration from a YAML file.

        A missing file is not an error: the defaults are returned, with an
        implicit ``cloudflare`` provider when ``CLOUDFLARE_API_TOKEN`` is set.
        """
        if path is None:
            path = cls.find_config_file()

        data: dict[str, Any] = {}
        if path is not None:
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Failed to read config file {path}: {e}")
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {path} must contain a mapping")
            logger.debug("Loaded configuration from %s", path)

        config = cls._from_dict(data)

        if not config.providers:
            token = os.environ.get("CLOUDFLARE_API_TOKEN", "")
            if token:
                config.providers["cloudflare"] = ProviderConfig(
                    type="cloudflare", credentials={"api_token": token},
                )
                logger.debug("Using CLOUDFLARE_API_TOKEN from the environment")

        return config

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        config = cls()

        config.default_provider = str(_get(data, "default_provider", ""))
        config.output_format = str(_get(data, "output_format", DEFAULT_OUTPUT_FORMAT))
        config.debug = bool(_get(data, "debug", False))

        timeout = _get(data, "client_timeout", DEFAULT_CLIENT_TIMEOUT)
        try:
            config.client_timeout = _parse_duration(timeout)
        except ValueError:
            raise ConfigError(f"Invalid client_timeout value: {timeout!r}")

        # Parse providers section
        providers = data.get("providers") or {}
        if not isinstance(providers, dict):
            raise ConfigError("'providers' must be a mapping of name -> settings")
        for name, section in providers.items():
            section = section or {}
            config.providers[str(name)] = ProviderConfig(
                type=str(section.get("type", "")),
                credentials=dict(section.get("credentials") or {}),
                options=dict(section.get("options") or {}),
            )

        return config

    def validate(self) -> None:
        """Raise :class:`ConfigError` listing every problem found."""
        problems: list[str] = []

        if self.client_timeout <= 0:
            problems.append("client_timeout: must be greater than 0")

        if self.output_format and self.output_format.lower() not in OUTPUT_FORMATS:
            problems.append(
                f"output_format: must be one of: {', '.join(OUTPUT_FORMATS)} "
                f"(got: {self.output_format})"
            )

        for name, provider in self.providers.items():
            problems.extend(provider.problems(name))

        if self.default_provider and self.default_provider not in self.providers:
            problems.append(
                f"default_provider: provider {self.default_provider!r} "
                "not found in providers list"
            )

        if problems:
            raise ConfigError(
                "configuration validation failed: " + "; ".join(problems)
            )

    def get_provider(self, name: str = "") -> ProviderConfig:
        """Return the provider section by name, falling back to the default."""
        from cdnscli.providers.base import ProviderNotFoundError

        name = name or self.default_provider
        if not name and len(self.providers) == 1:
            name = next(iter(self.providers))
        if name not in self.providers:
            raise ProviderNotFoundError(name, sorted(self.providers))
        return self.providers[name]


def _get(data: dict[str, Any], key: str, default: Any) -> Any:
    """Look up *key* accepting both ``snake_case`` and ``dash-case`` spellings."""
    if key in data:
        return data[key]
    return data.get(key.replace("_", "-"), default)


def _parse_duration(value: Any) -> float:
    """Parse seconds given as a number or a ``"10s"`` / ``"500ms"`` / ``"1m"`` string."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = str(value).strip().lower()
    for suffix, factor in (("ms", 0.001), ("s", 1.0), ("m", 60.0)):
        if text.endswith(suffix):
            return float(text[: -len(suffix)]) * factor
    return float(text)
