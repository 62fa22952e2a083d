"""DNS providers for cdnscli and the registry that builds them from config."""

from __future__ import annotations

import logging
from typing import Callable

from cdnscli.config import Config, ProviderConfig
from cdnscli.providers.base import (
    Provider,
    ProviderCredentialsError,
    ProviderError,
    ProviderNotFoundError,
    ProviderTypeNotSupportedError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)

TYPE_CLOUDFLARE = "cloudflare"
TYPE_REGRU = "regru"

DISPLAY_NAMES = {
    TYPE_CLOUDFLARE: "Cloudflare",
    TYPE_REGRU: "Reg.ru",
}


def display_name(provider_type: str, custom: str = "") -> str:
    """Human-readable provider name; *custom* wins when given."""
    if custom:
        return custom
    return DISPLAY_NAMES.get(provider_type, provider_type)


def _create_cloudflare(cfg: ProviderConfig, timeout: float) -> Provider:
    from cdnscli.providers.cloudflare import CloudflareProvider

    token = cfg.credential("api_token")
    key = cfg.credential("api_key")
    email = cfg.credential("email")
    if not token and not (key and email):
        raise ProviderCredentialsError(
            TYPE_CLOUDFLARE, "need either api_token or api_key + email"
        )
    return CloudflareProvider(api_token=token, api_key=key, email=email, default_timeout=timeout)


def _create_regru(cfg: ProviderConfig, timeout: float) -> Provider:
    from cdnscli.providers.regru import RegRuProvider

    username = cfg.credential("username")
    password = cfg.credential("password")
    if not username:
        raise ProviderCredentialsError(
            TYPE_REGRU, "username is required but not provided in credentials"
        )
    if not password:
        raise ProviderCredentialsError(
            TYPE_REGRU, "password is required but not provided in credentials"
        )
    return RegRuProvider(username=username, password=password, default_timeout=timeout)


class ProviderRegistry:
    """Maps provider types to factories.

    Built once at program start by :func:`default_registry` and passed to
    whoever needs to create providers.
    """

    def __init__(self) -> None:
        self._factories: dict[str, Callable[[ProviderConfig, float], Provider]] = {}

    def register(self, provider_type: str, factory: Callable[[ProviderConfig, float], Provider]) -> None:
        self._factories[provider_type] = factory

    def supported_types(self) -> list[str]:
        return sorted(self._factories)

    def create(self, name: str, config: Config) -> Provider:
        """Create the provider configured under *name* (or the default one)."""
        cfg = config.get_provider(name)
        factory = self._factories.get(cfg.type.lower())
        if factory is None:
            raise ProviderTypeNotSupportedError(cfg.type, self.supported_types())
        logger.debug("Creating %s provider %r", cfg.type, name or config.default_provider)
        return factory(cfg, config.client_timeout)


def default_registry() -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register(TYPE_CLOUDFLARE, _create_cloudflare)
    registry.register(TYPE_REGRU, _create_regru)
    return registry


__all__ = [
    "Provider",
    "ProviderError",
    "ProviderNotFoundError",
    "ProviderTypeNotSupportedError",
    "ProviderCredentialsError",
    "RecordNotFoundError",
    "ProviderRegistry",
    "default_registry",
    "display_name",
]
