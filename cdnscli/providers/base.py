"""Provider interface and error types shared by every DNS backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from cdnscli.models import (
    CreateDNSRecordParams,
    DNSRecord,
    ListDNSRecordsParams,
    Zone,
)


class ProviderError(Exception):
    """DNS provider API error."""
    pass


class RecordNotFoundError(ProviderError):
    """A record lookup by name found nothing."""

    def __init__(self, zone: str, name: str):
        super().__init__(f"record {name!r} not found in zone {zone!r}")
        self.zone = zone
        self.name = name


class ProviderNotFoundError(ProviderError):
    """No provider with the requested name is configured."""

    def __init__(self, name: str, available: list[str]):
        if available:
            msg = f"provider {name!r} not found (available providers: {', '.join(available)})"
        else:
            msg = f"provider {name!r} not found"
        super().__init__(msg)
        self.name = name
        self.available = available


class ProviderTypeNotSupportedError(ProviderError):
    def __init__(self, provider_type: str, supported: list[str]):
        super().__init__(
            f"unsupported provider type: {provider_type!r} "
            f"(supported types: {', '.join(supported)})"
        )
        self.provider_type = provider_type
        self.supported = supported


class ProviderCredentialsError(ProviderError):
    def __init__(self, provider_type: str, message: str):
        super().__init__(f"credentials error for provider type {provider_type!r}: {message}")
        self.provider_type = provider_type


class Provider(ABC):
    """Abstract DNS provider.

    Every call is a single blocking HTTP exchange bounded by *timeout*
    seconds.  Failures raise :class:`ProviderError`.
    """

    @abstractmethod
    def list_zones(self, timeout: Optional[float] = None) -> list[Zone]:
        """List the zones on the account."""

    @abstractmethod
    def list_zones_by_name(self, name: str, timeout: Optional[float] = None) -> list[Zone]:
        """List zones filtered by zone name."""

    @abstractmethod
    def list_records(
        self, params: ListDNSRecordsParams, timeout: Optional[float] = None
    ) -> list[DNSRecord]:
        """Return every record of the zone named in *params*."""

    @abstractmethod
    def add_rr(
        self, zone: str, params: CreateDNSRecordParams, timeout: Optional[float] = None
    ) -> DNSRecord:
        """Create a record and return it as stored by the provider."""

    @abstractmethod
    def update_rr(
        self, zone: str, rr: DNSRecord, timeout: Optional[float] = None
    ) -> DNSRecord:
        """Update an existing record and return the stored result."""

    @abstractmethod
    def delete_rr(self, zone: str, rr: DNSRecord, timeout: Optional[float] = None) -> None:
        """Delete a record."""

    def get_rr_by_name(
        self, zone: str, name: str, timeout: Optional[float] = None
    ) -> DNSRecord:
        """Return the first record of *zone* whose name is *name*."""
        for rr in self.list_records(ListDNSRecordsParams(zone_name=zone), timeout=timeout):
            if rr.name == name:
                return rr
        raise RecordNotFoundError(zone, name)
