"""Data models for cdnscli."""

from dataclasses import dataclass, field


@dataclass
class Zone:
    id: str
    name: str
    name_servers: list[str] = field(default_factory=list)
    status: str = ""


@dataclass
class DNSRecord:
    """A single DNS resource record."""
    id: str = ""
    name: str = ""      # e.g. "www.example.com"
    ttl: int = 0        # seconds; Cloudflare uses 1 for "auto"
    type: str = ""      # e.g. "A", "AAAA", "CNAME", "TXT"
    proxied: bool = False
    content: str = ""


@dataclass
class CreateDNSRecordParams:
    name: str
    ttl: int
    type: str
    proxied: bool
    content: str
    zone_name: str = ""
    zone_id: str = ""


@dataclass
class ListDNSRecordsParams:
    zone_name: str
