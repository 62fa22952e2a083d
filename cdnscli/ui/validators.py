"""Input validation for the record and nameserver editors."""

from __future__ import annotations

import ipaddress
import re

SUPPORTED_TYPES = ["A", "AAAA", "CNAME", "TXT", "MX", "NS", "SRV", "CAA"]

_LABEL = r"[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?"
HOSTNAME_RE = re.compile(rf"{_LABEL}(?:\.{_LABEL})*\.?", re.IGNORECASE)


def is_hostname(value: str) -> bool:
    """RFC 1123 hostname: dot-separated 1-63 char labels, optional trailing dot."""
    if not value or len(value) > 253:
        return False
    return HOSTNAME_RE.fullmatch(value) is not None


def is_number(value: str) -> bool:
    return bool(value) and all("0" <= ch <= "9" for ch in value)


def is_ipv4(value: str) -> bool:
    """IPv4 literal, including the IPv4-mapped IPv6 form (``::ffff:a.b.c.d``)."""
    try:
        ip = ipaddress.ip_address(value)
    except ValueError:
        return False
    if ip.version == 4:
        return True
    return ip.ipv4_mapped is not None


def is_ipv6(value: str) -> bool:
    """IPv6 literal that is not also expressible as IPv4."""
    try:
        ip = ipaddress.ip_address(value)
    except ValueError:
        return False
    return ip.version == 6 and ip.ipv4_mapped is None


def validate_input(field_name: str, value: str, rr_type: str) -> str:
    """Return an error message for *value*, or ``""`` when it is acceptable."""
    field_name = field_name.lower()
    if field_name == "ttl":
        if not is_number(value):
            return "TTL must be a number in seconds (e.g. 60, 300, 1800)"
    elif field_name == "name":
        if not is_hostname(value):
            return "Name must be a valid hostname"
    elif field_name == "content":
        rr_type = rr_type.upper()
        if rr_type == "A" and not is_ipv4(value):
            return "Content must be a valid IPv4 address for A record"
        if rr_type == "AAAA" and not is_ipv6(value):
            return "Content must be a valid IPv6 address for AAAA record"
        if rr_type in ("CNAME", "NS", "MX") and not is_hostname(value):
            return "Content must be a valid hostname"
        # TXT, SRV, CAA: free-form
    return ""


def text_hint(field_name: str, rr_type: str) -> str:
    """Context hint shown under the text editor."""
    field_name = field_name.lower()
    if field_name == "ttl":
        return "TTL in seconds, e.g. 60, 300, 1800"
    if field_name == "name":
        return "Record name (hostname), e.g. www or api.example.com"
    if field_name == "content":
        return {
            "A": "IPv4 address, e.g. 203.0.113.10",
            "AAAA": "IPv6 address, e.g. 2001:db8::1",
            "CNAME": "Canonical hostname, e.g. target.example.com",
            "MX": "Mail exchanger hostname, e.g. mail.example.com",
            "NS": "Nameserver hostname, e.g. ns1.example.com",
        }.get(rr_type.upper(), "Value for record content")
    return ""
