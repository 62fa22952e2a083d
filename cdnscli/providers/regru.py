"""Reg.ru DNS provider for cdnscli.

Talks to the Reg.ru API v2 (``https://api.reg.ru/api/regru2``) with
username/password authentication and JSON input/output.  Reg.ru has no
record IDs and no in-place update, so records are identified by a
synthetic ``TYPE:subname:content`` ID and updates are remove + add.
Reg.ru does not proxy traffic; ``proxied`` is always false.
"""

from __future__ import annotations

import json
import logging
import ssl
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Optional

from cdnscli.models import (
    CreateDNSRecordParams,
    DNSRecord,
    ListDNSRecordsParams,
    Zone,
)
from cdnscli.providers.base import Provider, ProviderError, RecordNotFoundError

logger = logging.getLogger(__name__)

# Reg.ru does not report per-record TTLs
DEFAULT_TTL = 3600

# record type -> (API function, content parameter name)
_ADD_FUNCTIONS = {
    "A": ("zone/add_alias", "ipaddr"),
    "AAAA": ("zone/add_aaaa", "ipaddr"),
    "CNAME": ("zone/add_cname", "canonical_name"),
    "TXT": ("zone/add_txt", "text"),
    "MX": ("zone/add_mx", "mail_server"),
    "NS": ("zone/add_ns", "dns_server"),
}


class RegRuError(ProviderError):
    """Reg.ru API error."""
    pass


class RegRuProvider(Provider):
    """Reg.ru DNS provider.

    Constructor parameters:
      username, password: Reg.ru account (or API) credentials.
      default_timeout: Request timeout in seconds when a call passes none.
    """

    BASE_URL = "https://api.reg.ru/api/regru2"

    def __init__(self, username: str, password: str, default_timeout: float = 30.0):
        if not username or not password:
            raise RegRuError("username and password are required")
        self._username = username
        self._password = password
        self._default_timeout = default_timeout
        self._ssl_ctx = ssl.create_default_context()

    # ------------------------------------------------------------------
    # Zones
    # ------------------------------------------------------------------

    def list_zones(self, timeout: Optional[float] = None) -> list[Zone]:
        """List the account's domains together with their nameservers."""
        answer = self._call("service/get_list", {"servtype": "domain"}, timeout=timeout)
        services = answer.get("services", [])
        zones = [
            Zone(
                id=str(svc.get("service_id", "")),
                name=svc.get("dname", ""),
                status=svc.get("state", ""),
            )
            for svc in services
            if svc.get("dname")
        ]
        if not zones:
            return zones

        nss_answer = self._call(
            "domain/get_nss",
            {"domains": [{"dname": z.name} for z in zones]},
            timeout=timeout,
        )
        by_name = {
            d.get("dname", ""): [ns.get("ns", "") for ns in d.get("nss", []) if ns.get("ns")]
            for d in nss_answer.get("domains", [])
        }
        for zone in zones:
            zone.name_servers = by_name.get(zone.name, [])
        return zones

    def list_zones_by_name(self, name: str, timeout: Optional[float] = None) -> list[Zone]:
        return [z for z in self.list_zones(timeout=timeout) if z.name == name]

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def list_records(
        self, params: ListDNSRecordsParams, timeout: Optional[float] = None
    ) -> list[DNSRecord]:
        zone = params.zone_name
        answer = self._call(
            "zone/get_resource_records",
            {"domains": [{"dname": zone}]},
            timeout=timeout,
        )
        records: list[DNSRecord] = []
        for domain in answer.get("domains", []):
            if domain.get("result", "success") != "success":
                raise RegRuError(
                    f"Reg.ru API error for {zone}: "
                    f"{domain.get('error_text', domain.get('error_code', 'unknown error'))}"
                )
            for rr in domain.get("rrs", []):
                subname = rr.get("subname", "@")
                rtype = rr.get("rectype", "")
                content = rr.get("content", "")
                records.append(DNSRecord(
                    id=_record_id(rtype, subname, content),
                    name=_absolute_name(subname, zone),
                    ttl=DEFAULT_TTL,
                    type=rtype,
                    proxied=False,
                    content=content,
                ))
        return records

    def add_rr(
        self, zone: str, params: CreateDNSRecordParams, timeout: Optional[float] = None
    ) -> DNSRecord:
        rtype = params.type.upper()
        if rtype not in _ADD_FUNCTIONS:
            raise RegRuError(f"record type {rtype} is not supported by Reg.ru provider")
        func, content_key = _ADD_FUNCTIONS[rtype]
        subname = _relative_name(params.name, zone)
        payload: dict[str, Any] = {
            "domains": [{"dname": zone}],
            "subdomain": subname,
            content_key: params.content,
        }
        if rtype == "MX":
            payload["priority"] = 10
        self._call(func, payload, timeout=timeout)
        return DNSRecord(
            id=_record_id(rtype, subname, params.content),
            name=_absolute_name(subname, zone),
            ttl=params.ttl,
            type=rtype,
            proxied=False,
            content=params.content,
        )

    def update_rr(
        self, zone: str, rr: DNSRecord, timeout: Optional[float] = None
    ) -> DNSRecord:
        """Replace a record: remove the one identified by ``rr.id``, add ``rr``."""
        old = self._find_by_id(zone, rr.id, timeout) if rr.id else None
        if old is None:
            raise RecordNotFoundError(zone, rr.name)
        self.delete_rr(zone, old, timeout=timeout)
        return self.add_rr(zone, CreateDNSRecordParams(
            name=rr.name,
            ttl=rr.ttl,
            type=rr.type,
            proxied=False,
            content=rr.content,
            zone_name=zone,
        ), timeout=timeout)

    def delete_rr(self, zone: str, rr: DNSRecord, timeout: Optional[float] = None) -> None:
        self._call(
            "zone/remove_record",
            {
                "domains": [{"dname": zone}],
                "subdomain": _relative_name(rr.name, zone),
                "record_type": rr.type,
                "content": rr.content,
            },
            timeout=timeout,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find_by_id(self, zone: str, record_id: str, timeout: Optional[float]) -> DNSRecord | None:
        for rec in self.list_records(ListDNSRecordsParams(zone_name=zone), timeout=timeout):
            if rec.id == record_id:
                return rec
        return None

    def _call(self, func: str, input_data: dict, timeout: Optional[float] = None) -> dict:
        """POST to an API function and return its ``answer`` dict.

        Raises:
          RegRuError: On HTTP errors, malformed responses, or
              ``result != "success"``.
        """
        url = f"{self.BASE_URL}/{func}"
        form = urllib.parse.urlencode({
            "username": self._username,
            "password": self._password,
            "input_format": "json",
            "output_format": "json",
            "input_data": json.dumps(input_data),
        }).encode("utf-8")
        req = urllib.request.Request(
            url,
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            method="POST",
        )

        logger.debug("Reg.ru %s", func)
        try:
            with urllib.request.urlopen(
                req, context=self._ssl_ctx, timeout=timeout or self._default_timeout,
            ) as resp:
                body = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            raise RegRuError(f"Reg.ru API error (HTTP {e.code}): {e.reason}")
        except urllib.error.URLError as e:
            raise RegRuError(f"Failed to connect to Reg.ru API: {e.reason}")
        except (OSError, ValueError) as e:
            raise RegRuError(f"Reg.ru API request failed: {e}")

        try:
            result = json.loads(body)
        except json.JSONDecodeError as e:
            raise RegRuError(f"Invalid JSON response from Reg.ru: {e}")

        if result.get("result") != "success":
            raise RegRuError(
                f"Reg.ru API error: [{result.get('error_code', '?')}] "
                f"{result.get('error_text', 'Unknown error')}"
            )
        return result.get("answer", {})


def _record_id(rtype: str, subname: str, content: str) -> str:
    return f"{rtype}:{subname}:{content}"


def _absolute_name(subname: str, zone: str) -> str:
    if not subname or subname == "@":
        return zone
    return f"{subname}.{zone}"


def _relative_name(name: str, zone: str) -> str:
    """Convert a record name to the Reg.ru ``subdomain`` form.

    Examples::

        _relative_name("www.example.com", "example.com")  -> "www"
        _relative_name("example.com.", "example.com")     -> "@"
        _relative_name("www", "example.com")              -> "www"
    """
    name = name.rstrip(".")
    if not name or name == zone:
        return "@"
    suffix = f".{zone}"
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return name
