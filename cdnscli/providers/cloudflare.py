"""Cloudflare DNS provider for cdnscli.

Uses the Cloudflare v4 REST API to manage zones and DNS records.
Authentication is via a scoped API token (Bearer token) or the legacy
global API key + account e-mail pair.

This module intentionally uses only the Python standard library
(urllib.request, json, ssl) to avoid adding external dependencies.
"""

from __future__ import annotations

import json
import logging
import ssl
import threading
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
from cdnscli.providers.base import Provider, ProviderError

logger = logging.getLogger(__name__)


class CloudflareError(ProviderError):
    """Cloudflare API error."""
    pass


class CloudflareProvider(Provider):
    """Cloudflare DNS provider.

    Constructor parameters:
      api_token: A Cloudflare API token (``Authorization: Bearer <token>``).
      api_key, email: Legacy global API key credentials, used when no
          token is given.
      default_timeout: Request timeout in seconds when a call passes none.
    """

    BASE_URL = "https://api.cloudflare.com/client/v4"

    def __init__(
        self,
        api_token: str = "",
        api_key: str = "",
        email: str = "",
        default_timeout: float = 30.0,
    ):
        if not api_token and not (api_key and email):
            raise CloudflareError("api_token or api_key + email is required")
        self._api_token = api_token
        self._api_key = api_key
        self._email = email
        self._default_timeout = default_timeout
        self._ssl_ctx = ssl.create_default_context()
        # zone name -> zone id; provider calls run on worker threads
        self._zone_ids: dict[str, str] = {}
        self._zone_ids_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Zones
    # ------------------------------------------------------------------

    def list_zones(self, timeout: Optional[float] = None) -> list[Zone]:
        """List all zones accessible to the credentials (paginated)."""
        return self._list_zones("", timeout)

    def list_zones_by_name(self, name: str, timeout: Optional[float] = None) -> list[Zone]:
        return self._list_zones(name, timeout)

    def _list_zones(self, name: str, timeout: Optional[float]) -> list[Zone]:
        zones: list[Zone] = []
        page = 1

        while True:
            query = {"per_page": 50, "page": page}
            if name:
                query["name"] = name
            resp = self._request("GET", f"/zones?{urllib.parse.urlencode(query)}", timeout=timeout)
            result_list = resp.get("result", [])
            if not result_list:
                break

            for zone in result_list:
                zones.append(Zone(
                    id=zone["id"],
                    name=zone["name"],
                    name_servers=list(zone.get("name_servers", [])),
                    status=zone.get("status", "unknown"),
                ))

            result_info = resp.get("result_info", {})
            if page >= result_info.get("total_pages", 1):
                break
            page += 1

        with self._zone_ids_lock:
            for zone in zones:
                self._zone_ids[zone.name] = zone.id
        return zones

    def zone_id_by_name(self, zone_name: str, timeout: Optional[float] = None) -> str:
        """Resolve a zone name to its Cloudflare zone ID."""
        with self._zone_ids_lock:
            zone_id = self._zone_ids.get(zone_name)
        if zone_id:
            return zone_id
        zones = self.list_zones_by_name(zone_name, timeout=timeout)
        for zone in zones:
            if zone.name == zone_name:
                return zone.id
        raise CloudflareError(f"zone {zone_name!r} not found")

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def list_records(
        self, params: ListDNSRecordsParams, timeout: Optional[float] = None
    ) -> list[DNSRecord]:
        """List all DNS records in a zone.

        Paginates through ``GET /zones/{zone_id}/dns_records?per_page=100``.
        Record names are returned as absolute names, the way the API
        reports them.
        """
        zone_id = self.zone_id_by_name(params.zone_name, timeout=timeout)
        records: list[DNSRecord] = []
        page = 1

        while True:
            resp = self._request(
                "GET",
                f"/zones/{zone_id}/dns_records?per_page=100&page={page}",
                timeout=timeout,
            )
            result_list = resp.get("result", [])
            if not result_list:
                break

            records.extend(self._to_record(rec) for rec in result_list)

            result_info = resp.get("result_info", {})
            if page >= result_info.get("total_pages", 1):
                break
            page += 1

        return records

    def add_rr(
        self, zone: str, params: CreateDNSRecordParams, timeout: Optional[float] = None
    ) -> DNSRecord:
        """Create a DNS record via ``POST /zones/{zone_id}/dns_records``."""
        zone_id = params.zone_id or self.zone_id_by_name(zone, timeout=timeout)
        body = {
            "type": params.type,
            "name": params.name,
            "content": params.content,
            "ttl": params.ttl,
            "proxied": params.proxied,
        }
        resp = self._request("POST", f"/zones/{zone_id}/dns_records", data=body, timeout=timeout)
        return self._to_record(resp.get("result", {}))

    def update_rr(
        self, zone: str, rr: DNSRecord, timeout: Optional[float] = None
    ) -> DNSRecord:
        """Update a record via ``PATCH /zones/{zone_id}/dns_records/{id}``."""
        if not rr.id:
            raise CloudflareError(f"cannot update record {rr.name!r} without an ID")
        zone_id = self.zone_id_by_name(zone, timeout=timeout)
        body = {
            "type": rr.type,
            "name": rr.name,
            "content": rr.content,
            "ttl": rr.ttl,
            "proxied": rr.proxied,
        }
        resp = self._request(
            "PATCH", f"/zones/{zone_id}/dns_records/{rr.id}", data=body, timeout=timeout,
        )
        return self._to_record(resp.get("result", {}))

    def delete_rr(self, zone: str, rr: DNSRecord, timeout: Optional[float] = None) -> None:
        """Delete a record via ``DELETE /zones/{zone_id}/dns_records/{id}``."""
        if not rr.id:
            raise CloudflareError(f"cannot delete record {rr.name!r} without an ID")
        zone_id = self.zone_id_by_name(zone, timeout=timeout)
        self._request("DELETE", f"/zones/{zone_id}/dns_records/{rr.id}", timeout=timeout)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_record(rec: dict) -> DNSRecord:
        return DNSRecord(
            id=rec.get("id", ""),
            name=rec.get("name", ""),
            ttl=int(rec.get("ttl", 1)),
            type=rec.get("type", ""),
            proxied=bool(rec.get("proxied", False)),
            content=rec.get("content", ""),
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        else:
            headers["X-Auth-Key"] = self._api_key
            headers["X-Auth-Email"] = self._email
        return headers

    def _request(
        self,
        method: str,
        path: str,
        data: dict | None = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Make an authenticated API request to Cloudflare.

        Raises:
          CloudflareError: On HTTP errors, malformed responses, or API
              errors (``success == false``).
        """
        url = f"{self.BASE_URL}{path}"

        body_bytes: bytes | None = None
        if data is not None:
            body_bytes = json.dumps(data).encode("utf-8")

        req = urllib.request.Request(
            url,
            data=body_bytes,
            headers=self._headers(),
            method=method,
        )

        logger.debug("Cloudflare %s %s", method, path)
        try:
            with urllib.request.urlopen(
                req, context=self._ssl_ctx, timeout=timeout or self._default_timeout,
            ) as resp:
                resp_body = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            # Try to extract Cloudflare error details from the response body
            error_body = ""
            try:
                error_body = e.read().decode("utf-8")
            except OSError:
                pass

            cf_message = _format_errors(error_body)
            if cf_message:
                raise CloudflareError(
                    f"Cloudflare API error (HTTP {e.code}): {cf_message}"
                )
            raise CloudflareError(
                f"Cloudflare API error (HTTP {e.code}): {error_body or e.reason}"
            )
        except urllib.error.URLError as e:
            raise CloudflareError(f"Failed to connect to Cloudflare API: {e.reason}")
        except (OSError, ValueError) as e:
            raise CloudflareError(f"Cloudflare API request failed: {e}")

        if not resp_body:
            return {}

        try:
            result = json.loads(resp_body)
        except json.JSONDecodeError as e:
            raise CloudflareError(f"Invalid JSON response from Cloudflare: {e}")

        # Check for API-level errors
        if isinstance(result, dict) and not result.get("success", True):
            messages = _format_errors(resp_body)
            if messages:
                raise CloudflareError(f"Cloudflare API error: {messages}")
            raise CloudflareError("Cloudflare API returned success=false with no details")

        return result


def _format_errors(body: str) -> str:
    """Join the ``errors[]`` array of a Cloudflare response into one line."""
    if not body:
        return ""
    try:
        errors = json.loads(body).get("errors", [])
    except (json.JSONDecodeError, AttributeError):
        return ""
    return "; ".join(
        f"[{err.get('code', '?')}] {err.get('message', 'Unknown error')}"
        for err in errors
    )
