from __future__ import annotations

import copy
from collections import deque

import pytest

from cdnscli.models import DNSRecord, Zone
from cdnscli.providers.base import Provider, ProviderError


class FakeProvider(Provider):
    """In-memory provider recording every call."""

    def __init__(self, zones=None, records=None, fail=()):
        self.zones = zones or []
        self.records = records or {}
        self.fail = set(fail)
        self.calls = []
        self._next_id = 1

    def _call(self, op, *args):
        self.calls.append((op,) + args)
        if op in self.fail:
            raise ProviderError(f"{op} failed")

    def list_zones(self, timeout=None):
        self._call("list_zones")
        return copy.deepcopy(self.zones)

    def list_zones_by_name(self, name, timeout=None):
        self._call("list_zones_by_name", name)
        return [copy.deepcopy(z) for z in self.zones if z.name == name]

    def list_records(self, params, timeout=None):
        self._call("list_records", params.zone_name)
        return copy.deepcopy(self.records.get(params.zone_name, []))

    def add_rr(self, zone, params, timeout=None):
        self._call("add_rr", zone, params)
        record = DNSRecord(
            id=f"new-{self._next_id}",
            name=params.name,
            ttl=params.ttl,
            type=params.type,
            proxied=params.proxied,
            content=params.content,
        )
        self._next_id += 1
        self.records.setdefault(zone, []).append(record)
        return copy.deepcopy(record)

    def update_rr(self, zone, rr, timeout=None):
        self._call("update_rr", zone, rr)
        return copy.deepcopy(rr)

    def delete_rr(self, zone, rr, timeout=None):
        self._call("delete_rr", zone, rr)


def drain(model, cmds):
    """Run commands synchronously, feeding results back into *model*.

    Returns every message produced, in order.
    """
    queue = deque(cmds)
    seen = []
    while queue:
        msg = queue.popleft()()
        if msg is None:
            continue
        seen.append(msg)
        queue.extend(model.update(msg))
    return seen


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def zones():
    return [
        Zone(id="z1", name="example.com",
             name_servers=["ns1.example.com", "ns2.example.com"]),
        Zone(id="z2", name="test.com", name_servers=["ns1.test.com"]),
    ]


@pytest.fixture
def records():
    return {
        "example.com": [
            DNSRecord(id="r1", name="www", ttl=300, type="A",
                      proxied=False, content="192.0.2.10"),
            DNSRecord(id="r2", name="mail", ttl=3600, type="MX",
                      proxied=False, content="mx.example.com"),
        ],
        "test.com": [
            DNSRecord(id="r3", name="api", ttl=1, type="CNAME",
                      proxied=True, content="lb.test.com"),
        ],
    }


@pytest.fixture
def provider(zones, records):
    return FakeProvider(zones=zones, records=records)
