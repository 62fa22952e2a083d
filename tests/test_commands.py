import io
import json

import pytest
from rich.console import Console

from conftest import FakeProvider

from cdnscli.__main__ import parse_args
from cdnscli.commands import qualify
from cdnscli.printers import JSONPrinter
from cdnscli.providers import RecordNotFoundError


@pytest.fixture
def fqdn_records(records):
    # providers report fully qualified names
    for zone, rrs in records.items():
        for rr in rrs:
            rr.name = f"{rr.name}.{zone}"
    return records


@pytest.fixture
def provider(zones, fqdn_records):
    return FakeProvider(zones=zones, records=fqdn_records)


def run(provider, *argv):
    args = parse_args(list(argv))
    console = Console(file=io.StringIO(), width=200, color_system=None)
    args.func(provider, args, JSONPrinter(console), 4.0)
    return json.loads(console.file.getvalue())


def test_qualify():
    assert qualify("www", "example.com") == "www.example.com"
    assert qualify("www.example.com", "example.com") == "www.example.com"
    assert qualify("www.example.com.", "example.com") == "www.example.com"
    assert qualify("@", "example.com") == "example.com"
    assert qualify("example.com", "example.com") == "example.com"


def test_no_subcommand_means_tui():
    args = parse_args([])
    assert args.command is None


def test_zone_list(provider):
    data = run(provider, "zone", "list")
    assert [z["name"] for z in data] == ["example.com", "test.com"]
    assert data[0]["name_servers"] == ["ns1.example.com", "ns2.example.com"]


def test_zone_list_by_name(provider):
    data = run(provider, "zone", "ls", "--name", "test.com")
    assert [z["name"] for z in data] == ["test.com"]
    assert provider.calls == [("list_zones_by_name", "test.com")]


def test_rr_list(provider):
    data = run(provider, "rr", "list", "-z", "example.com")
    assert [r["name"] for r in data] == ["www.example.com", "mail.example.com"]


def test_rr_info_accepts_relative_name(provider):
    data = run(provider, "rr", "info", "-z", "example.com", "-n", "www")
    assert data["id"] == "r1"
    assert data["content"] == "192.0.2.10"


def test_rr_info_missing_record(provider):
    with pytest.raises(RecordNotFoundError):
        run(provider, "rr", "info", "-z", "example.com", "-n", "nope")


def test_rr_add(provider):
    data = run(provider, "rr", "add", "-z", "example.com", "-n", "api", "-t", "cname",
               "-c", "lb.example.com", "-p")
    op, zone, params = provider.calls[-1]
    assert (op, zone) == ("add_rr", "example.com")
    assert params.name == "api.example.com"
    assert params.type == "CNAME"
    assert params.ttl == 1800
    assert params.proxied is True
    assert params.zone_name == "example.com"
    assert data["id"] == "new-1"


def test_rr_update_changes_only_given_fields(provider):
    data = run(provider, "rr", "update", "-z", "example.com", "-n", "www",
               "-c", "203.0.113.5", "--no-proxied", "-l", "60")
    op, zone, rr = provider.calls[-1]
    assert (op, zone) == ("update_rr", "example.com")
    assert (rr.id, rr.type, rr.ttl, rr.proxied, rr.content) == (
        "r1", "A", 60, False, "203.0.113.5"
    )
    assert data["content"] == "203.0.113.5"


def test_rr_update_keeps_ttl_and_proxied_by_default(provider):
    run(provider, "rr", "update", "-z", "test.com", "-n", "api", "-c", "lb2.test.com")
    rr = provider.calls[-1][2]
    assert (rr.ttl, rr.proxied, rr.type) == (1, True, "CNAME")


def test_rr_delete(provider):
    data = run(provider, "rr", "rm", "-z", "example.com", "-n", "mail.example.com")
    op, zone, rr = provider.calls[-1]
    assert (op, zone, rr.id) == ("delete_rr", "example.com", "r2")
    assert data["name"] == "mail.example.com"


def test_search_by_content(provider):
    data = run(provider, "search", "-z", "example.com", "-c", "mx.example.com")
    assert [r["id"] for r in data] == ["r2"]


def test_search_by_name_and_content(provider):
    assert run(provider, "search", "-z", "example.com", "-n", "www", "-c", "192.0.2.10")
    assert run(provider, "search", "-z", "example.com", "-n", "www", "-c", "192.0.2.99") == []


def test_search_needs_a_criterion():
    with pytest.raises(SystemExit) as exc:
        parse_args(["search", "-z", "example.com"])
    assert exc.value.code == 2


def test_rr_add_requires_content():
    with pytest.raises(SystemExit):
        parse_args(["rr", "add", "-z", "example.com", "-n", "www", "-t", "A"])

