"""Non-interactive sub-commands.

``cdnscli zone list``, ``cdnscli rr list|info|add|update|delete`` and
``cdnscli search`` run one provider operation and print the result with
the configured :class:`~cdnscli.printers.Printer`.  Without a sub-command
cdnscli starts the TUI.
"""

from __future__ import annotations

import argparse
import logging

from cdnscli.models import CreateDNSRecordParams, DNSRecord, ListDNSRecordsParams
from cdnscli.printers import Printer
from cdnscli.providers.base import Provider

logger = logging.getLogger(__name__)

DEFAULT_TTL = 1800


def qualify(name: str, zone: str) -> str:
    """Turn a record name relative to *zone* into the full name."""
    name = name.strip().rstrip(".")
    if name in ("", "@"):
        return zone
    if name == zone or name.endswith("." + zone):
        return name
    return f"{name}.{zone}"


# ----------------------------------------------------------------------
# Handlers
# ----------------------------------------------------------------------

def zone_list(provider: Provider, args, printer: Printer, timeout: float) -> None:
    if args.name:
        zones = provider.list_zones_by_name(args.name, timeout=timeout)
    else:
        zones = provider.list_zones(timeout=timeout)
    printer.zones_list(zones)


def rr_list(provider: Provider, args, printer: Printer, timeout: float) -> None:
    records = provider.list_records(ListDNSRecordsParams(zone_name=args.zone), timeout=timeout)
    printer.records_list(records)


def rr_info(provider: Provider, args, printer: Printer, timeout: float) -> None:
    rr = provider.get_rr_by_name(args.zone, qualify(args.name, args.zone), timeout=timeout)
    printer.record_info(rr)


def rr_add(provider: Provider, args, printer: Printer, timeout: float) -> None:
    params = CreateDNSRecordParams(
        name=qualify(args.name, args.zone),
        ttl=args.ttl,
        type=args.type.upper(),
        proxied=args.proxied,
        content=args.content,
        zone_name=args.zone,
    )
    rr = provider.add_rr(args.zone, params, timeout=timeout)
    logger.info("Created %s record %s in %s", rr.type, rr.name, args.zone)
    printer.record_add(rr)


def rr_update(provider: Provider, args, printer: Printer, timeout: float) -> None:
    rr = provider.get_rr_by_name(args.zone, qualify(args.name, args.zone), timeout=timeout)
    rr.content = args.content
    if args.type:
        rr.type = args.type.upper()
    if args.ttl is not None:
        rr.ttl = args.ttl
    if args.proxied is not None:
        rr.proxied = args.proxied
    updated = provider.update_rr(args.zone, rr, timeout=timeout)
    logger.info("Updated record %s in %s", updated.name, args.zone)
    printer.record_update(updated)


def rr_delete(provider: Provider, args, printer: Printer, timeout: float) -> None:
    rr = provider.get_rr_by_name(args.zone, qualify(args.name, args.zone), timeout=timeout)
    provider.delete_rr(args.zone, rr, timeout=timeout)
    logger.info("Deleted record %s from %s", rr.name, args.zone)
    printer.record_del(rr)


def search(provider: Provider, args, printer: Printer, timeout: float) -> None:
    records = provider.list_records(ListDNSRecordsParams(zone_name=args.zone), timeout=timeout)
    printer.records_list([rr for rr in records if _matches(rr, args)])


def _matches(rr: DNSRecord, args) -> bool:
    if args.name and rr.name != qualify(args.name, args.zone):
        return False
    if args.content and rr.content != args.content:
        return False
    return True


# ----------------------------------------------------------------------
# Argument parsing
# ----------------------------------------------------------------------

def _zone_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-z", "--zone", required=True, help="zone name")


def _name_arg(parser: argparse.ArgumentParser, required: bool = True) -> None:
    parser.add_argument(
        "-n", "--name", required=required, default="",
        help="record name, relative to the zone or fully qualified",
    )


def add_subcommands(parser: argparse.ArgumentParser) -> None:
    """Attach the sub-command tree to the top-level *parser*."""
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    zone = sub.add_parser("zone", help="zone commands")
    zone_sub = zone.add_subparsers(dest="zone_command", metavar="COMMAND", required=True)
    p = zone_sub.add_parser("list", aliases=["ls"], help="list zones on the account")
    p.add_argument("-n", "--name", default="", help="name of zone to filter against")
    p.set_defaults(func=zone_list)

    rr = sub.add_parser("rr", help="resource record commands")
    rr_sub = rr.add_subparsers(dest="rr_command", metavar="COMMAND", required=True)

    p = rr_sub.add_parser("list", aliases=["ls"], help="list the records of a zone")
    _zone_arg(p)
    p.set_defaults(func=rr_list)

    p = rr_sub.add_parser("info", aliases=["details"], help="details for a single record")
    _zone_arg(p)
    _name_arg(p)
    p.set_defaults(func=rr_info)

    p = rr_sub.add_parser("add", aliases=["new", "create"], help="add a record to a zone")
    _zone_arg(p)
    _name_arg(p)
    p.add_argument("-t", "--type", required=True, help="record type (A, CNAME, ...)")
    p.add_argument("-c", "--content", required=True, help="IP address or domain name")
    p.add_argument("-l", "--ttl", type=int, default=DEFAULT_TTL,
                   help=f"time to live in seconds (default: {DEFAULT_TTL})")
    p.add_argument("-p", "--proxied", action="store_true", help="proxy through Cloudflare")
    p.set_defaults(func=rr_add)

    p = rr_sub.add_parser("update", aliases=["change", "patch"], help="update an existing record")
    _zone_arg(p)
    _name_arg(p)
    p.add_argument("-c", "--content", required=True, help="new content")
    p.add_argument("-t", "--type", default="", help="new record type")
    p.add_argument("-l", "--ttl", type=int, help="new time to live in seconds")
    p.add_argument("-p", "--proxied", action=argparse.BooleanOptionalAction, default=None,
                   help="proxy through Cloudflare")
    p.set_defaults(func=rr_update)

    p = rr_sub.add_parser("delete", aliases=["del", "rm", "remove"], help="delete a record")
    _zone_arg(p)
    _name_arg(p)
    p.set_defaults(func=rr_delete)

    p = sub.add_parser("search", help="search the records of a zone by name or content")
    _zone_arg(p)
    _name_arg(p, required=False)
    p.add_argument("-c", "--content", default="", help="content to search for")
    p.set_defaults(func=search)
