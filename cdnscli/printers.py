"""Output printers for the non-interactive commands.

``text`` renders Rich tables, ``json`` writes the records as JSON and
``none`` prints nothing (the exit status is the only output).
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from cdnscli.models import DNSRecord, Zone

FORMAT_TEXT = "text"
FORMAT_JSON = "json"
FORMAT_NONE = "none"


class Printer(ABC):
    """Prints command results in one output format."""

    @abstractmethod
    def zones_list(self, zones: list[Zone]) -> None: ...

    @abstractmethod
    def records_list(self, records: list[DNSRecord]) -> None: ...

    @abstractmethod
    def record_info(self, rr: DNSRecord) -> None: ...

    @abstractmethod
    def record_add(self, rr: DNSRecord) -> None: ...

    @abstractmethod
    def record_del(self, rr: DNSRecord) -> None: ...

    @abstractmethod
    def record_update(self, rr: DNSRecord) -> None: ...


class TextPrinter(Printer):

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def zones_list(self, zones: list[Zone]) -> None:
        table = Table(title="Zones")
        table.add_column("Name", style="bold")
        table.add_column("Name Servers")
        table.add_column("Status")
        table.add_column("ID", style="dim")
        for z in zones:
            table.add_row(Text(z.name), Text(", ".join(z.name_servers)), Text(z.status), Text(z.id))
        self.console.print(table)

    def records_list(self, records: list[DNSRecord]) -> None:
        table = Table(title="Records")
        table.add_column("Name", style="bold")
        table.add_column("TTL", justify="right")
        table.add_column("Type")
        table.add_column("Proxied")
        table.add_column("Content")
        table.add_column("ID", style="dim")
        for rr in records:
            table.add_row(
                Text(rr.name), str(rr.ttl), Text(rr.type),
                "yes" if rr.proxied else "no", Text(rr.content), Text(rr.id),
            )
        self.console.print(table)

    def record_info(self, rr: DNSRecord) -> None:
        grid = Table.grid(padding=(0, 2))
        grid.add_column(style="bold")
        grid.add_column()
        grid.add_row("ID", Text(rr.id))
        grid.add_row("Name", Text(rr.name))
        grid.add_row("Type", Text(rr.type))
        grid.add_row("TTL", str(rr.ttl))
        grid.add_row("Proxied", "yes" if rr.proxied else "no")
        grid.add_row("Content", Text(rr.content))
        self.console.print(grid)

    def record_add(self, rr: DNSRecord) -> None:
        self.console.print("[green]Created record[/green]")
        self.record_info(rr)

    def record_del(self, rr: DNSRecord) -> None:
        self.console.print("[red]Deleted record[/red]")
        self.record_info(rr)

    def record_update(self, rr: DNSRecord) -> None:
        self.console.print("[yellow]Updated record[/yellow]")
        self.record_info(rr)


class JSONPrinter(Printer):

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _dump(self, data) -> None:
        self.console.out(json.dumps(data, indent=2, ensure_ascii=False), highlight=False)

    def zones_list(self, zones: list[Zone]) -> None:
        self._dump([asdict(z) for z in zones])

    def records_list(self, records: list[DNSRecord]) -> None:
        self._dump([asdict(rr) for rr in records])

    def record_info(self, rr: DNSRecord) -> None:
        self._dump(asdict(rr))

    record_add = record_info
    record_del = record_info
    record_update = record_info


class NonePrinter(Printer):

    def zones_list(self, zones: list[Zone]) -> None:
        pass

    def records_list(self, records: list[DNSRecord]) -> None:
        pass

    def record_info(self, rr: DNSRecord) -> None:
        pass

    record_add = record_info
    record_del = record_info
    record_update = record_info


def new_printer(output_format: str, console: Optional[Console] = None) -> Printer:
    """Return the printer for *output_format* (``text``, ``json`` or ``none``)."""
    fmt = (output_format or FORMAT_TEXT).lower()
    if fmt == FORMAT_TEXT:
        return TextPrinter(console)
    if fmt == FORMAT_JSON:
        return JSONPrinter(console)
    if fmt == FORMAT_NONE:
        return NonePrinter()
    raise ValueError(f"unknown output format: {output_format!r}")
