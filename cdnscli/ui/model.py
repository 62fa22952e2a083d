"""Main screen state: zones table, records table, cache and popup.

The model is a plain state machine.  :meth:`Model.update` takes one message,
mutates the model and returns the commands to run next; :meth:`Model.view`
renders the whole screen as text.  Provider calls only ever happen inside
commands, so the model itself never blocks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from rich.spinner import Spinner

from cdnscli.models import CreateDNSRecordParams, DNSRecord, ListDNSRecordsParams
from cdnscli.providers.base import Provider
from cdnscli.ui.layout import (
    HEADER_HEIGHT,
    TableView,
    records_columns,
    table_height,
    zones_columns,
)
from cdnscli.ui.messages import (
    Command,
    DeleteConfirmed,
    KeyPress,
    Message,
    NameServersSaved,
    PopupCancelled,
    PopupSaved,
    ProviderFailed,
    Quit,
    RecordCreated,
    RecordsLoaded,
    RecordUpdated,
    ReloadRequested,
    Resize,
    SpinnerTick,
    SwitchToRecords,
    ZonesLoaded,
    emit,
)
from cdnscli.ui.popup import MAX_NAMESERVERS, Popup
from cdnscli.ui.render import join_vertical, overlay, pad, pluralize

logger = logging.getLogger(__name__)

RECORD_COLUMNS = ["Name", "TTL", "Type", "Proxied", "Content"]
NEW_RECORD_DEFAULTS = ["", "3600", "A", "false", ""]

EDIT_RECORD_TITLE = "Resource record editing"
CREATE_RECORD_TITLE = "Resource record creation"


@dataclass
class Styles:
    """Presentation settings handed to the model at construction."""
    title: str = "CloudFlare DNS CLI"
    check: str = "✓"
    cross: str = "𐄂"
    spinner: str = "point"


class Model:
    """Zones/records browser with a modal editor on top."""

    def __init__(self, provider: Provider, client_timeout: float = 10.0,
                 styles: Optional[Styles] = None):
        self.provider = provider
        self.client_timeout = client_timeout
        self.styles = styles or Styles()

        self.width = 0
        self.height = 0

        self.zones_table = TableView(zones_columns(0), focused=True)
        self.records_table = TableView(records_columns(0))

        # zone name => records, as last fetched (plus local edits)
        self.cache: dict[str, list[DNSRecord]] = {}

        self.popup: Optional[Popup] = None
        self.show_popup = False
        self.creating = False
        # Zone and record name the open record editor was opened on
        self._edit_zone = ""
        self._edit_name = ""

        self._pending = 0
        self.error = ""

        spinner = Spinner(self.styles.spinner)
        self._spinner_frames = list(spinner.frames)
        self.spinner_interval = spinner.interval / 1000
        self._spinner_frame = 0

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def loading(self) -> bool:
        return self._pending > 0

    def focused_table(self) -> TableView:
        if self.records_table.focused:
            return self.records_table
        return self.zones_table

    def selected_zone(self) -> str:
        row = self.zones_table.selected_row()
        return row[0] if row else ""

    def record_rows(self, zone: str) -> list[list[str]]:
        rows = []
        for rr in self.cache.get(zone, []):
            rows.append([
                rr.name,
                str(rr.ttl),
                rr.type,
                self.styles.check if rr.proxied else self.styles.cross,
                rr.content,
            ])
        return rows

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def init(self) -> list[Command]:
        self._pending += 1
        return [self._list_zones()]

    def _list_zones(self) -> Command:
        provider, timeout = self.provider, self.client_timeout

        def cmd() -> Message:
            try:
                zones = provider.list_zones(timeout=timeout)
            except Exception as e:
                return ProviderFailed("list zones", "", str(e))
            return ZonesLoaded(zones)
        return cmd

    def _fetch_records(self, zone: str) -> Command:
        provider, timeout = self.provider, self.client_timeout

        def cmd() -> Message:
            try:
                records = provider.list_records(
                    ListDNSRecordsParams(zone_name=zone), timeout=timeout
                )
            except Exception as e:
                return ProviderFailed("load records", zone, str(e))
            return RecordsLoaded(zone, records)
        return cmd

    def _create_record(self, zone: str, params: CreateDNSRecordParams) -> Command:
        provider, timeout = self.provider, self.client_timeout

        def cmd() -> Message:
            try:
                record = provider.add_rr(zone, params, timeout=timeout)
            except Exception as e:
                return ProviderFailed("create", zone, str(e))
            return RecordCreated(zone, record)
        return cmd

    def _update_record(self, zone: str, record: DNSRecord) -> Command:
        provider, timeout = self.provider, self.client_timeout

        def cmd() -> Message:
            try:
                stored = provider.update_rr(zone, record, timeout=timeout)
            except Exception as e:
                return ProviderFailed("update", zone, str(e))
            return RecordUpdated(zone, stored, previous_id=record.id)
        return cmd

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, msg: Message) -> list[Command]:
        if self.show_popup and self.popup is not None and isinstance(msg, KeyPress):
            cmds = self.popup.update(msg)
            if not self.popup.active:
                self.show_popup = False
            return cmds

        cmds: list[Command] = []

        if isinstance(msg, Resize):
            self._resize(msg.width, msg.height)
        elif isinstance(msg, KeyPress):
            self.error = ""
            cmds = self._handle_key(msg.key)
        elif isinstance(msg, SpinnerTick):
            if self.loading:
                self._spinner_frame = (self._spinner_frame + 1) % len(self._spinner_frames)
        elif isinstance(msg, ZonesLoaded):
            cmds = self._zones_loaded(msg)
        elif isinstance(msg, RecordsLoaded):
            self.cache[msg.zone] = list(msg.records)
            self._done()
            self.error = ""
        elif isinstance(msg, ReloadRequested):
            zone = self.selected_zone()
            if zone:
                self._pending += 1
                cmds = [self._fetch_records(zone)]
        elif isinstance(msg, RecordCreated):
            self.cache.setdefault(msg.zone, []).append(msg.record)
        elif isinstance(msg, RecordUpdated):
            self._record_updated(msg)
        elif isinstance(msg, ProviderFailed):
            logger.warning("%s %s failed: %s", msg.operation, msg.zone, msg.error)
            target = f"{msg.operation} {msg.zone}" if msg.zone else msg.operation
            self.error = f"Error: {target}: {msg.error}"
            if msg.operation in ("list zones", "load records"):
                self._done()
        elif isinstance(msg, SwitchToRecords):
            self._switch_table()
        elif isinstance(msg, PopupSaved):
            cmds = self._popup_saved(msg.fields)
        elif isinstance(msg, NameServersSaved):
            if self.zones_table.focused:
                row = self.zones_table.selected_row()
                if row is not None:
                    row[1] = ", ".join(msg.servers)
            self._close_popup()
        elif isinstance(msg, (PopupCancelled, DeleteConfirmed)):
            self._close_popup()

        self._sync_records()
        return cmds

    def _handle_key(self, key: str) -> list[Command]:
        if key in ("q", "ctrl+c"):
            return [emit(Quit())]
        if key in ("up", "k"):
            self.focused_table().move_up()
        elif key in ("down", "j"):
            self.focused_table().move_down()
        elif key == "escape":
            self._switch_table(records=False)
        elif key in ("enter", "space"):
            if self.zones_table.focused:
                return [emit(SwitchToRecords())]
            self._open_record_editor()
        elif key == "e":
            if self.records_table.focused:
                self._open_record_editor()
            else:
                self._open_nameserver_editor()
        elif key == "c":
            if self.records_table.focused:
                self._open_popup(
                    Popup.form(RECORD_COLUMNS, NEW_RECORD_DEFAULTS, CREATE_RECORD_TITLE)
                )
                self.creating = True
                self._edit_zone = self.selected_zone()
                self._edit_name = ""
        elif key == "r":
            return [emit(ReloadRequested())]
        return []

    def _zones_loaded(self, msg: ZonesLoaded) -> list[Command]:
        rows = [[z.name, ", ".join(z.name_servers)] for z in msg.zones]
        self.zones_table.set_rows(rows)
        self._switch_table(records=False)
        self._done()
        self.error = ""
        logger.debug("Loaded %d zones", len(msg.zones))

        self._pending += len(msg.zones)
        return [self._fetch_records(z.name) for z in msg.zones]

    def _record_updated(self, msg: RecordUpdated) -> None:
        target = msg.previous_id or msg.record.id
        records = self.cache.get(msg.zone, [])
        for idx, rr in enumerate(records):
            if target and rr.id == target:
                records[idx] = msg.record
                return

    def _popup_saved(self, fields: list[str]) -> list[Command]:
        creating = self.creating
        zone = self._edit_zone or self.selected_zone()
        name = self._edit_name
        self._close_popup()
        if len(fields) < len(RECORD_COLUMNS) or not zone:
            return []
        name_f, ttl_f, type_f, proxied_f, content_f = fields[:5]
        name = name or name_f
        ttl = _parse_ttl(ttl_f)
        proxied = proxied_f.lower() == "true"

        if creating:
            params = CreateDNSRecordParams(
                name=name_f, ttl=ttl, type=type_f, proxied=proxied,
                content=content_f, zone_name=zone,
            )
            return [self._create_record(zone, params)]

        for idx, rr in enumerate(self.cache.get(zone, [])):
            if rr.name == name:
                edited = replace(rr, name=name_f, ttl=ttl, type=type_f,
                                 proxied=proxied, content=content_f)
                self.cache[zone][idx] = edited
                return [self._update_record(zone, replace(edited))]
        logger.warning("Record %r not found in zone %s; nothing to update", name, zone)
        return []

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _done(self) -> None:
        if self._pending > 0:
            self._pending -= 1

    def _switch_table(self, records: bool = True) -> None:
        if records:
            self.zones_table.blur()
            self.records_table.focus()
        else:
            self.records_table.blur()
            self.zones_table.focus()

    def _sync_records(self) -> None:
        self.records_table.set_rows(self.record_rows(self.selected_zone()))

    def _resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        h = table_height(height)
        self.zones_table.set_height(h)
        self.records_table.set_height(h)
        zones_cols = zones_columns(width)
        self.zones_table.set_columns(zones_cols)
        self.records_table.set_columns(records_columns(width, zones_cols[0].width))

    def _open_popup(self, popup: Popup) -> None:
        self.popup = popup
        self.show_popup = True

    def _close_popup(self) -> None:
        self.popup = None
        self.show_popup = False
        self.creating = False
        self._edit_zone = ""
        self._edit_name = ""

    def _open_record_editor(self) -> None:
        row = self.records_table.selected_row()
        if row is None or len(row) < len(RECORD_COLUMNS):
            return
        fields = [
            row[0],
            row[1],
            row[2],
            "true" if row[3] == self.styles.check else "false",
            row[4],
        ]
        self._open_popup(Popup.form(RECORD_COLUMNS, fields, EDIT_RECORD_TITLE))
        self.creating = False
        self._edit_zone = self.selected_zone()
        self._edit_name = row[0]

    def _open_nameserver_editor(self) -> None:
        row = self.zones_table.selected_row()
        if row is None or len(row) < 2:
            return
        initial = [s.strip() for s in row[1].split(",") if s.strip()]
        if len(initial) > MAX_NAMESERVERS:
            # saving would drop the extra servers from the zone
            self.error = (
                f"Error: zone {row[0]} has {len(initial)} nameservers, "
                f"the editor handles at most {MAX_NAMESERVERS}"
            )
            return
        self._open_popup(Popup.nameservers(initial, f"Zone: {row[0]} — NameServers"))

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def status_line(self) -> str:
        if self.loading:
            return f"Loading {self._spinner_frames[self._spinner_frame]}"
        if self.error:
            return self.error
        if self.records_table.focused:
            return "Loaded " + pluralize(len(self.records_table.rows), "record", "records")
        return "Loaded " + pluralize(len(self.zones_table.rows), "zone", "zones")

    def menu_line(self) -> str:
        items = ["[↑/↓/←/→] Navigate", "[Enter] Show", "[Esc] Exit"]
        if self.records_table.focused:
            items.append("[c] Create")
        items.extend(["[e] Edit", "[r] Reload", "[q] Quit"])
        return " " + " | ".join(items)

    def header(self) -> str:
        lines = [""] * HEADER_HEIGHT
        lines[HEADER_HEIGHT // 2] = " " + self.styles.title
        return "\n".join(lines)

    def view(self) -> str:
        base = join_vertical(
            self.header(),
            self.focused_table().view(),
            " " + self.status_line(),
            self.menu_line(),
        )
        if self.width:
            base = "\n".join(pad(line, self.width) for line in base.split("\n"))
        if self.show_popup and self.popup is not None:
            return overlay(self.popup.view(), base)
        return base


def _parse_ttl(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0
