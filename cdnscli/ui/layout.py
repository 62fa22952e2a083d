"""Table views and terminal-size driven column sizing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from cdnscli.ui.render import pad

HEADER_HEIGHT = 3
STATUS_HEIGHT = 1
MENU_HEIGHT = 1

# Each cell carries one space of padding on both sides
CELL_PADDING = 2

MIN_TABLE_HEIGHT = 3
DEFAULT_TABLE_HEIGHT = 35

ZONES_NAME_SHARE = 35       # percent of available width
ZONES_MIN_NAME = 12
ZONES_MIN_NS = 10
MIN_NAME = 8

RECORDS_MIN_CONTENT = 10


@dataclass
class Column:
    title: str
    width: int


@dataclass
class TableView:
    """A scrolling, cursor-driven table of string rows."""
    columns: list[Column]
    rows: list[list[str]] = field(default_factory=list)
    cursor: int = 0
    focused: bool = False
    height: int = DEFAULT_TABLE_HEIGHT
    _offset: int = 0

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def set_rows(self, rows: list[list[str]]) -> None:
        self.rows = rows
        if self.cursor > len(rows) - 1:
            self.cursor = max(0, len(rows) - 1)
        self._scroll_to_cursor()

    def set_columns(self, columns: list[Column]) -> None:
        self.columns = columns

    def set_height(self, height: int) -> None:
        self.height = max(1, height)
        self._scroll_to_cursor()

    def move_up(self, n: int = 1) -> None:
        self.cursor = max(0, self.cursor - n)
        self._scroll_to_cursor()

    def move_down(self, n: int = 1) -> None:
        self.cursor = max(0, min(self.cursor + n, len(self.rows) - 1))
        self._scroll_to_cursor()

    def selected_row(self) -> Optional[list[str]]:
        if 0 <= self.cursor < len(self.rows):
            return self.rows[self.cursor]
        return None

    def _scroll_to_cursor(self) -> None:
        if self.cursor < self._offset:
            self._offset = self.cursor
        elif self.cursor >= self._offset + self.height:
            self._offset = self.cursor - self.height + 1
        self._offset = max(0, min(self._offset, max(0, len(self.rows) - self.height)))

    def _render_row(self, cells: list[str], marker: str = " ") -> str:
        parts = []
        for i, col in enumerate(self.columns):
            value = cells[i] if i < len(cells) else ""
            lead = marker if i == 0 else " "
            parts.append(lead + pad(value, col.width) + " ")
        return "".join(parts)

    def view(self) -> str:
        lines = [self._render_row([c.title for c in self.columns])]
        visible = self.rows[self._offset:self._offset + self.height]
        for idx, row in enumerate(visible, start=self._offset):
            marker = ">" if idx == self.cursor and self.focused else " "
            lines.append(self._render_row(row, marker))
        # Keep the table body at a stable height
        lines.extend([""] * (self.height - len(visible)))
        return "\n".join(lines)


def table_height(total_height: int) -> int:
    """Rows left for a table between header, status bar and menu."""
    available = total_height - HEADER_HEIGHT - STATUS_HEIGHT - MENU_HEIGHT
    return max(available, MIN_TABLE_HEIGHT)


def zones_columns(width: int) -> list[Column]:
    """Name/NS columns splitting the width 35/65 with minimums."""
    available = max(width - CELL_PADDING * 2, 20)

    name_w = available * ZONES_NAME_SHARE // 100
    ns_w = available - name_w

    if name_w < ZONES_MIN_NAME:
        name_w = ZONES_MIN_NAME
        ns_w = available - name_w
    if ns_w < ZONES_MIN_NS:
        ns_w = ZONES_MIN_NS
        name_w = max(available - ns_w, MIN_NAME)

    return [Column("Name", name_w), Column("NS", ns_w)]


def records_columns(width: int, zone_name_width: int = ZONES_MIN_NAME) -> list[Column]:
    """Name/TTL/Type/Proxied/Content columns.

    Name mirrors the zones table's Name width so the first column does not
    jump when switching tables; Content takes what is left.
    """
    available = max(width - CELL_PADDING * 5, 40)

    ttl_w, type_w, proxied_w = 8, 8, 10
    name_w = zone_name_width

    remaining = available - (name_w + ttl_w + type_w + proxied_w)
    if remaining < 20:
        ttl_w, type_w, proxied_w = 6, 6, 8
        remaining = available - (name_w + ttl_w + type_w + proxied_w)

    content_w = remaining
    if content_w < RECORDS_MIN_CONTENT:
        if name_w > MIN_NAME:
            reduce = min(RECORDS_MIN_CONTENT - content_w, name_w - MIN_NAME)
            name_w -= reduce
            content_w = available - (name_w + ttl_w + type_w + proxied_w)
        if content_w < RECORDS_MIN_CONTENT:
            content_w = RECORDS_MIN_CONTENT

    return [
        Column("Name", name_w),
        Column("TTL", ttl_w),
        Column("Type", type_w),
        Column("Proxied", proxied_w),
        Column("Content", content_w),
    ]
