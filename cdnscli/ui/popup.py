"""Modal editor shown on top of the zone/record tables.

One :class:`Popup` instance runs one editing session.  It has three
top-level modes:

- ``form``: a list of named fields (record edit/create).  Enter opens a
  sub-editor chosen by the field: a true/false selector for boolean fields,
  a record type selector for ``Type``, free text for everything else.
- ``nslist``: two to four nameserver lines, each edited as free text.
- ``confirm``: a yes/no question.

The popup never touches the record cache.  It reports the outcome by
returning a command that yields :class:`PopupSaved`,
:class:`NameServersSaved`, :class:`DeleteConfirmed` or
:class:`PopupCancelled`, and flips :attr:`Popup.active` to ``False``.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.cells import cell_len

from cdnscli.ui.messages import (
    Command,
    DeleteConfirmed,
    KeyPress,
    NameServersSaved,
    PopupCancelled,
    PopupSaved,
    emit,
)
from cdnscli.ui.render import box, join_vertical, overlay, place
from cdnscli.ui.validators import (
    SUPPORTED_TYPES,
    is_hostname,
    text_hint,
    validate_input,
)

logger = logging.getLogger(__name__)

MODE_FORM = "form"
MODE_NSLIST = "nslist"
MODE_CONFIRM = "confirm"

# Values of Popup.state
STATE_INACTIVE = "inactive"
STATE_FIELD_FORM = "field-form"
STATE_TEXT_EDIT = "text-edit"
STATE_BOOL_SELECT = "bool-select"
STATE_TYPE_SELECT = "type-select"
STATE_NSLIST_EDIT = "nslist-edit"
STATE_CONFIRM = "confirm"

BOOL_FIELDS = ("proxied", "enabled", "active")

MIN_NAMESERVERS = 2
MAX_NAMESERVERS = 4

MIN_WIDTH = 30
SELECT_WIDTH = 20
TEXT_WIDTH = 40

FORM_MENU = [
    "[↑/↓/←/→] Navigate",
    "[Enter] Edit field",
    "[Ctrl+S] Save",
    "[Esc] Exit edit / cancel selection",
]
NSLIST_MENU = [
    "[↑/↓] Move",
    "[Enter] Edit",
    "[Ctrl+D] Delete",
    "[Ctrl+S] Save",
    "[Esc] Cancel",
    f"(max {MAX_NAMESERVERS} NS)",
]
SELECT_HELP = "[↑/↓] Move  [Enter] Apply  [Esc] Cancel"
TEXT_HELP = "[Enter] Apply  [Esc] Cancel"
CONFIRM_HELP = "[←/→] Move  [Enter] Confirm  [Esc] Cancel"
NAMESERVER_HINT = "Nameserver hostname, e.g. ns1.example.com"

_SUB_TEXT = "text"
_SUB_BOOL = "bool"
_SUB_TYPE = "type"


class Popup:
    """State machine for a modal editor.

    Use the :meth:`form`, :meth:`nameservers` and :meth:`confirm`
    constructors rather than calling ``Popup()`` directly.
    """

    def __init__(self, mode: str, title: str):
        self.mode = mode
        self.title = title
        self.active = True

        # form mode
        self.column_names: list[str] = []
        self.fields: list[str] = []
        self.cursor = 0
        self.char_pos = 0

        # nslist mode
        self.list_values: list[str] = []
        self.list_cursor = 0

        # confirm mode: 0 => Yes, 1 => No
        self.confirm_index = 0

        # sub-editors
        self._sub: Optional[str] = None
        self.bool_index = 0     # 0 => true, 1 => false
        self.type_index = 0
        self.text_buf = ""
        self.text_err = ""

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def form(cls, column_names: list[str], fields: list[str], title: str) -> "Popup":
        popup = cls(MODE_FORM, title)
        popup.column_names = list(column_names)
        popup.fields = list(fields)
        return popup

    @classmethod
    def nameservers(cls, initial: list[str], title: str) -> "Popup":
        if len(initial) > MAX_NAMESERVERS:
            raise ValueError(
                f"at most {MAX_NAMESERVERS} nameservers can be edited, got {len(initial)}"
            )
        popup = cls(MODE_NSLIST, title)
        popup.list_values = list(initial)
        popup._pad_list()
        return popup

    @classmethod
    def confirm(cls, title: str) -> "Popup":
        return cls(MODE_CONFIRM, title)

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> str:
        if not self.active:
            return STATE_INACTIVE
        if self.mode == MODE_CONFIRM:
            return STATE_CONFIRM
        if self.mode == MODE_NSLIST:
            return STATE_TEXT_EDIT if self._sub == _SUB_TEXT else STATE_NSLIST_EDIT
        return {
            _SUB_TEXT: STATE_TEXT_EDIT,
            _SUB_BOOL: STATE_BOOL_SELECT,
            _SUB_TYPE: STATE_TYPE_SELECT,
        }.get(self._sub, STATE_FIELD_FORM)

    def is_bool_field(self, index: int) -> bool:
        if not 0 <= index < len(self.column_names):
            return False
        return self.column_names[index].lower() in BOOL_FIELDS

    def is_type_field(self, index: int) -> bool:
        if not 0 <= index < len(self.column_names):
            return False
        return self.column_names[index].lower() == "type"

    def current_type(self) -> str:
        """Record type currently entered in the ``Type`` field, if any."""
        for idx, name in enumerate(self.column_names):
            if name.lower() == "type" and idx < len(self.fields):
                return self.fields[idx]
        return ""

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, msg) -> list[Command]:
        if not self.active or not isinstance(msg, KeyPress):
            return []
        key = msg.key

        if self.mode == MODE_NSLIST:
            if self._sub == _SUB_TEXT:
                self._update_ns_text(key)
                return []
            return self._update_nslist(key)
        if self.mode == MODE_CONFIRM:
            return self._update_confirm(key)

        if self._sub == _SUB_TEXT:
            self._update_field_text(key)
            return []
        if self._sub == _SUB_TYPE:
            self._update_type_select(key)
            return []
        if self._sub == _SUB_BOOL and self.is_bool_field(self.cursor):
            self._update_bool_select(key)
            return []
        return self._update_form(key)

    def _update_form(self, key: str) -> list[Command]:
        if not self.fields:
            if key in ("escape", "ctrl+s"):
                return self._finish(PopupCancelled() if key == "escape" else PopupSaved([]))
            return []

        if key in ("tab", "down"):
            self.cursor = (self.cursor + 1) % len(self.fields)
            self.char_pos = len(self.fields[self.cursor])
        elif key in ("shift+tab", "up"):
            self.cursor = (self.cursor - 1) % len(self.fields)
            self.char_pos = len(self.fields[self.cursor])
        elif key == "left":
            if self.char_pos > 0:
                self.char_pos -= 1
        elif key == "right":
            if self.char_pos < len(self.fields[self.cursor]):
                self.char_pos += 1
        elif key == "enter":
            self._open_field_editor()
        elif key == "ctrl+s":
            return self._finish(PopupSaved(list(self.fields)))
        elif key == "escape":
            return self._finish(PopupCancelled())
        return []

    def _open_field_editor(self) -> None:
        value = self.fields[self.cursor]
        if self.is_bool_field(self.cursor):
            self._sub = _SUB_BOOL
            self.bool_index = 0 if value.lower() == "true" else 1
        elif self.is_type_field(self.cursor):
            self._sub = _SUB_TYPE
            current = value.upper()
            self.type_index = SUPPORTED_TYPES.index(current) if current in SUPPORTED_TYPES else 0
        else:
            self._sub = _SUB_TEXT
            self.text_buf = value
            self.text_err = ""

    def _update_bool_select(self, key: str) -> None:
        if key in ("left", "up"):
            self.bool_index = 0
        elif key in ("right", "down"):
            self.bool_index = 1
        elif key == "enter":
            self.fields[self.cursor] = "true" if self.bool_index == 0 else "false"
            self.char_pos = len(self.fields[self.cursor])
            self._sub = None
        elif key == "escape":
            self._sub = None

    def _update_type_select(self, key: str) -> None:
        if key == "up":
            if self.type_index > 0:
                self.type_index -= 1
        elif key == "down":
            if self.type_index < len(SUPPORTED_TYPES) - 1:
                self.type_index += 1
        elif key == "enter":
            self.fields[self.cursor] = SUPPORTED_TYPES[self.type_index]
            self.char_pos = len(self.fields[self.cursor])
            self._sub = None
        elif key == "escape":
            self._sub = None

    def _update_field_text(self, key: str) -> None:
        if key == "enter":
            field_name = self.column_names[self.cursor]
            error = validate_input(field_name, self.text_buf, self.current_type())
            if error:
                self.text_err = error
                return
            self.fields[self.cursor] = self.text_buf
            self.char_pos = len(self.text_buf)
            self._close_text()
        elif key == "escape":
            self._close_text()
        else:
            self._edit_buffer(key)

    def _update_nslist(self, key: str) -> list[Command]:
        if key == "up":
            if self.list_cursor > 0:
                self.list_cursor -= 1
        elif key == "down":
            if self.list_cursor < len(self.list_values) - 1:
                self.list_cursor += 1
            elif len(self.list_values) < MAX_NAMESERVERS:
                # moving past the last line opens a new one
                self.list_values.append("")
                self.list_cursor += 1
        elif key == "enter":
            self._sub = _SUB_TEXT
            self.text_buf = self.list_values[self.list_cursor]
            self.text_err = ""
        elif key == "ctrl+d":
            if len(self.list_values) > MIN_NAMESERVERS:
                self._delete_line()
        elif key == "ctrl+s":
            servers = [v.strip() for v in self.list_values if v.strip()]
            return self._finish(NameServersSaved(servers))
        elif key == "escape":
            return self._finish(PopupCancelled())
        return []

    def _update_ns_text(self, key: str) -> None:
        if key == "enter":
            value = self.text_buf.strip()
            if value and not is_hostname(value):
                self.text_err = "Name server must be a valid hostname"
                return
            if not value and len(self.list_values) > MIN_NAMESERVERS:
                self._delete_line()
            else:
                self.list_values[self.list_cursor] = value
            self._close_text()
        elif key == "escape":
            self._close_text()
        else:
            self._edit_buffer(key)

    def _update_confirm(self, key: str) -> list[Command]:
        if key in ("left", "up"):
            self.confirm_index = 0
        elif key in ("right", "down"):
            self.confirm_index = 1
        elif key == "enter":
            if self.confirm_index == 0:
                return self._finish(DeleteConfirmed())
            return self._finish(PopupCancelled())
        elif key == "escape":
            return self._finish(PopupCancelled())
        return []

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _edit_buffer(self, key: str) -> None:
        if key in ("backspace", "ctrl+h"):
            self.text_buf = self.text_buf[:-1]
        elif key == "space":
            self.text_buf += " "
        elif len(key) == 1 and key.isprintable():
            self.text_buf += key
        # arrows, delete and other named keys are ignored

    def _close_text(self) -> None:
        self._sub = None
        self.text_buf = ""
        self.text_err = ""

    def _delete_line(self) -> None:
        del self.list_values[self.list_cursor]
        if self.list_cursor >= len(self.list_values) and self.list_cursor > 0:
            self.list_cursor -= 1
        self._pad_list()

    def _pad_list(self) -> None:
        while len(self.list_values) < MIN_NAMESERVERS:
            self.list_values.append("")

    def _finish(self, result) -> list[Command]:
        self.active = False
        self._sub = None
        logger.debug("Popup %r finished with %s", self.title, type(result).__name__)
        return [emit(result)]

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def view(self) -> str:
        if not self.active:
            return ""
        if self.mode == MODE_NSLIST:
            base = self._view_list()
            if self._sub == _SUB_TEXT:
                return overlay(self._view_text(), base)
            return base
        if self.mode == MODE_CONFIRM:
            return self._view_confirm()

        base = self._view_form()
        if self._sub == _SUB_BOOL and self.is_bool_field(self.cursor):
            return overlay(self._view_bool(), base)
        if self._sub == _SUB_TEXT:
            return overlay(self._view_text(), base)
        if self._sub == _SUB_TYPE:
            return overlay(self._view_type(), base)
        return base

    def _framed(self, lines: list[str], help_line: str) -> str:
        """Title, body and help line in a bordered box at least MIN_WIDTH wide."""
        title = f"--- {self.title} ---"
        width = max([cell_len(title), cell_len(help_line)] + [cell_len(line) for line in lines])
        width = max(width, MIN_WIDTH)
        content = join_vertical(
            place(title, width),
            "\n".join(lines),
            " ",
            help_line,
        )
        return box(content, width=width)

    def _view_form(self) -> str:
        lines = []
        for i, value in enumerate(self.fields):
            prefix = " > " if i == self.cursor else "   "
            lines.append(f"{prefix}{self.column_names[i]}: {value}")
        return self._framed(lines, " | ".join(FORM_MENU))

    def _view_list(self) -> str:
        lines = []
        for i, value in enumerate(self.list_values):
            prefix = " > " if i == self.list_cursor else "   "
            lines.append(f"{prefix}ns{i + 1}: {value}")
        return self._framed(lines, " | ".join(NSLIST_MENU))

    @staticmethod
    def _choices(options: list[str], selected: int) -> list[str]:
        return [
            ("> " if i == selected else "  ") + option
            for i, option in enumerate(options)
        ]

    def _view_bool(self) -> str:
        body = join_vertical(
            place("Select value", SELECT_WIDTH),
            *self._choices(["true", "false"], self.bool_index),
            SELECT_HELP,
        )
        return box(body, width=SELECT_WIDTH)

    def _view_type(self) -> str:
        body = join_vertical(
            place("Select type", SELECT_WIDTH),
            *self._choices(SUPPORTED_TYPES, self.type_index),
            SELECT_HELP,
        )
        return box(body, width=SELECT_WIDTH)

    def _view_text(self) -> str:
        if self.mode == MODE_NSLIST:
            hint = NAMESERVER_HINT
        else:
            name = self.column_names[self.cursor] if self.column_names else ""
            hint = text_hint(name, self.current_type())
        body = join_vertical(
            place("Edit value", TEXT_WIDTH),
            f"{self.text_buf}_",
            hint,
            self.text_err,
            TEXT_HELP,
        )
        return box(body, width=TEXT_WIDTH)

    def _view_confirm(self) -> str:
        body = join_vertical(
            place(f"--- {self.title} ---", TEXT_WIDTH),
            *self._choices(["Yes", "No"], self.confirm_index),
            CONFIRM_HELP,
        )
        return box(body, width=TEXT_WIDTH)
