"""Messages exchanged between the runtime, the main model and the popup.

The model handles one message at a time.  Anything slow (provider calls)
runs inside a :data:`Command`, a zero-argument callable executed off the
update path whose return value, when not ``None``, is fed back into the
model as the next message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from cdnscli.models import DNSRecord, Zone


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class KeyPress:
    key: str    # Textual key name: "up", "enter", "ctrl+s", "a", ...


@dataclass(frozen=True)
class SpinnerTick:
    pass


@dataclass(frozen=True)
class ZonesLoaded:
    zones: list[Zone] = field(default_factory=list)


@dataclass(frozen=True)
class RecordsLoaded:
    zone: str
    records: list[DNSRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ReloadRequested:
    pass


@dataclass(frozen=True)
class RecordUpdated:
    zone: str
    record: DNSRecord
    previous_id: str = ""     # id before the update, when the provider reissues ids


@dataclass(frozen=True)
class RecordCreated:
    zone: str
    record: DNSRecord


@dataclass(frozen=True)
class ProviderFailed:
    operation: str      # "list zones", "load records", "update", "create"
    zone: str
    error: str


@dataclass(frozen=True)
class SwitchToRecords:
    pass


@dataclass(frozen=True)
class PopupSaved:
    fields: list[str]


@dataclass(frozen=True)
class NameServersSaved:
    servers: list[str]


@dataclass(frozen=True)
class PopupCancelled:
    pass


@dataclass(frozen=True)
class DeleteConfirmed:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Message = Union[
    Resize,
    KeyPress,
    SpinnerTick,
    ZonesLoaded,
    RecordsLoaded,
    ReloadRequested,
    RecordUpdated,
    RecordCreated,
    ProviderFailed,
    SwitchToRecords,
    PopupSaved,
    NameServersSaved,
    PopupCancelled,
    DeleteConfirmed,
    Quit,
]

Command = Callable[[], Optional[Message]]


@dataclass(frozen=True)
class Emit:
    """Command that yields a ready message.

    The runtime dispatches these inline, before the next key is read,
    instead of handing them to a worker thread.
    """
    msg: Message

    def __call__(self) -> Message:
        return self.msg


def emit(msg: Message) -> Command:
    """Command that immediately yields *msg*."""
    return Emit(msg)
