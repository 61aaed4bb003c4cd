from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Literal


EventKind = Literal[
    "Registered",
    "AddressChanged",
    "MetaChanged",
    "Unregistered",
    "NewOwner",
]

EVENT_KINDS: tuple[str, ...] = (
    "Registered",
    "AddressChanged",
    "MetaChanged",
    "Unregistered",
    "NewOwner",
)


@dataclass(frozen=True, kw_only=True)
class RegistryEvent:
    """Common envelope for everything appended to the event log.

    `seq` is 1-based and strictly increasing within one log. Events carry no
    wall-clock data so replaying the same operations yields equal events.
    """

    seq: int
    kind: EventKind


@dataclass(frozen=True, kw_only=True)
class Registered(RegistryEvent):
    kind: Literal["Registered"] = "Registered"
    id: int
    address: str
    name: str


@dataclass(frozen=True, kw_only=True)
class AddressChanged(RegistryEvent):
    kind: Literal["AddressChanged"] = "AddressChanged"
    id: int
    address: str


@dataclass(frozen=True, kw_only=True)
class MetaChanged(RegistryEvent):
    kind: Literal["MetaChanged"] = "MetaChanged"
    id: int
    key: str
    value: str


@dataclass(frozen=True, kw_only=True)
class Unregistered(RegistryEvent):
    kind: Literal["Unregistered"] = "Unregistered"
    id: int
    name: str


@dataclass(frozen=True, kw_only=True)
class NewOwner(RegistryEvent):
    kind: Literal["NewOwner"] = "NewOwner"
    old: str
    current: str


def event_to_dict(event: RegistryEvent) -> dict[str, Any]:
    out: dict[str, Any] = {"seq": int(event.seq), "kind": event.kind}
    if isinstance(event, Registered):
        out.update({"id": int(event.id), "address": event.address, "name": event.name})
    elif isinstance(event, AddressChanged):
        out.update({"id": int(event.id), "address": event.address})
    elif isinstance(event, MetaChanged):
        out.update({"id": int(event.id), "key": event.key, "value": event.value})
    elif isinstance(event, Unregistered):
        out.update({"id": int(event.id), "name": event.name})
    elif isinstance(event, NewOwner):
        out.update({"old": event.old, "current": event.current})
    return out


class EventLog:
    """Append-only event log.

    The registry appends while holding its own lock; the log keeps a lock of
    its own so observers can read from other threads.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._events: list[RegistryEvent] = []

    def next_seq(self) -> int:
        with self._lock:
            return len(self._events) + 1

    def append(self, event: RegistryEvent) -> RegistryEvent:
        with self._lock:
            expected = len(self._events) + 1
            if int(event.seq) != expected:
                raise ValueError(f"event seq {event.seq} out of order, expected {expected}")
            self._events.append(event)
            return event

    def revision(self) -> int:
        with self._lock:
            return len(self._events)

    def since(self, seq: int = 0, *, kind: str | None = None) -> list[RegistryEvent]:
        if kind is not None and kind not in EVENT_KINDS:
            raise ValueError(f"Unknown event kind: {kind}")
        with self._lock:
            start = max(int(seq), 0)
            out = self._events[start:]
            if kind is not None:
                out = [e for e in out if e.kind == kind]
            return list(out)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
