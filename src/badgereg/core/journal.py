"""Operation journal.

Every accepted mutating call is appended as one JSON line before its effects
are applied. A drain is written once its payout went through, with the amount
paid, and replays without paying out again. Replaying the lines in order
against a fresh registry built with the same admin and fee reproduces the
same state and the same events.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from .registry.service import BadgeRegistry

logger = logging.getLogger(__name__)

OPERATIONS = (
    "register",
    "set_address",
    "set_meta",
    "unregister",
    "set_owner",
    "set_fee",
    "drain",
)


@dataclass(frozen=True)
class JournalEntry:
    op: str
    caller: str
    args: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op, "caller": self.caller, "args": dict(self.args)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JournalEntry":
        op = str(data.get("op", ""))
        if op not in OPERATIONS:
            raise ValueError(f"Unknown journal operation: {op!r}")
        caller = data.get("caller")
        if not isinstance(caller, str) or not caller:
            raise ValueError("Journal entry is missing its caller")
        args = data.get("args") or {}
        if not isinstance(args, dict):
            raise ValueError("Journal entry args must be an object")
        return cls(op=op, caller=caller, args=dict(args))


class OperationJournal:
    """Append-only JSON-lines file of accepted operations."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, entry: JournalEntry) -> None:
        line = json.dumps(entry.to_dict(), sort_keys=True, ensure_ascii=False)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
                f.write("\n")
                f.flush()

    def entries(self) -> list[JournalEntry]:
        return load_journal(self.path)


def load_journal(path: str | Path) -> list[JournalEntry]:
    """Read a journal file. A missing file is an empty journal."""
    p = Path(path)
    if not p.exists():
        return []
    out: list[JournalEntry] = []
    with open(p, "r", encoding="utf-8") as f:
        for lineno, raw in enumerate(f, start=1):
            line = raw.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as ex:
                raise ValueError(f"{p}:{lineno}: invalid journal line") from ex
            if not isinstance(data, dict):
                raise ValueError(f"{p}:{lineno}: journal line must be an object")
            try:
                out.append(JournalEntry.from_dict(data))
            except ValueError as ex:
                raise ValueError(f"{p}:{lineno}: {ex}") from ex
    return out


def replay(entries: Iterable[JournalEntry], registry: "BadgeRegistry") -> int:
    """Re-apply journal entries in order. Returns the number applied.

    Any rejection propagates: a journal only ever holds accepted operations,
    so a failure here means the journal and the starting state disagree.
    """
    count = 0
    for entry in entries:
        a = entry.args
        if entry.op == "register":
            registry.register(a["address"], a["name"], a["paid"], caller=entry.caller)
        elif entry.op == "set_address":
            registry.set_address(a["id"], a["address"], caller=entry.caller)
        elif entry.op == "set_meta":
            registry.set_meta(a["id"], a["key"], a["value"], caller=entry.caller)
        elif entry.op == "unregister":
            registry.unregister(a["id"], caller=entry.caller)
        elif entry.op == "set_owner":
            registry.set_owner(a["owner"], caller=entry.caller)
        elif entry.op == "set_fee":
            registry.set_fee(a["fee"], caller=entry.caller)
        elif entry.op == "drain":
            # The payout already happened when the entry was written.
            amount = a["amount"] if "amount" in a else registry.balance()
            registry.replay_drain(amount, caller=entry.caller)
        else:
            raise ValueError(f"Unknown journal operation: {entry.op!r}")
        count += 1
    logger.info("journal.replayed count=%d", count)
    return count
