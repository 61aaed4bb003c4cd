from __future__ import annotations

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any

from ..errors import (
    AddressTaken,
    AlreadyRegistered,
    BadgeRegError,
    InsufficientFee,
    InvalidInput,
    InvariantViolation,
    MetaNotFound,
    NotAdmin,
    NotOwner,
    RecordNotFound,
)
from ..events import (
    AddressChanged,
    EventLog,
    MetaChanged,
    NewOwner,
    Registered,
    RegistryEvent,
    Unregistered,
)
from ..journal import JournalEntry, OperationJournal, load_journal, replay
from ..records import (
    AdminState,
    Badge,
    normalize_amount,
    normalize_badge_id,
    normalize_meta_key,
    normalize_name,
    normalize_principal,
)
from ..treasury import AccountLedger, PayoutSink

logger = logging.getLogger(__name__)


class BadgeRegistry:
    """Badge registry engine.

    Every public method holds `_lock` for its whole duration, so calls are
    applied one at a time against a single consistent state. Mutations check
    every precondition first and only then journal, apply and emit, which
    keeps rejected calls free of side effects.

    Storage:
    - `_badges` is the arena; index = badge id, `None` marks a tombstone.
    - `_by_address` / `_by_name` hold exactly the active badges.
    - `_meta` is keyed by `(id, key)` and outlives unregistration.
    """

    def __init__(
        self,
        *,
        admin: str,
        fee: int,
        payouts: PayoutSink | None = None,
        journal: OperationJournal | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._badges: list[Badge | None] = []
        self._by_address: dict[str, int] = {}
        self._by_name: dict[str, int] = {}
        self._meta: dict[tuple[int, str], str] = {}
        self._active_count = 0
        self._admin = AdminState(
            owner=normalize_principal(admin, field="admin"),
            fee=normalize_amount(fee, field="fee"),
            balance=0,
        )
        self._events = EventLog()
        self.payouts: PayoutSink = payouts if payouts is not None else AccountLedger()
        self._journal = journal

    @classmethod
    def from_journal(
        cls,
        path: str | Path,
        *,
        admin: str,
        fee: int,
        payouts: PayoutSink | None = None,
    ) -> "BadgeRegistry":
        """Rebuild a registry from a journal file and keep appending to it."""
        reg = cls(admin=admin, fee=fee, payouts=payouts)
        entries = load_journal(path)
        with reg._lock:
            replay(entries, reg)
            reg._journal = OperationJournal(path)
        logger.info("registry.loaded journal=%s entries=%d", path, len(entries))
        return reg

    # ------------------------------------------------------------------
    # internal helpers (callers hold the lock)
    # ------------------------------------------------------------------

    @staticmethod
    def _rejected(op: str, exc: BadgeRegError) -> BadgeRegError:
        logger.debug("registry.rejected op=%s error=%s detail=%s", op, exc.code, exc)
        return exc

    def _require_active_locked(self, op: str, badge_id: int) -> Badge:
        if badge_id >= len(self._badges):
            raise self._rejected(op, RecordNotFound(f"Badge {badge_id} was never issued"))
        badge = self._badges[badge_id]
        if badge is None:
            raise self._rejected(op, RecordNotFound(f"Badge {badge_id} was unregistered"))
        return badge

    def _require_admin_locked(self, op: str, caller: str) -> None:
        if caller != self._admin.owner:
            raise self._rejected(op, NotAdmin(f"{caller} is not the registry owner"))

    def _require_badge_owner_locked(self, op: str, badge: Badge, caller: str) -> None:
        if caller != badge.owner:
            raise self._rejected(op, NotOwner(f"{caller} does not own badge {badge.id}"))

    def _journal_locked(self, op: str, caller: str, **args: Any) -> None:
        if self._journal is not None:
            self._journal.append(JournalEntry(op=op, caller=caller, args=args))

    def _emit_locked(self, event_cls: type[RegistryEvent], **fields: Any) -> RegistryEvent:
        return self._events.append(event_cls(seq=self._events.next_seq(), **fields))

    def _verify_badge_locked(self, badge_id: int) -> None:
        badge = self._badges[badge_id]
        if badge is None:
            if badge_id in self._by_address.values() or badge_id in self._by_name.values():
                raise InvariantViolation(f"Tombstoned badge {badge_id} is still indexed")
            return
        if self._by_address.get(badge.address) != badge_id or self._by_name.get(badge.name) != badge_id:
            raise InvariantViolation(f"Indexes disagree with badge {badge_id}")

    # ------------------------------------------------------------------
    # record operations
    # ------------------------------------------------------------------

    def register(self, address: str, name: str | bytes, paid: int, *, caller: str) -> int:
        address = normalize_principal(address, field="address")
        name = normalize_name(name)
        paid = normalize_amount(paid, field="paid")
        caller = normalize_principal(caller, field="caller")

        with self._lock:
            if paid < self._admin.fee:
                raise self._rejected(
                    "register", InsufficientFee(f"Registration requires {self._admin.fee}, got {paid}")
                )
            taken = []
            if address in self._by_address:
                taken.append(f"address {address}")
            if name in self._by_name:
                taken.append(f"name {name!r}")
            if taken:
                raise self._rejected("register", AlreadyRegistered(" and ".join(taken) + " already registered"))

            self._journal_locked("register", caller, address=address, name=name, paid=paid)

            badge_id = len(self._badges)
            self._badges.append(Badge(id=badge_id, address=address, name=name, owner=caller))
            self._by_address[address] = badge_id
            self._by_name[name] = badge_id
            self._active_count += 1
            self._admin = replace(self._admin, balance=self._admin.balance + paid)
            self._verify_badge_locked(badge_id)

            self._emit_locked(Registered, id=badge_id, address=address, name=name)
            logger.info("badge.registered id=%d address=%s name=%r owner=%s", badge_id, address, name, caller)
            return badge_id

    def set_address(self, badge_id: int, new_address: str, *, caller: str) -> None:
        badge_id = normalize_badge_id(badge_id)
        new_address = normalize_principal(new_address, field="address")
        caller = normalize_principal(caller, field="caller")

        with self._lock:
            badge = self._require_active_locked("set_address", badge_id)
            self._require_badge_owner_locked("set_address", badge, caller)
            # The badge's own current address counts as taken too.
            if new_address in self._by_address:
                raise self._rejected("set_address", AddressTaken(f"Address {new_address} is already in use"))

            self._journal_locked("set_address", caller, id=badge_id, address=new_address)

            del self._by_address[badge.address]
            self._by_address[new_address] = badge_id
            self._badges[badge_id] = replace(badge, address=new_address)
            self._verify_badge_locked(badge_id)

            self._emit_locked(AddressChanged, id=badge_id, address=new_address)
            logger.info("badge.address_changed id=%d old=%s new=%s", badge_id, badge.address, new_address)

    def set_meta(self, badge_id: int, key: str, value: str, *, caller: str) -> None:
        badge_id = normalize_badge_id(badge_id)
        key = normalize_meta_key(key)
        if value is None:
            raise self._rejected("set_meta", InvalidInput("Missing meta value"))
        value = str(value)
        caller = normalize_principal(caller, field="caller")

        with self._lock:
            badge = self._require_active_locked("set_meta", badge_id)
            self._require_badge_owner_locked("set_meta", badge, caller)

            self._journal_locked("set_meta", caller, id=badge_id, key=key, value=value)

            self._meta[(badge_id, key)] = value

            self._emit_locked(MetaChanged, id=badge_id, key=key, value=value)
            logger.info("badge.meta_changed id=%d key=%r", badge_id, key)

    def unregister(self, badge_id: int, *, caller: str) -> None:
        badge_id = normalize_badge_id(badge_id)
        caller = normalize_principal(caller, field="caller")

        with self._lock:
            self._require_admin_locked("unregister", caller)
            badge = self._require_active_locked("unregister", badge_id)

            self._journal_locked("unregister", caller, id=badge_id)

            del self._by_address[badge.address]
            del self._by_name[badge.name]
            self._badges[badge_id] = None
            self._active_count -= 1
            self._verify_badge_locked(badge_id)

            self._emit_locked(Unregistered, id=badge_id, name=badge.name)
            logger.info("badge.unregistered id=%d name=%r", badge_id, badge.name)

    # ------------------------------------------------------------------
    # administration
    # ------------------------------------------------------------------

    def set_owner(self, new_owner: str, *, caller: str) -> None:
        new_owner = normalize_principal(new_owner, field="owner")
        caller = normalize_principal(caller, field="caller")

        with self._lock:
            self._require_admin_locked("set_owner", caller)

            self._journal_locked("set_owner", caller, owner=new_owner)

            old = self._admin.owner
            self._admin = replace(self._admin, owner=new_owner)

            self._emit_locked(NewOwner, old=old, current=new_owner)
            logger.info("registry.new_owner old=%s current=%s", old, new_owner)

    def set_fee(self, new_fee: int, *, caller: str) -> None:
        new_fee = normalize_amount(new_fee, field="fee")
        caller = normalize_principal(caller, field="caller")

        with self._lock:
            self._require_admin_locked("set_fee", caller)

            self._journal_locked("set_fee", caller, fee=new_fee)

            old = self._admin.fee
            self._admin = replace(self._admin, fee=new_fee)
            logger.info("registry.fee_changed old=%d new=%d", old, new_fee)

    def drain(self, *, caller: str) -> int:
        """Pay the whole balance to the admin and reset it. Returns the amount paid."""
        caller = normalize_principal(caller, field="caller")

        with self._lock:
            self._require_admin_locked("drain", caller)

            amount = self._admin.balance
            if amount > 0:
                # A raising sink leaves the balance and the journal untouched.
                self.payouts.transfer(caller, amount)
            self._journal_locked("drain", caller, amount=amount)
            self._apply_drain_locked(caller, amount)
            return amount

    def replay_drain(self, amount: int, *, caller: str) -> None:
        """Re-apply a journaled drain without paying out again."""
        amount = normalize_amount(amount, field="amount")
        caller = normalize_principal(caller, field="caller")

        with self._lock:
            self._require_admin_locked("drain", caller)
            self._apply_drain_locked(caller, amount)

    def _apply_drain_locked(self, caller: str, amount: int) -> None:
        if amount != self._admin.balance:
            raise InvariantViolation(f"Drain of {amount} does not match balance {self._admin.balance}")
        self._admin = replace(self._admin, balance=0)
        logger.info("registry.drained to=%s amount=%d", caller, amount)

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    def badge_by_id(self, badge_id: int) -> Badge:
        badge_id = normalize_badge_id(badge_id)
        with self._lock:
            return self._require_active_locked("badge_by_id", badge_id)

    def badge_by_address(self, address: str) -> Badge:
        address = normalize_principal(address, field="address")
        with self._lock:
            return self._resolve_index_locked(self._by_address, address, "address")

    def badge_by_name(self, name: str | bytes) -> Badge:
        name = normalize_name(name)
        with self._lock:
            return self._resolve_index_locked(self._by_name, name, "name")

    def _resolve_index_locked(self, index: dict[str, int], key: str, label: str) -> Badge:
        badge_id = index.get(key)
        badge = self._badges[badge_id] if badge_id is not None and badge_id < len(self._badges) else None
        if badge is None:
            exc = InvariantViolation(f"No active badge indexed under {label} {key!r}")
            logger.error("registry.invariant_violation %s", exc)
            raise exc
        return badge

    def get_meta(self, badge_id: int, key: str) -> str:
        badge_id = normalize_badge_id(badge_id)
        key = normalize_meta_key(key)
        with self._lock:
            try:
                return self._meta[(badge_id, key)]
            except KeyError:
                raise self._rejected("get_meta", MetaNotFound(f"Badge {badge_id} has no meta {key!r}")) from None

    def active_count(self) -> int:
        with self._lock:
            return self._active_count

    def current_fee(self) -> int:
        with self._lock:
            return self._admin.fee

    def current_admin(self) -> str:
        with self._lock:
            return self._admin.owner

    def balance(self) -> int:
        with self._lock:
            return self._admin.balance

    def admin_state(self) -> AdminState:
        with self._lock:
            return self._admin

    def list_badges(self) -> list[Badge]:
        with self._lock:
            return [b for b in self._badges if b is not None]

    def is_tombstoned(self, badge_id: int) -> bool:
        with self._lock:
            return 0 <= badge_id < len(self._badges) and self._badges[badge_id] is None

    # ------------------------------------------------------------------
    # observers
    # ------------------------------------------------------------------

    def revision(self) -> int:
        return self._events.revision()

    def events(self, since: int = 0, *, kind: str | None = None) -> list[RegistryEvent]:
        return self._events.since(since, kind=kind)

    def check_invariants(self) -> None:
        """Validate indexes, counters and metadata against the arena."""
        with self._lock:
            active = [b for b in self._badges if b is not None]
            if len(active) != self._active_count:
                raise InvariantViolation(f"active count {self._active_count} != {len(active)} active badges")
            if len(self._by_address) != len(active) or len(self._by_name) != len(active):
                raise InvariantViolation("indexes hold entries for inactive badges")
            for badge_id in range(len(self._badges)):
                self._verify_badge_locked(badge_id)
            for meta_id, _ in self._meta:
                if meta_id >= len(self._badges):
                    raise InvariantViolation(f"metadata attached to unissued badge {meta_id}")
            if self._admin.balance < 0:
                raise InvariantViolation("negative balance")

    def snapshot(self) -> dict[str, Any]:
        """JSON-compatible dump of the complete state."""
        with self._lock:
            return {
                "badges": [
                    None
                    if b is None
                    else {"id": b.id, "address": b.address, "name": b.name, "owner": b.owner}
                    for b in self._badges
                ],
                "addressIndex": dict(sorted(self._by_address.items())),
                "nameIndex": dict(sorted(self._by_name.items())),
                "meta": [[i, k, v] for (i, k), v in sorted(self._meta.items())],
                "activeCount": self._active_count,
                "admin": {
                    "owner": self._admin.owner,
                    "fee": self._admin.fee,
                    "balance": self._admin.balance,
                },
                "revision": self._events.revision(),
            }
