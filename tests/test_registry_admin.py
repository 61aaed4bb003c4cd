from __future__ import annotations

import pytest

from badgereg.core.errors import InvariantViolation, NotAdmin, NotOwner, RecordNotFound
from badgereg.core.journal import OperationJournal, load_journal
from badgereg.core.registry import BadgeRegistry
from badgereg.core.treasury import AccountLedger

ADMIN = "0xadmin"
ALICE = "0xalice"
BOB = "0xbob"
FEE = 10**18


def test_set_owner_transfers_admin_rights() -> None:
    reg = BadgeRegistry(admin=ALICE, fee=FEE)

    with pytest.raises(NotAdmin):
        reg.set_owner(BOB, caller=BOB)
    assert reg.current_admin() == ALICE

    reg.set_owner(BOB, caller=ALICE)
    assert reg.current_admin() == BOB

    events = reg.events(kind="NewOwner")
    assert len(events) == 1
    assert events[0].old == ALICE  # type: ignore[attr-defined]
    assert events[0].current == BOB  # type: ignore[attr-defined]

    # The old admin lost its rights.
    with pytest.raises(NotAdmin):
        reg.set_owner(ALICE, caller=ALICE)


def test_set_fee_is_admin_only_and_has_no_bounds() -> None:
    reg = BadgeRegistry(admin=ADMIN, fee=FEE)

    with pytest.raises(NotAdmin):
        reg.set_fee(10, caller=ALICE)
    assert reg.current_fee() == FEE

    reg.set_fee(10, caller=ADMIN)
    assert reg.current_fee() == 10

    reg.set_fee(0, caller=ADMIN)
    reg.register(ALICE, "free", 0, caller=ALICE)
    assert reg.active_count() == 1


def test_unregister_tombstones_and_keeps_meta() -> None:
    reg = BadgeRegistry(admin=ADMIN, fee=FEE)
    reg.register(ALICE, "awesome", FEE, caller=ALICE)
    reg.set_meta(0, "key", "value", caller=ALICE)

    with pytest.raises(NotAdmin):
        reg.unregister(0, caller=ALICE)

    reg.unregister(0, caller=ADMIN)

    assert reg.active_count() == 0
    assert reg.is_tombstoned(0)
    events = reg.events(kind="Unregistered")
    assert len(events) == 1
    assert (events[0].id, events[0].name) == (0, "awesome")  # type: ignore[attr-defined]

    with pytest.raises(RecordNotFound):
        reg.badge_by_id(0)
    with pytest.raises(InvariantViolation):
        reg.badge_by_address(ALICE)
    with pytest.raises(InvariantViolation):
        reg.badge_by_name("awesome")

    # Orphaned metadata stays readable.
    assert reg.get_meta(0, "key") == "value"

    with pytest.raises(RecordNotFound):
        reg.unregister(0, caller=ADMIN)
    with pytest.raises(RecordNotFound):
        reg.set_meta(0, "key", "again", caller=ALICE)
    with pytest.raises(RecordNotFound):
        reg.set_address(0, BOB, caller=ALICE)


def test_owner_check_happens_after_record_check() -> None:
    reg = BadgeRegistry(admin=ADMIN, fee=FEE)
    reg.register(ALICE, "awesome", FEE, caller=ALICE)
    reg.unregister(0, caller=ADMIN)

    # A tombstoned badge reports missing, not a permission problem.
    with pytest.raises(RecordNotFound):
        reg.set_meta(0, "k", "v", caller=BOB)
    badge_id = reg.register(BOB, "badger", FEE, caller=BOB)
    with pytest.raises(NotOwner):
        reg.set_meta(badge_id, "k", "v", caller=ALICE)


def test_drain_pays_the_whole_balance_to_the_admin() -> None:
    ledger = AccountLedger()
    reg = BadgeRegistry(admin=ADMIN, fee=FEE, payouts=ledger)
    reg.register(ALICE, "awesome", FEE, caller=ALICE)
    reg.register(BOB, "badger", FEE * 2, caller=BOB)

    with pytest.raises(NotAdmin):
        reg.drain(caller=ALICE)
    assert reg.balance() == FEE * 3

    assert reg.drain(caller=ADMIN) == FEE * 3
    assert reg.balance() == 0
    assert ledger.balance_of(ADMIN) == FEE * 3

    # Nothing left: still succeeds, pays nothing.
    assert reg.drain(caller=ADMIN) == 0
    assert ledger.balance_of(ADMIN) == FEE * 3


class _FailingPayouts:
    def transfer(self, to: str, amount: int) -> None:
        raise RuntimeError("payout rail unavailable")


def test_failed_payout_keeps_the_balance() -> None:
    reg = BadgeRegistry(admin=ADMIN, fee=FEE, payouts=_FailingPayouts())
    reg.register(ALICE, "awesome", FEE, caller=ALICE)

    with pytest.raises(RuntimeError):
        reg.drain(caller=ADMIN)
    assert reg.balance() == FEE


def test_failed_payout_is_not_journaled(tmp_path) -> None:
    path = tmp_path / "journal.jsonl"
    reg = BadgeRegistry(admin=ADMIN, fee=FEE, payouts=_FailingPayouts(), journal=OperationJournal(path))
    reg.register(ALICE, "awesome", FEE, caller=ALICE)

    with pytest.raises(RuntimeError):
        reg.drain(caller=ADMIN)

    assert [e.op for e in load_journal(path)] == ["register"]
    restored = BadgeRegistry.from_journal(path, admin=ADMIN, fee=FEE)
    assert restored.snapshot() == reg.snapshot()
    assert restored.balance() == FEE


def test_drain_pays_the_current_admin_only() -> None:
    ledger = AccountLedger()
    reg = BadgeRegistry(admin=ADMIN, fee=FEE, payouts=ledger)
    reg.register(ALICE, "awesome", FEE, caller=ALICE)
    reg.set_owner(BOB, caller=ADMIN)

    with pytest.raises(NotAdmin):
        reg.drain(caller=ADMIN)
    reg.drain(caller=BOB)

    assert ledger.balance_of(BOB) == FEE
    assert ledger.balance_of(ADMIN) == 0
