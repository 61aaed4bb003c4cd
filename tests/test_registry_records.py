from __future__ import annotations

import pytest

from badgereg.core.errors import (
    AddressTaken,
    AlreadyRegistered,
    InsufficientFee,
    InvalidInput,
    InvariantViolation,
    MetaNotFound,
    NotFound,
    NotOwner,
    RecordNotFound,
)
from badgereg.core.registry import BadgeRegistry

ADMIN = "0xadmin"
ALICE = "0xalice"
BOB = "0xbob"
FEE = 10**18


def _registry() -> BadgeRegistry:
    return BadgeRegistry(admin=ADMIN, fee=FEE)


def test_register_assigns_sequential_ids_and_indexes_both_keys() -> None:
    reg = _registry()

    first = reg.register(ALICE, "awesome", FEE, caller=ALICE)
    second = reg.register(BOB, "badger", FEE, caller=BOB)

    assert (first, second) == (0, 1)
    assert reg.active_count() == 2

    badge = reg.badge_by_id(0)
    assert (badge.address, badge.name, badge.owner) == (ALICE, "awesome", ALICE)
    assert reg.badge_by_address(ALICE).id == 0
    assert reg.badge_by_name("awesome").id == 0
    assert reg.badge_by_name(b"badger").id == 1


def test_register_records_the_caller_as_owner() -> None:
    reg = _registry()
    badge_id = reg.register(BOB, "delegated", FEE, caller=ALICE)

    badge = reg.badge_by_id(badge_id)
    assert badge.address == BOB
    assert badge.owner == ALICE


def test_register_emits_registered_event() -> None:
    reg = _registry()
    reg.register(ALICE, "awesome", FEE, caller=ALICE)

    events = reg.events(kind="Registered")
    assert len(events) == 1
    assert events[0].seq == 1
    assert events[0].id == 0  # type: ignore[attr-defined]
    assert events[0].address == ALICE  # type: ignore[attr-defined]
    assert events[0].name == "awesome"  # type: ignore[attr-defined]


def test_register_rejects_taken_address_or_name() -> None:
    reg = _registry()
    reg.register(ALICE, "awesome", FEE, caller=ALICE)
    before = reg.snapshot()

    with pytest.raises(AlreadyRegistered):
        reg.register(ALICE, "awesome", FEE, caller=ALICE)
    with pytest.raises(AlreadyRegistered):
        reg.register(BOB, "awesome", FEE, caller=BOB)
    with pytest.raises(AlreadyRegistered):
        reg.register(ALICE, "new_awesome", FEE, caller=ALICE)

    assert reg.snapshot() == before
    assert reg.active_count() == 1
    assert len(reg.events(kind="Registered")) == 1


def test_register_requires_fee() -> None:
    reg = _registry()

    with pytest.raises(InsufficientFee):
        reg.register(BOB, "badger", 0, caller=BOB)
    with pytest.raises(InsufficientFee):
        reg.register(BOB, "badger", FEE // 2, caller=BOB)

    assert reg.active_count() == 0
    assert reg.balance() == 0
    assert reg.events() == []


def test_fee_is_checked_before_collisions() -> None:
    reg = _registry()
    reg.register(ALICE, "awesome", FEE, caller=ALICE)

    with pytest.raises(InsufficientFee):
        reg.register(ALICE, "awesome", 1, caller=ALICE)


def test_overpayment_is_accepted_and_credited() -> None:
    reg = _registry()
    reg.register(ALICE, "awesome", FEE * 3, caller=ALICE)
    assert reg.balance() == FEE * 3


def test_register_validates_name_length() -> None:
    reg = _registry()
    reg.register(ALICE, "x" * 32, FEE, caller=ALICE)

    with pytest.raises(InvalidInput):
        reg.register(BOB, "y" * 33, FEE, caller=BOB)
    with pytest.raises(InvalidInput):
        # 11 three-byte characters = 33 bytes.
        reg.register(BOB, "€" * 11, FEE, caller=BOB)
    with pytest.raises(InvalidInput):
        reg.register(BOB, "", FEE, caller=BOB)
    assert reg.active_count() == 1


def test_set_address_moves_the_address_index() -> None:
    reg = _registry()
    reg.register(ALICE, "awesome", FEE, caller=ALICE)

    with pytest.raises(NotOwner):
        reg.set_address(0, BOB, caller=BOB)

    reg.set_address(0, BOB, caller=ALICE)

    assert reg.badge_by_address(BOB).id == 0
    assert reg.badge_by_id(0).address == BOB
    with pytest.raises(InvariantViolation):
        reg.badge_by_address(ALICE)

    events = reg.events(kind="AddressChanged")
    assert len(events) == 1
    assert events[0].address == BOB  # type: ignore[attr-defined]

    # Re-submitting the current address counts as taken.
    with pytest.raises(AddressTaken):
        reg.set_address(0, BOB, caller=ALICE)

    reg.set_address(0, ALICE, caller=ALICE)
    assert reg.badge_by_address(ALICE).id == 0


def test_set_address_rejects_address_of_another_badge() -> None:
    reg = _registry()
    reg.register(ALICE, "awesome", FEE, caller=ALICE)
    reg.register(BOB, "badger", FEE, caller=BOB)
    before = reg.snapshot()

    with pytest.raises(AddressTaken):
        reg.set_address(0, BOB, caller=ALICE)
    assert reg.snapshot() == before


def test_set_address_on_unknown_badge() -> None:
    reg = _registry()
    with pytest.raises(RecordNotFound):
        reg.set_address(7, BOB, caller=ALICE)


def test_meta_is_owner_gated_and_last_write_wins() -> None:
    reg = _registry()
    reg.register(ALICE, "awesome", FEE, caller=ALICE)

    with pytest.raises(NotOwner):
        reg.set_meta(0, "key", "value", caller=BOB)
    with pytest.raises(MetaNotFound):
        reg.get_meta(0, "key")

    reg.set_meta(0, "key", "value", caller=ALICE)
    assert reg.get_meta(0, "key") == "value"

    reg.set_meta(0, "key", "other", caller=ALICE)
    assert reg.get_meta(0, "key") == "other"

    events = reg.events(kind="MetaChanged")
    assert [(e.key, e.value) for e in events] == [("key", "value"), ("key", "other")]  # type: ignore[attr-defined]


def test_meta_not_found_is_a_not_found() -> None:
    reg = _registry()
    with pytest.raises(NotFound):
        reg.get_meta(3, "missing")


def test_name_lookup_miss_is_an_invariant_violation_not_a_not_found() -> None:
    reg = _registry()

    with pytest.raises(InvariantViolation) as info:
        reg.badge_by_name("nobody")
    assert not isinstance(info.value, NotFound)

    with pytest.raises(RecordNotFound):
        reg.badge_by_id(0)
