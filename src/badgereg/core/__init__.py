from __future__ import annotations

from .errors import (
    AddressTaken,
    AlreadyRegistered,
    BadgeRegError,
    InsufficientFee,
    InvalidInput,
    InvariantViolation,
    MetaNotFound,
    NotAdmin,
    NotFound,
    NotOwner,
    RecordNotFound,
)
from .events import (
    AddressChanged,
    EventLog,
    MetaChanged,
    NewOwner,
    Registered,
    RegistryEvent,
    Unregistered,
    event_to_dict,
)
from .journal import JournalEntry, OperationJournal, load_journal, replay
from .records import MAX_NAME_BYTES, AdminState, Badge
from .registry import BadgeRegistry
from .settings import Settings
from .treasury import AccountLedger, PayoutSink

__all__ = [
    "BadgeRegistry",
    "Badge",
    "AdminState",
    "MAX_NAME_BYTES",
    "Settings",
    "AccountLedger",
    "PayoutSink",
    "JournalEntry",
    "OperationJournal",
    "load_journal",
    "replay",
    "EventLog",
    "RegistryEvent",
    "Registered",
    "AddressChanged",
    "MetaChanged",
    "Unregistered",
    "NewOwner",
    "event_to_dict",
    "BadgeRegError",
    "InvalidInput",
    "AlreadyRegistered",
    "InsufficientFee",
    "NotOwner",
    "NotAdmin",
    "AddressTaken",
    "NotFound",
    "RecordNotFound",
    "MetaNotFound",
    "InvariantViolation",
]
