from __future__ import annotations

from .core.errors import (
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
from .core.records import Badge
from .core.registry import BadgeRegistry
from .core.settings import Settings
from .runtime.server import BadgeRegServer, run
from .sdk.client import BadgeRegClient

__all__ = [
    "run",
    "BadgeRegServer",
    "BadgeRegClient",
    "BadgeRegistry",
    "Badge",
    "Settings",
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
