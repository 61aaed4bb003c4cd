from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import InvalidInput

# Names are stored as text but must fit a 32-byte word once UTF-8 encoded.
MAX_NAME_BYTES = 32

Principal = str
Amount = int


@dataclass(frozen=True)
class Badge:
    """A registry record.

    Notes:
    - `id` is assigned at creation and never reused, even after unregistration.
    - `owner` is the principal that registered the badge and never changes.
      Only `address` can be updated afterwards.
    """

    id: int
    address: Principal
    name: str
    owner: Principal


@dataclass(frozen=True)
class AdminState:
    """Registry-wide administrative state.

    Replaced wholesale on every admin mutation so a rejected operation can
    never leave it half-updated.
    """

    owner: Principal
    fee: Amount
    balance: Amount = 0


def normalize_principal(value: Any, *, field: str = "principal") -> Principal:
    if value is None:
        raise InvalidInput(f"Missing {field}")
    p = str(value).strip()
    if not p:
        raise InvalidInput(f"{field} cannot be empty")
    return p


def normalize_name(value: Any) -> str:
    if value is None:
        raise InvalidInput("Missing name")
    if isinstance(value, (bytes, bytearray)):
        try:
            name = bytes(value).decode("utf-8")
        except UnicodeDecodeError as ex:
            raise InvalidInput("name must be valid UTF-8") from ex
    else:
        name = str(value)
    if not name:
        raise InvalidInput("name cannot be empty")
    if len(name.encode("utf-8")) > MAX_NAME_BYTES:
        raise InvalidInput(f"name must be at most {MAX_NAME_BYTES} bytes")
    return name


def normalize_amount(value: Any, *, field: str = "amount") -> Amount:
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid {field}")
    try:
        amount = int(value)
    except (TypeError, ValueError) as ex:
        raise InvalidInput(f"Invalid {field}") from ex
    if isinstance(value, float) and float(amount) != value:
        raise InvalidInput(f"{field} must be a whole number")
    if amount < 0:
        raise InvalidInput(f"{field} must be >= 0")
    return amount


def normalize_badge_id(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidInput("Invalid badge id")
    try:
        badge_id = int(value)
    except (TypeError, ValueError) as ex:
        raise InvalidInput("Invalid badge id") from ex
    if badge_id < 0:
        raise InvalidInput("badge id must be >= 0")
    return badge_id


def normalize_meta_key(value: Any) -> str:
    if value is None:
        raise InvalidInput("Missing meta key")
    key = str(value)
    if not key:
        raise InvalidInput("meta key cannot be empty")
    return key
