from __future__ import annotations

from typing import Any

from ...core.errors import BadgeRegError, InvalidInput
from ...core.events import EVENT_KINDS
from ...core.records import normalize_amount, normalize_principal


class MissingPrincipal(BadgeRegError):
    code = "MissingPrincipal"


def parse_principal_header(value: str | None) -> str:
    if value is None or not str(value).strip():
        raise MissingPrincipal("Missing X-Principal header")
    return normalize_principal(value, field="X-Principal")


def require_field(body: dict[str, Any], field: str) -> Any:
    if not isinstance(body, dict):
        raise InvalidInput("Request body must be a JSON object")
    if field not in body or body.get(field) is None:
        raise InvalidInput(f"Missing field: {field}")
    return body[field]


def parse_paid_value(body: dict[str, Any]) -> int:
    # Registrations without a value are treated as paying nothing.
    raw = body.get("value", 0) if isinstance(body, dict) else 0
    return normalize_amount(0 if raw is None else raw, field="value")


def parse_events_query(since: Any, kind: Any) -> tuple[int, str | None]:
    since_v = 0
    if since is not None:
        try:
            since_v = int(since)
        except (TypeError, ValueError) as ex:
            raise InvalidInput("Invalid since") from ex
        if since_v < 0:
            raise InvalidInput("since must be >= 0")

    kind_v: str | None = None
    if kind is not None:
        kind_v = str(kind).strip() or None
        if kind_v is not None and kind_v not in EVENT_KINDS:
            raise InvalidInput(f"Unknown event kind: {kind_v}")

    return since_v, kind_v
