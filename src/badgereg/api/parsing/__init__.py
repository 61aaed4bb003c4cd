from __future__ import annotations

from .fields import (
    MissingPrincipal,
    parse_events_query,
    parse_paid_value,
    parse_principal_header,
    require_field,
)

__all__ = [
    "MissingPrincipal",
    "parse_principal_header",
    "parse_paid_value",
    "parse_events_query",
    "require_field",
]
