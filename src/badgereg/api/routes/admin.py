from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Header

from ...core.events import event_to_dict
from ...core.registry import BadgeRegistry
from ..parsing import parse_events_query, parse_principal_header, require_field
from ..serializers import admin_to_dict


def mount_admin_api(app: FastAPI, registry: BadgeRegistry) -> None:
    """Mount registry-wide administration and event polling endpoints."""

    @app.get("/api/admin")
    def get_admin() -> dict[str, Any]:
        return admin_to_dict(registry.admin_state(), active_count=registry.active_count())

    @app.put("/api/admin/owner")
    def set_admin_owner(body: dict, x_principal: str | None = Header(default=None)) -> dict[str, Any]:
        caller = parse_principal_header(x_principal)
        registry.set_owner(require_field(body, "owner"), caller=caller)
        return {"ok": True, "owner": registry.current_admin()}

    @app.put("/api/admin/fee")
    def set_admin_fee(body: dict, x_principal: str | None = Header(default=None)) -> dict[str, Any]:
        caller = parse_principal_header(x_principal)
        registry.set_fee(require_field(body, "fee"), caller=caller)
        return {"ok": True, "fee": str(registry.current_fee())}

    @app.post("/api/admin/drain")
    def drain(x_principal: str | None = Header(default=None)) -> dict[str, Any]:
        caller = parse_principal_header(x_principal)
        amount = registry.drain(caller=caller)
        return {"ok": True, "to": caller, "amount": str(amount)}

    @app.get("/api/events")
    def events(since: int | None = None, kind: str | None = None) -> dict[str, Any]:
        # Polling endpoint: clients pass the last revision they saw as `since`.
        since_v, kind_v = parse_events_query(since, kind)
        return {
            "revision": registry.revision(),
            "events": [event_to_dict(e) for e in registry.events(since_v, kind=kind_v)],
        }
