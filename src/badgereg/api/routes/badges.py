from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Header

from ...core.registry import BadgeRegistry
from ..parsing import parse_paid_value, parse_principal_header, require_field
from ..serializers import badge_to_dict


def mount_badges_api(app: FastAPI, registry: BadgeRegistry) -> None:
    """Mount badge record endpoints.

    The caller principal comes from the `X-Principal` header. Domain errors
    propagate to the app-level exception handler.
    """

    @app.post("/api/badges")
    def register_badge(body: dict, x_principal: str | None = Header(default=None)) -> dict[str, Any]:
        caller = parse_principal_header(x_principal)
        badge_id = registry.register(
            require_field(body, "address"),
            require_field(body, "name"),
            parse_paid_value(body),
            caller=caller,
        )
        return {"ok": True, "id": badge_id}

    @app.get("/api/badges")
    def list_badges() -> list[dict[str, Any]]:
        return [badge_to_dict(b) for b in registry.list_badges()]

    @app.get("/api/badges/by-address/{address:path}")
    def get_badge_by_address(address: str) -> dict[str, Any]:
        return badge_to_dict(registry.badge_by_address(address))

    @app.get("/api/badges/by-name/{name:path}")
    def get_badge_by_name(name: str) -> dict[str, Any]:
        return badge_to_dict(registry.badge_by_name(name))

    @app.get("/api/badges/{badge_id}")
    def get_badge(badge_id: int) -> dict[str, Any]:
        return badge_to_dict(registry.badge_by_id(badge_id))

    @app.put("/api/badges/{badge_id}/address")
    def set_badge_address(badge_id: int, body: dict, x_principal: str | None = Header(default=None)) -> dict[str, Any]:
        caller = parse_principal_header(x_principal)
        address = require_field(body, "address")
        registry.set_address(badge_id, address, caller=caller)
        return {"ok": True, "id": badge_id, "address": str(address).strip()}

    @app.put("/api/badges/{badge_id}/meta/{key}")
    def set_badge_meta(
        badge_id: int,
        key: str,
        body: dict,
        x_principal: str | None = Header(default=None),
    ) -> dict[str, Any]:
        caller = parse_principal_header(x_principal)
        value = require_field(body, "value")
        registry.set_meta(badge_id, key, value, caller=caller)
        return {"ok": True, "id": badge_id, "key": key, "value": str(value)}

    @app.get("/api/badges/{badge_id}/meta/{key}")
    def get_badge_meta(badge_id: int, key: str) -> dict[str, Any]:
        return {"id": badge_id, "key": key, "value": registry.get_meta(badge_id, key)}

    @app.delete("/api/badges/{badge_id}")
    def unregister_badge(badge_id: int, x_principal: str | None = Header(default=None)) -> dict[str, Any]:
        caller = parse_principal_header(x_principal)
        registry.unregister(badge_id, caller=caller)
        return {"ok": True, "id": badge_id}
