from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from ..core.errors import BadgeRegError, error_from_code
from ..core.records import Badge


def _badge_from_dict(data: dict[str, Any]) -> Badge:
    return Badge(
        id=int(data["id"]),
        address=str(data["address"]),
        name=str(data["name"]),
        owner=str(data["owner"]),
    )


class BadgeRegClient:
    """HTTP client for a running badge registry server.

    Every mutating call is sent on behalf of a principal: either the one given
    to the call or the client's default `principal`. Error responses are
    turned back into the matching `BadgeRegError` subclass.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        principal: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.principal = principal
        self._transport = transport

    def as_principal(self, principal: str) -> "BadgeRegClient":
        """Return a client sharing this one's server but acting as `principal`."""
        return BadgeRegClient(self.base_url, principal=principal, transport=self._transport)

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        principal: str | None = None,
        signed: bool = False,
        timeout_s: float = 10.0,
    ) -> Any:
        headers: dict[str, str] = {}
        if signed:
            who = principal if principal is not None else self.principal
            if not who:
                raise ValueError("principal is required for this call")
            headers["X-Principal"] = who

        with httpx.Client(base_url=self.base_url, timeout=timeout_s, transport=self._transport) as client:
            res = client.request(method, path, json=json, params=params, headers=headers)

        if res.status_code >= 400:
            try:
                data = res.json()
            except ValueError:
                data = {}
            code = data.get("error") if isinstance(data, dict) else None
            detail = data.get("detail") if isinstance(data, dict) else None
            raise error_from_code(code, str(detail or f"{method} {path} failed: {res.status_code} {res.text}"))
        return res.json()

    def healthz(self, *, timeout_s: float = 10.0) -> bool:
        try:
            return bool(self._request("GET", "/healthz", timeout_s=timeout_s).get("ok"))
        except (httpx.HTTPError, BadgeRegError):
            return False

    # -- records -----------------------------------------------------------

    def register(self, address: str, name: str, value: int, *, principal: str | None = None) -> int:
        body = {"address": address, "name": name, "value": str(int(value))}
        data = self._request("POST", "/api/badges", json=body, principal=principal, signed=True)
        return int(data["id"])

    def set_address(self, badge_id: int, address: str, *, principal: str | None = None) -> None:
        self._request(
            "PUT",
            f"/api/badges/{int(badge_id)}/address",
            json={"address": address},
            principal=principal,
            signed=True,
        )

    def set_meta(self, badge_id: int, key: str, value: str, *, principal: str | None = None) -> None:
        self._request(
            "PUT",
            f"/api/badges/{int(badge_id)}/meta/{quote(key, safe='')}",
            json={"value": value},
            principal=principal,
            signed=True,
        )

    def get_meta(self, badge_id: int, key: str) -> str:
        data = self._request("GET", f"/api/badges/{int(badge_id)}/meta/{quote(key, safe='')}")
        return str(data["value"])

    def unregister(self, badge_id: int, *, principal: str | None = None) -> None:
        self._request("DELETE", f"/api/badges/{int(badge_id)}", principal=principal, signed=True)

    def badge(self, badge_id: int) -> Badge:
        return _badge_from_dict(self._request("GET", f"/api/badges/{int(badge_id)}"))

    def badge_by_address(self, address: str) -> Badge:
        return _badge_from_dict(self._request("GET", f"/api/badges/by-address/{quote(address, safe='')}"))

    def badge_by_name(self, name: str) -> Badge:
        return _badge_from_dict(self._request("GET", f"/api/badges/by-name/{quote(name, safe='')}"))

    def list_badges(self) -> list[Badge]:
        return [_badge_from_dict(d) for d in self._request("GET", "/api/badges")]

    # -- administration ----------------------------------------------------

    def admin_state(self) -> dict[str, Any]:
        data = self._request("GET", "/api/admin")
        return {
            "owner": str(data["owner"]),
            "fee": int(data["fee"]),
            "balance": int(data["balance"]),
            "activeCount": int(data["activeCount"]),
        }

    def active_count(self) -> int:
        return self.admin_state()["activeCount"]

    def current_fee(self) -> int:
        return self.admin_state()["fee"]

    def current_admin(self) -> str:
        return self.admin_state()["owner"]

    def set_owner(self, owner: str, *, principal: str | None = None) -> None:
        self._request("PUT", "/api/admin/owner", json={"owner": owner}, principal=principal, signed=True)

    def set_fee(self, fee: int, *, principal: str | None = None) -> None:
        self._request("PUT", "/api/admin/fee", json={"fee": str(int(fee))}, principal=principal, signed=True)

    def drain(self, *, principal: str | None = None) -> int:
        data = self._request("POST", "/api/admin/drain", principal=principal, signed=True)
        return int(data["amount"])

    # -- events --------------------------------------------------------------

    def events(self, since: int = 0, *, kind: str | None = None) -> tuple[int, list[dict[str, Any]]]:
        """Return `(revision, events)` for events newer than `since`."""
        params: dict[str, Any] = {"since": int(since)}
        if kind is not None:
            params["kind"] = kind
        data = self._request("GET", "/api/events", params=params)
        return int(data["revision"]), list(data["events"])
