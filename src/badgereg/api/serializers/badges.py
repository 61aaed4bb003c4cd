from __future__ import annotations

from typing import Any

from ...core.records import AdminState, Badge


def badge_to_dict(badge: Badge) -> dict[str, Any]:
    return {
        "id": int(badge.id),
        "address": badge.address,
        "name": badge.name,
        "owner": badge.owner,
    }


def admin_to_dict(admin: AdminState, *, active_count: int) -> dict[str, Any]:
    # Amounts are sent as strings: wei values overflow JSON numbers in most clients.
    return {
        "owner": admin.owner,
        "fee": str(int(admin.fee)),
        "balance": str(int(admin.balance)),
        "activeCount": int(active_count),
    }
