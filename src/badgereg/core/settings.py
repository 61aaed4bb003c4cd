from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

from .records import normalize_amount, normalize_principal

DEFAULT_ADMIN = "0x0000000000000000000000000000000000000000"
# One ether, expressed in wei.
DEFAULT_FEE = 10**18
DEFAULT_LOG_LEVEL = "info"


@dataclass(frozen=True)
class Settings:
    """Process configuration for a registry server.

    Notes:
    - Values come from `BADGEREG_*` environment variables, CLI flags win.
    - `journal` is optional; without it the registry lives only in memory.
    """

    admin: str = DEFAULT_ADMIN
    fee: int = DEFAULT_FEE
    journal: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL
    url: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        admin = env.get("BADGEREG_ADMIN", "").strip() or DEFAULT_ADMIN
        raw_fee = env.get("BADGEREG_FEE", "").strip()
        fee = normalize_amount(raw_fee, field="BADGEREG_FEE") if raw_fee else DEFAULT_FEE
        journal = env.get("BADGEREG_JOURNAL", "").strip() or None
        log_level = env.get("BADGEREG_LOG_LEVEL", "").strip().lower() or DEFAULT_LOG_LEVEL
        url = env.get("BADGEREG_URL", "").strip() or None

        return cls(admin=admin, fee=fee, journal=journal, log_level=log_level, url=url)

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if "admin" in values:
            values["admin"] = normalize_principal(values["admin"], field="admin")
        if "fee" in values:
            values["fee"] = normalize_amount(values["fee"], field="fee")
        if "log_level" in values:
            values["log_level"] = str(values["log_level"]).strip().lower()
        return replace(self, **values)
