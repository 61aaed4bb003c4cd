from __future__ import annotations

from .service import BadgeRegistry

__all__ = ["BadgeRegistry"]
