from __future__ import annotations

from .client import BadgeRegClient

__all__ = ["BadgeRegClient"]
