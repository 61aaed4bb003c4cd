from __future__ import annotations

from .app import build_registry, create_app
from .server import BadgeRegServer, run

__all__ = ["build_registry", "create_app", "BadgeRegServer", "run"]
