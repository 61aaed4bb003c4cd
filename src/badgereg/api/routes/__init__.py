from __future__ import annotations

from .admin import mount_admin_api
from .badges import mount_badges_api

__all__ = ["mount_badges_api", "mount_admin_api"]
