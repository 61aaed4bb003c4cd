from __future__ import annotations

from .badges import admin_to_dict, badge_to_dict

__all__ = ["badge_to_dict", "admin_to_dict"]
