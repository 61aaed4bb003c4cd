from __future__ import annotations

import logging

from fastapi import FastAPI

from ..api import create_api_app
from ..core.registry import BadgeRegistry
from ..core.settings import Settings

logger = logging.getLogger(__name__)


def build_registry(settings: Settings) -> BadgeRegistry:
    """Create the registry described by `settings`, replaying its journal if any."""

    if settings.journal:
        return BadgeRegistry.from_journal(settings.journal, admin=settings.admin, fee=settings.fee)
    logger.info("registry.created admin=%s fee=%d (in-memory)", settings.admin, settings.fee)
    return BadgeRegistry(admin=settings.admin, fee=settings.fee)


def create_app(settings: Settings | None = None, *, registry: BadgeRegistry | None = None) -> FastAPI:
    """Create the HTTP app around `registry`, or around a fresh one built from settings."""

    if registry is None:
        registry = build_registry(settings if settings is not None else Settings.from_env())
    return create_api_app(registry)
