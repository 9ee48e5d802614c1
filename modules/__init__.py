"""Domain modules plugged into the core, and the default assembly."""

from __future__ import annotations

import logging
from typing import Optional

from core.cache import TTLCache
from core.core import Core
from core.settings import Settings

from .content_store import ContentStore
from .data_api import DataApiModule
from .static_site import StaticResolver, StaticSiteModule

logger = logging.getLogger("certopedia")


def build_core(settings: Optional[Settings] = None) -> Core:
    """Create the per-process router with its two caches and both handlers."""
    settings = settings or Settings.from_env()
    store = ContentStore(
        settings.data_file,
        TTLCache(settings.data_cache_ttl, name="dataset"),
        strict=settings.strict_data,
    )
    resolver = StaticResolver(
        settings.static_root,
        TTLCache(settings.static_cache_ttl, name="static"),
    )
    core = Core([DataApiModule(store), StaticSiteModule(resolver)], settings=settings)
    logger.info(
        {
            "evt": "core_ready",
            "static_root": str(settings.static_root),
            "data_file": str(settings.data_file),
        }
    )
    return core


__all__ = ["build_core"]
