"""Read-only JSON API over the CERT dataset, mounted under the API prefix."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import psutil

from core.core import RouteKind
from core.envelope import Request, ResponseEnvelope, error_response, format_timestamp, json_response, now_iso

from .base import BaseModule
from .content_store import ContentStore
from .query_engine import (
    FilterSpec,
    country_counts,
    echo_filters,
    filter_records,
    group_by_sector,
    latest_update,
    summarize,
)

logger = logging.getLogger("certopedia.data")

SERVICE_NAME = "CERTopedia"
DATA_CACHE_CONTROL = "public, max-age=300"
HEALTH_CACHE_CONTROL = "no-cache"


class DataApiModule(BaseModule):
    name = "data_api"

    def __init__(self, store: ContentStore, *, started_at: Optional[float] = None) -> None:
        super().__init__()
        self.store = store
        self.started_at = time.time() if started_at is None else started_at

    def build_routes(self) -> None:
        prefix = self.settings.api_prefix.rstrip("/")
        self.register_route("GET", prefix, self.list_certs)
        self.register_route("GET", prefix + "/", self.list_certs)
        self.register_route("GET", prefix + "/certs", self.list_certs)
        self.register_route("GET", prefix + "/stats", self.stats)
        self.register_route("GET", prefix + "/countries", self.countries)
        self.register_route("GET", prefix + "/sectors", self.sectors)
        self.register_route("GET", prefix + "/health", self.health)
        self.register_route("GET", prefix + "/", self.not_found, kind=RouteKind.PREFIX)

    # Views ---------------------------------------------------------------
    def list_certs(self, request: Request) -> ResponseEnvelope:
        records = self.store.records()
        matched = filter_records(records, FilterSpec.from_query(request.query))
        payload = {
            "success": True,
            "data": [record.to_dict() for record in matched],
            "total": len(matched),
            "filters": echo_filters(request.query),
        }
        return json_response(payload, cache_control=DATA_CACHE_CONTROL)

    def stats(self, request: Request) -> ResponseEnvelope:
        payload = {"success": True, "data": summarize(self.store.records())}
        return json_response(payload, cache_control=DATA_CACHE_CONTROL)

    def countries(self, request: Request) -> ResponseEnvelope:
        payload = {"success": True, "data": country_counts(self.store.records())}
        return json_response(payload, cache_control=DATA_CACHE_CONTROL)

    def sectors(self, request: Request) -> ResponseEnvelope:
        payload = {"success": True, "data": group_by_sector(self.store.records())}
        return json_response(payload, cache_control=DATA_CACHE_CONTROL)

    def health(self, request: Request) -> ResponseEnvelope:
        snapshot = self.store.snapshot()
        latest = latest_update(snapshot.records)
        payload = {
            "success": True,
            "status": "healthy",
            "timestamp": now_iso(),
            "service": SERVICE_NAME,
            "version": self.settings.api_version,
            "stage": self.settings.stage,
            "region": self.settings.region,
            "dataStatus": {
                "certsLoaded": len(snapshot.records),
                "lastUpdate": int(latest.timestamp() * 1000),
                "loadedAt": format_timestamp(snapshot.loaded_at),
            },
            "checks": self._checks(),
        }
        return json_response(payload, cache_control=HEALTH_CACHE_CONTROL)

    def not_found(self, request: Request) -> ResponseEnvelope:
        prefix = self.settings.api_prefix.rstrip("/")
        endpoint = request.path[len(prefix):] or "/"
        logger.info({"evt": "api_not_found", "path": request.path})
        return error_response(404, "Not Found", f"API endpoint {endpoint} not found")

    # Helpers -------------------------------------------------------------
    def _checks(self) -> Dict[str, Any]:
        memory = psutil.Process().memory_info()
        return {
            "uptime": int(round(time.time() - self.started_at)),
            "memory": {"rssMb": int(round(memory.rss / 1024 / 1024))},
            "dataFile": self.store.file_status(),
        }


__all__ = ["DataApiModule", "SERVICE_NAME"]
