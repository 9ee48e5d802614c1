"""Static asset serving with SPA fallback and per-type cache policy."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Dict, Optional

from core.cache import TTLCache
from core.core import RouteKind
from core.envelope import Request, ResponseEnvelope

from .base import BaseModule

logger = logging.getLogger("certopedia.static")

MIME_TYPES: Dict[str, str] = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".eot": "application/vnd.ms-fontobject",
}
DEFAULT_MIME = "application/octet-stream"

NO_STORE = "no-cache, no-store, must-revalidate"
JSON_MAX_AGE = "public, max-age=3600"
IMMUTABLE = "public, max-age=31536000, immutable"

INDEX_DOCUMENT = "index.html"
NOT_FOUND_BODY = "<h1>404 - Not Found</h1><p>The requested resource was not found.</p>"


def content_type_for(path: str) -> str:
    return MIME_TYPES.get(posixpath.splitext(path)[1].lower(), DEFAULT_MIME)


def cache_control_for(content_type: str) -> str:
    if content_type == "text/html":
        return NO_STORE
    if content_type == "application/json":
        return JSON_MAX_AGE
    return IMMUTABLE


class StaticResolver:
    """Maps request paths to files under ``root`` through the static cache."""

    def __init__(self, root: Path, cache: TTLCache) -> None:
        self.root = Path(root).resolve()
        self._cache = cache

    @staticmethod
    def normalize(path: str) -> str:
        if not path or path == "/":
            path = "/" + INDEX_DOCUMENT
        return path[1:] if path.startswith("/") else path

    def read(self, relative: str) -> Optional[bytes]:
        """Cached file bytes for ``relative``, or None when it cannot be served."""
        content = self._cache.get(relative)
        if content is not None:
            return content
        try:
            target = (self.root / relative).resolve()
            if not target.is_relative_to(self.root):
                logger.warning({"evt": "static_path_rejected", "path": relative})
                return None
            content = target.read_bytes()
        except (OSError, ValueError) as exc:
            logger.info({"evt": "static_read_error", "path": relative, "error": str(exc)})
            return None
        self._cache.put(relative, content)
        return content

    def resolve(self, path: str) -> ResponseEnvelope:
        relative = self.normalize(path)
        content = self.read(relative)
        if content is None:
            return self._fallback(path)
        content_type = content_type_for(relative)
        return ResponseEnvelope.from_content(
            content,
            content_type,
            headers={"Cache-Control": cache_control_for(content_type)},
        )

    def _fallback(self, path: str) -> ResponseEnvelope:
        index = self.read(INDEX_DOCUMENT)
        if index is not None:
            logger.debug({"evt": "spa_fallback", "path": path})
            return ResponseEnvelope.from_content(index, "text/html", headers={"Cache-Control": NO_STORE})
        logger.warning({"evt": "static_not_found", "path": path})
        return ResponseEnvelope(
            status_code=404,
            headers={"Content-Type": "text/html"},
            body=NOT_FOUND_BODY,
        )


class StaticSiteModule(BaseModule):
    """Serves every GET the API does not claim."""

    name = "static_site"

    def __init__(self, resolver: StaticResolver) -> None:
        super().__init__()
        self.resolver = resolver

    def build_routes(self) -> None:
        self.register_route("GET", "*", self.serve, kind=RouteKind.FALLBACK)

    def serve(self, request: Request) -> ResponseEnvelope:
        return self.resolver.resolve(request.path)


__all__ = [
    "DEFAULT_MIME",
    "MIME_TYPES",
    "StaticResolver",
    "StaticSiteModule",
    "cache_control_for",
    "content_type_for",
]
