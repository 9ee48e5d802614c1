"""Request router that owns the route table and the response envelope contract."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from .envelope import (
    JSON_CONTENT_TYPE,
    SECURITY_HEADERS,
    Request,
    ResponseEnvelope,
    cors_headers,
    error_response,
    now_iso,
)
from .errors import DataUnavailableError
from .settings import Settings

logger = logging.getLogger("certopedia.router")


class RequestHandler(Protocol):
    """Typed callable for route handlers."""

    def __call__(self, request: Request) -> ResponseEnvelope: ...


class RouteKind(Enum):
    EXACT = "exact"
    PREFIX = "prefix"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Route:
    method: str
    pattern: str
    handler: RequestHandler
    kind: RouteKind = RouteKind.EXACT

    @property
    def key(self) -> Tuple[str, str, RouteKind]:
        return (self.method, self.pattern, self.kind)

    def matches(self, method: str, path: str) -> bool:
        if method != self.method:
            return False
        if self.kind is RouteKind.EXACT:
            return path == self.pattern
        if self.kind is RouteKind.PREFIX:
            return path.startswith(self.pattern)
        return True


class Module(Protocol):
    """Protocol describing the interface the core expects from modules."""

    name: str

    def attach(self, core: "Core") -> None: ...

    def get_routes(self) -> List[Route]: ...


class Core:
    """Dispatches requests through the route table and stamps shared headers."""

    def __init__(
        self,
        modules: Optional[Iterable[Module]] = None,
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._modules: Dict[str, Module] = {}
        self._exact: Dict[Tuple[str, str], Route] = {}
        self._prefixes: List[Route] = []
        self._fallbacks: Dict[str, Route] = {}
        self.default_headers: Dict[str, str] = dict(SECURITY_HEADERS)
        self.default_headers.update(cors_headers(self.settings.allowed_origin))
        if modules:
            for module in modules:
                self.register_module(module)

    @property
    def modules(self) -> Dict[str, Module]:
        """Expose registered modules (read-only)."""
        return dict(self._modules)

    @property
    def methods(self) -> frozenset:
        found = {method for method, _ in self._exact}
        found.update(route.method for route in self._prefixes)
        found.update(self._fallbacks)
        return frozenset(found)

    def register_module(self, module: Module) -> None:
        """Attach a module and add its routes to the table."""
        if module.name in self._modules:
            raise ValueError(f"Module '{module.name}' already registered")
        module.attach(self)
        for route in module.get_routes():
            self.add_route(route)
        self._modules[module.name] = module

    def add_route(self, route: Route) -> None:
        method = route.method.upper()
        if route.kind is RouteKind.EXACT:
            if (method, route.pattern) in self._exact:
                raise ValueError(f"Route '{method} {route.pattern}' already bound")
            self._exact[(method, route.pattern)] = route
        elif route.kind is RouteKind.PREFIX:
            if any(existing.key == route.key for existing in self._prefixes):
                raise ValueError(f"Prefix route '{method} {route.pattern}' already bound")
            self._prefixes.append(route)
            self._prefixes.sort(key=lambda item: len(item.pattern), reverse=True)
        else:
            if method in self._fallbacks:
                raise ValueError(f"Fallback route for '{method}' already bound")
            self._fallbacks[method] = route

    def resolve(self, method: str, path: str) -> Optional[Route]:
        """Exact match first, then the longest prefix, then the method's fallback."""
        method = method.upper()
        route = self._exact.get((method, path))
        if route is not None:
            return route
        for candidate in self._prefixes:
            if candidate.matches(method, path):
                return candidate
        return self._fallbacks.get(method)

    def dispatch(self, request: Request) -> ResponseEnvelope:
        """Route ``request`` and return a complete envelope; never raises."""
        method = request.method.upper()
        try:
            if method == "OPTIONS":
                envelope = ResponseEnvelope(status_code=200)
            elif method not in self.methods:
                envelope = error_response(
                    405, "Method Not Allowed", f"HTTP method {method} is not supported"
                )
            else:
                route = self.resolve(method, request.path)
                if route is None:
                    logger.info({"evt": "route_not_found", "method": method, "path": request.path})
                    envelope = error_response(404, "Not Found", f"Path {request.path} not found")
                else:
                    envelope = route.handler(request)
        except DataUnavailableError as exc:
            logger.error({"evt": "data_unavailable", "path": request.path, "error": str(exc)})
            envelope = error_response(500, "Data Unavailable", "CERT data could not be loaded")
        except Exception:
            logger.exception({"evt": "handler_error", "method": method, "path": request.path})
            envelope = error_response(
                500,
                "Internal Server Error",
                "An unexpected error occurred",
                timestamp=now_iso(),
            )
        envelope = _apply_etag(request, envelope)
        return envelope.with_defaults(self.default_headers)


def body_etag(body: str) -> str:
    return '"' + hashlib.sha1(body.encode("utf-8")).hexdigest() + '"'


def _apply_etag(request: Request, envelope: ResponseEnvelope) -> ResponseEnvelope:
    if envelope.status_code != 200 or envelope.content_type != JSON_CONTENT_TYPE:
        return envelope
    etag = body_etag(envelope.body)
    headers = dict(envelope.headers)
    headers["ETag"] = etag
    if request.header("If-None-Match") == etag:
        headers.pop("Content-Type", None)
        return ResponseEnvelope(status_code=304, headers=headers)
    return ResponseEnvelope(envelope.status_code, headers, envelope.body, envelope.is_binary)


__all__ = ["Core", "Module", "RequestHandler", "Route", "RouteKind", "body_etag"]
