"""Base class for modules that contribute routes to the core."""

from __future__ import annotations

from typing import List, Optional

from core.core import Core, RequestHandler, Route, RouteKind


class BaseModule:
    """Default implementation that other modules can extend."""

    name = "base"

    def __init__(self) -> None:
        self.core: Optional[Core] = None
        self._routes: List[Route] = []

    # Lifecycle -----------------------------------------------------------
    def attach(self, core: Core) -> None:
        self.core = core
        self._routes = []
        self.build_routes()

    # Route registration --------------------------------------------------
    def register_route(
        self,
        method: str,
        pattern: str,
        handler: RequestHandler,
        kind: RouteKind = RouteKind.EXACT,
    ) -> None:
        route = Route(method=method.upper(), pattern=pattern, handler=handler, kind=kind)
        if any(existing.key == route.key for existing in self._routes):
            raise ValueError(f"Route '{method} {pattern}' already registered in module '{self.name}'")
        self._routes.append(route)

    def build_routes(self) -> None:
        """Modules override to declare their routes via ``register_route``."""

    def get_routes(self) -> List[Route]:
        return list(self._routes)

    @property
    def settings(self):
        if self.core is None:
            raise RuntimeError("Module is not attached to a core")
        return self.core.settings
