"""Core package exposing the router, the TTL cache and the envelope types."""

from .cache import TTLCache
from .core import Core, Route, RouteKind
from .envelope import Request, ResponseEnvelope
from .errors import DataUnavailableError, DatasetValidationError
from .settings import Settings

__all__ = [
    "Core",
    "DataUnavailableError",
    "DatasetValidationError",
    "Request",
    "ResponseEnvelope",
    "Route",
    "RouteKind",
    "Settings",
    "TTLCache",
]
