"""Serverless entry point for API Gateway HTTP (v2) and REST (v1) events."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import parse_qs, unquote

from core.core import Core
from core.envelope import Request
from modules import build_core

logger = logging.getLogger("certopedia.web")

LambdaHandler = Callable[[Mapping[str, Any], Any], Dict[str, Any]]

# Built on the first invocation and reused while the process stays warm.
_CORE: Optional[Core] = None


def request_from_event(event: Mapping[str, Any]) -> Request:
    context = event.get("requestContext") or {}
    http = context.get("http") or {}
    method = http.get("method") or event.get("httpMethod") or "GET"
    path = event.get("rawPath") or event.get("path") or "/"

    raw_query = event.get("rawQueryString")
    if raw_query:
        query = {key: values[0] for key, values in parse_qs(raw_query, keep_blank_values=True).items()}
    else:
        query = dict(event.get("queryStringParameters") or {})

    return Request(
        method=str(method).upper(),
        path=unquote(path),
        query=query,
        headers=dict(event.get("headers") or {}),
    )


def make_handler(core: Core) -> LambdaHandler:
    def _handle(event: Mapping[str, Any], context: Any = None) -> Dict[str, Any]:
        request = request_from_event(event)
        logger.debug({"evt": "lambda_request", "method": request.method, "path": request.path})
        return core.dispatch(request).to_lambda()

    return _handle


def handler(event: Mapping[str, Any], context: Any = None) -> Dict[str, Any]:
    global _CORE
    if _CORE is None:
        _CORE = build_core()
    return make_handler(_CORE)(event, context)
