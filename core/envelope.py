"""Transport-neutral request and response shapes used by every handler."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

SECURITY_HEADERS: Dict[str, str] = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
        "font-src 'self' https://fonts.gstatic.com; "
        "img-src 'self' data: https:; "
        "connect-src 'self'; "
        "frame-ancestors 'none';"
    ),
}

JSON_CONTENT_TYPE = "application/json"


def cors_headers(origin: str) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Max-Age": "86400",
    }


def is_textual(content_type: str) -> bool:
    return (
        content_type.startswith("text/")
        or "javascript" in content_type
        or "json" in content_type
    )


def now_iso() -> str:
    """Current UTC time in the millisecond ISO-8601 form browsers emit."""
    return format_timestamp(datetime.now(timezone.utc))


def format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


@dataclass
class Request:
    method: str
    path: str = "/"
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass
class ResponseEnvelope:
    """Status, headers and a text body; binary payloads travel base64-encoded."""

    status_code: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    is_binary: bool = False

    @classmethod
    def from_content(
        cls,
        content: bytes,
        content_type: str,
        *,
        status_code: int = 200,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "ResponseEnvelope":
        merged = {"Content-Type": content_type}
        merged.update(headers or {})
        if is_textual(content_type):
            return cls(status_code, merged, content.decode("utf-8", errors="replace"), False)
        return cls(status_code, merged, base64.b64encode(content).decode("ascii"), True)

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    def body_bytes(self) -> bytes:
        if self.is_binary:
            return base64.b64decode(self.body.encode("ascii"))
        return self.body.encode("utf-8")

    def with_defaults(self, defaults: Mapping[str, str]) -> "ResponseEnvelope":
        """Copy with ``defaults`` filled in beneath the handler's own headers."""
        headers = dict(defaults)
        headers.update(self.headers)
        return ResponseEnvelope(self.status_code, headers, self.body, self.is_binary)

    def to_lambda(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
            "isBase64Encoded": self.is_binary,
        }


def json_response(
    payload: Any,
    *,
    status_code: int = 200,
    cache_control: Optional[str] = None,
) -> ResponseEnvelope:
    headers = {"Content-Type": JSON_CONTENT_TYPE}
    if cache_control:
        headers["Cache-Control"] = cache_control
    body = json.dumps(payload, indent=2, ensure_ascii=False)
    return ResponseEnvelope(status_code=status_code, headers=headers, body=body)


def error_response(status_code: int, error: str, message: str, **extra: Any) -> ResponseEnvelope:
    payload: Dict[str, Any] = {"error": error, "message": message}
    payload.update(extra)
    return json_response(payload, status_code=status_code)


__all__ = [
    "JSON_CONTENT_TYPE",
    "Request",
    "ResponseEnvelope",
    "SECURITY_HEADERS",
    "cors_headers",
    "error_response",
    "format_timestamp",
    "is_textual",
    "json_response",
    "now_iso",
]
