"""Environment-driven settings shared by the router, the handlers and the entry points."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

REPO_ROOT = Path(__file__).resolve().parent.parent


def _read_env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return default


def _read_env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "on", "yes")


def _read_env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if not raw:
        return default
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = REPO_ROOT / path
    return path


@dataclass(frozen=True)
class Settings:
    static_root: Path = REPO_ROOT / "dist"
    data_file: Path = REPO_ROOT / "data" / "certs.json"
    static_cache_ttl: float = 300.0
    data_cache_ttl: float = 600.0
    allowed_origin: str = "https://cert.danieloo.com"
    api_prefix: str = "/api"
    api_version: str = "1.0"
    stage: str = "prod"
    region: str = "unknown"
    strict_data: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_env(cls, *, root: Optional[Path] = None) -> "Settings":
        """Build settings from the process environment.

        ``root`` replaces the repository root as the base for the default asset
        and dataset locations.
        """
        base = root or REPO_ROOT
        return cls(
            static_root=_read_env_path("CERTOPEDIA_STATIC_ROOT", base / "dist"),
            data_file=_read_env_path("CERTOPEDIA_DATA_FILE", base / "data" / "certs.json"),
            static_cache_ttl=float(max(0, _read_env_int("STATIC_CACHE_TTL", 300))),
            data_cache_ttl=float(max(0, _read_env_int("DATA_CACHE_TTL", 600))),
            allowed_origin=os.getenv("ALLOWED_ORIGIN", "https://cert.danieloo.com").strip(),
            api_version=os.getenv("API_VERSION", "1.0"),
            stage=os.getenv("STAGE", "prod"),
            region=os.getenv("AWS_REGION", "unknown"),
            strict_data=_read_env_bool("DATA_STRICT", True),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_read_env_int("PORT", 5000),
        )


__all__ = ["Settings", "REPO_ROOT"]
