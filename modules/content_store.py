"""Read-only CERT dataset backed by a JSON file and the dataset cache."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Tuple

from core.cache import TTLCache
from core.envelope import format_timestamp
from core.errors import DataUnavailableError, DatasetValidationError

from .records import Record, Violation, build_records, validate_dataset, validate_record

DATASET_KEY = "certs"

logger = logging.getLogger("certopedia.data")


@dataclass(frozen=True)
class Snapshot:
    """One complete load of the dataset; replaced wholesale on refresh."""

    records: Tuple[Record, ...]
    loaded_at: datetime
    violations: Tuple[Violation, ...] = ()


class ContentStore:
    def __init__(self, path: Path, cache: TTLCache, *, strict: bool = True) -> None:
        self.path = Path(path)
        self.strict = strict
        self._cache = cache

    def snapshot(self) -> Snapshot:
        """Return the cached snapshot, reloading from disk once it has expired."""
        return self._cache.get_or_load(DATASET_KEY, self.load)

    def records(self) -> Tuple[Record, ...]:
        return self.snapshot().records

    def load(self) -> Snapshot:
        entries = self._read_entries()
        violations = validate_dataset(entries)
        if violations:
            logger.warning(
                {
                    "evt": "dataset_validation_failed",
                    "path": str(self.path),
                    "violations": [str(item) for item in violations[:20]],
                    "count": len(violations),
                }
            )
            if self.strict:
                raise DatasetValidationError(violations)
            entries = [entry for index, entry in enumerate(entries) if not validate_record(entry, index)]
            if not entries:
                raise DataUnavailableError("no valid records in dataset")
        records = build_records(entries)
        logger.info({"evt": "dataset_loaded", "path": str(self.path), "records": len(records)})
        return Snapshot(
            records=records,
            loaded_at=datetime.now(timezone.utc),
            violations=tuple(violations),
        )

    def _read_entries(self) -> List[Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DataUnavailableError(f"cannot read {self.path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise DataUnavailableError(f"invalid JSON in {self.path}: {exc}") from exc
        if not isinstance(data, list):
            raise DataUnavailableError(f"{self.path} must contain a JSON array")
        if not data:
            raise DataUnavailableError(f"{self.path} contains no records")
        return data

    def file_status(self) -> Dict[str, Any]:
        try:
            stat = self.path.stat()
        except OSError as exc:
            return {"status": "error", "error": str(exc)}
        return {
            "status": "ok",
            "size": stat.st_size,
            "lastModified": format_timestamp(datetime.fromtimestamp(stat.st_mtime, timezone.utc)),
        }


__all__ = ["ContentStore", "DATASET_KEY", "Snapshot"]
