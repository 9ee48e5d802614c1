"""Filter and aggregate views over the CERT record set.

Every function here is pure: it reads the records it is given and never touches
the Content Store.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from core.envelope import format_timestamp

from .records import Record

FILTER_PARAMS = ("search", "sector", "country", "pgp")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class FilterSpec:
    search: Optional[str] = None
    sector: Optional[str] = None
    country: Optional[str] = None
    pgp_only: bool = False

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "FilterSpec":
        return cls(
            search=query.get("search") or None,
            sector=query.get("sector") or None,
            country=query.get("country") or None,
            pgp_only=query.get("pgp") == "true",
        )

    def matches(self, record: Record) -> bool:
        if self.search:
            term = self.search.lower()
            haystack = (
                record.country,
                record.name,
                record.full_name,
                record.sector,
                record.description,
            )
            if not any(term in value.lower() for value in haystack):
                return False
        if self.sector and self.sector != "all":
            if record.sector.lower() != self.sector.lower():
                return False
        if self.country and record.country.lower() != self.country.lower():
            return False
        if self.pgp_only and not record.pgp_available:
            return False
        return True


def echo_filters(query: Mapping[str, str]) -> Dict[str, str]:
    """The filter parameters the caller actually supplied, as given."""
    return {name: query[name] for name in FILTER_PARAMS if query.get(name) is not None}


def filter_records(records: Iterable[Record], spec: FilterSpec) -> List[Record]:
    return [record for record in records if spec.matches(record)]


def latest_update(records: Iterable[Record]) -> datetime:
    latest = _EPOCH
    for record in records:
        moment = record.last_updated_at
        if moment is not None and moment > latest:
            latest = moment
    return latest


def summarize(records: Sequence[Record]) -> Dict[str, Any]:
    sectors: Dict[str, int] = {}
    for record in records:
        sectors[record.sector] = sectors.get(record.sector, 0) + 1
    return {
        "totalCerts": len(records),
        "totalCountries": len({record.country for record in records}),
        "sectorsCount": sectors,
        "pgpEnabled": sum(1 for record in records if record.pgp_available),
        "lastUpdated": format_timestamp(latest_update(records)),
        # Only verified records pass validation.
        "verificationRate": "100%",
    }


def country_counts(records: Iterable[Record]) -> List[Dict[str, Any]]:
    counts = Counter(record.country for record in records)
    return [{"name": name, "count": counts[name]} for name in sorted(counts)]


def group_by_sector(records: Iterable[Record]) -> List[Dict[str, Any]]:
    groups: Dict[str, Dict[str, Any]] = {}
    for record in records:
        group = groups.setdefault(record.sector, {"name": record.sector, "count": 0, "certs": []})
        group["count"] += 1
        group["certs"].append({"name": record.name, "country": record.country})
    return list(groups.values())


__all__ = [
    "FILTER_PARAMS",
    "FilterSpec",
    "country_counts",
    "echo_filters",
    "filter_records",
    "group_by_sector",
    "latest_update",
    "summarize",
]
