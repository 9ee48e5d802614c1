"""CERT record model and the dataset validator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

SECTORS: Tuple[str, ...] = ("Government", "National", "Academic", "Commercial")

REQUIRED_FIELDS: Tuple[str, ...] = (
    "country",
    "name",
    "fullName",
    "website",
    "emergencyContact",
    "email",
    "established",
    "description",
    "sector",
    "verified",
    "lastUpdated",
)

_STRING_FIELDS: Tuple[str, ...] = (
    "country",
    "name",
    "fullName",
    "website",
    "emergencyContact",
    "email",
    "description",
    "sector",
    "lastUpdated",
)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime; naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class PgpKey:
    available: bool
    key_id: Optional[str] = None
    fingerprint: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PgpKey":
        available = data.get("available") is True
        return cls(
            available=available,
            key_id=data.get("keyId") if available else None,
            fingerprint=data.get("fingerprint") if available else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        if not self.available:
            return {"available": False}
        data: Dict[str, Any] = {"available": True, "keyId": self.key_id}
        if self.fingerprint is not None:
            data["fingerprint"] = self.fingerprint
        return data


@dataclass(frozen=True)
class Record:
    country: str
    name: str
    full_name: str
    website: str
    emergency_contact: str
    email: str
    established: Union[int, str]
    description: str
    sector: str
    verified: bool
    last_updated: str
    pgp_key: Optional[PgpKey] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Record":
        pgp = data.get("pgpKey")
        return cls(
            country=data["country"],
            name=data["name"],
            full_name=data["fullName"],
            website=data["website"],
            emergency_contact=data["emergencyContact"],
            email=data["email"],
            established=data["established"],
            description=data["description"],
            sector=data["sector"],
            verified=data["verified"],
            last_updated=data["lastUpdated"],
            pgp_key=PgpKey.from_dict(pgp) if isinstance(pgp, Mapping) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "country": self.country,
            "name": self.name,
            "fullName": self.full_name,
            "website": self.website,
            "emergencyContact": self.emergency_contact,
            "email": self.email,
            "established": self.established,
            "description": self.description,
            "sector": self.sector,
            "verified": self.verified,
            "lastUpdated": self.last_updated,
        }
        if self.pgp_key is not None:
            data["pgpKey"] = self.pgp_key.to_dict()
        return data

    @property
    def pgp_available(self) -> bool:
        return self.pgp_key is not None and self.pgp_key.available

    @property
    def last_updated_at(self) -> Optional[datetime]:
        return parse_timestamp(self.last_updated)


@dataclass(frozen=True)
class Violation:
    index: int
    field: str
    message: str

    def __str__(self) -> str:
        return f"entry {self.index + 1}: {self.field}: {self.message}"


def _is_year(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.strip().isdigit()


def validate_record(data: Any, index: int = 0) -> List[Violation]:
    """Return every problem found in one raw entry; empty means valid."""
    if not isinstance(data, Mapping):
        return [Violation(index, "*", "entry must be an object")]

    violations: List[Violation] = []
    for name in REQUIRED_FIELDS:
        if data.get(name) is None:
            violations.append(Violation(index, name, "missing required field"))
    for name in _STRING_FIELDS:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            violations.append(Violation(index, name, "must be a string"))

    website = data.get("website")
    if isinstance(website, str) and not website.startswith("http"):
        violations.append(Violation(index, "website", "must be a URL starting with http/https"))
    email = data.get("email")
    if isinstance(email, str) and "@" not in email:
        violations.append(Violation(index, "email", "must be a valid email address"))
    sector = data.get("sector")
    if isinstance(sector, str) and sector not in SECTORS:
        violations.append(Violation(index, "sector", f"must be one of: {', '.join(SECTORS)}"))
    if data.get("established") is not None and not _is_year(data.get("established")):
        violations.append(Violation(index, "established", "must be a year"))
    if data.get("verified") is not True:
        violations.append(Violation(index, "verified", "must be true"))
    last_updated = data.get("lastUpdated")
    if isinstance(last_updated, str) and parse_timestamp(last_updated) is None:
        violations.append(Violation(index, "lastUpdated", "must be a valid ISO date string"))

    pgp = data.get("pgpKey")
    if pgp is not None:
        violations.extend(_validate_pgp(pgp, index))
    return violations


def _validate_pgp(pgp: Any, index: int) -> List[Violation]:
    if not isinstance(pgp, Mapping):
        return [Violation(index, "pgpKey", "must be an object")]
    available = pgp.get("available")
    if not isinstance(available, bool):
        return [Violation(index, "pgpKey.available", "must be a boolean")]
    violations: List[Violation] = []
    if available:
        key_id = pgp.get("keyId")
        if not isinstance(key_id, str) or not key_id:
            violations.append(Violation(index, "pgpKey.keyId", "must be a string when available is true"))
    else:
        if pgp.get("keyId") is not None:
            violations.append(Violation(index, "pgpKey.keyId", "must be empty when available is false"))
        if pgp.get("fingerprint") is not None:
            violations.append(Violation(index, "pgpKey.fingerprint", "must be empty when available is false"))
    return violations


def validate_dataset(entries: Sequence[Any]) -> List[Violation]:
    """Validate every entry plus ordering by country and (country, name) uniqueness."""
    violations: List[Violation] = []
    for index, entry in enumerate(entries):
        violations.extend(validate_record(entry, index))

    countries = [entry.get("country") for entry in entries if isinstance(entry, Mapping)]
    if all(isinstance(country, str) for country in countries):
        expected = sorted(countries)
        for position, (found, wanted) in enumerate(zip(countries, expected)):
            if found != wanted:
                violations.append(
                    Violation(position, "country", f'out of alphabetical order: expected "{wanted}", found "{found}"')
                )
                break

    seen = set()
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            continue
        key = (entry.get("country"), entry.get("name"))
        if key in seen:
            violations.append(Violation(index, "name", f"duplicate entry {key[0]}-{key[1]}"))
        seen.add(key)
    return violations


def build_records(entries: Iterable[Mapping[str, Any]]) -> Tuple[Record, ...]:
    return tuple(Record.from_dict(entry) for entry in entries)


__all__ = [
    "PgpKey",
    "REQUIRED_FIELDS",
    "Record",
    "SECTORS",
    "Violation",
    "build_records",
    "parse_timestamp",
    "validate_dataset",
    "validate_record",
]
