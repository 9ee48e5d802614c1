#!/usr/bin/env python3
"""Check a CERT dataset file against the record rules the service enforces on load.

Exits non-zero when the file is missing, is not a JSON array, or has any
violation, so it can gate CI before a dataset change is deployed.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from modules.query_engine import summarize
from modules.records import build_records, validate_dataset

REPO_ROOT = Path(__file__).resolve().parent.parent


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate the CERT dataset file.")
    parser.add_argument(
        "path",
        nargs="?",
        default=str(REPO_ROOT / "data" / "certs.json"),
        help="Dataset to validate (default: data/certs.json).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    path = Path(args.path)
    if not path.is_file():
        print(f"Error: {path} not found", file=sys.stderr)
        return 1
    try:
        entries = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        print(f"Error: invalid JSON in {path}: {exc}", file=sys.stderr)
        return 1
    if not isinstance(entries, list):
        print("Error: dataset must be a JSON array", file=sys.stderr)
        return 1

    print(f"Validating {len(entries)} CERT entries...")
    violations = validate_dataset(entries)
    if violations:
        for violation in violations:
            print(f"  - {violation}", file=sys.stderr)
        print(f"Validation failed with {len(violations)} error(s)", file=sys.stderr)
        return 1

    stats = summarize(build_records(entries))
    sectors: List[str] = [f"{name}: {count}" for name, count in stats["sectorsCount"].items()]
    print("All entries are valid.")
    print(f"Summary: {stats['totalCerts']} CERTs from {stats['totalCountries']} countries")
    print(f"PGP-enabled CERTs: {stats['pgpEnabled']}/{stats['totalCerts']}")
    print(f"Sectors: {', '.join(sectors)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
