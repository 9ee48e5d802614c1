"""Exception types raised below the router boundary."""

from __future__ import annotations

from typing import Sequence


class CertopediaError(Exception):
    """Base class for service errors."""


class DataUnavailableError(CertopediaError):
    """The backing dataset could not be read, parsed or trusted."""


class DatasetValidationError(DataUnavailableError):
    """The dataset parsed but failed record validation."""

    def __init__(self, violations: Sequence) -> None:
        self.violations = list(violations)
        super().__init__(f"dataset failed validation with {len(self.violations)} violation(s)")


__all__ = ["CertopediaError", "DataUnavailableError", "DatasetValidationError"]
