"""
Error kinds raised by the service layer.

Services signal exactly one of these; the API layer maps them to HTTP
status codes and ``{"message": ...}`` bodies.  ``NotFoundError`` and
the validation errors derive from ``ValueError`` so callers that only
care about "bad input" can catch them together.
"""

from dataclasses import asdict, dataclass
from typing import List


@dataclass
class Violation:
    """A single constraint failure for one field of a payload."""

    field: str
    message: str
    kind: str

    def to_dict(self) -> dict:
        return asdict(self)


class NotFoundError(ValueError):
    """The requested event, registration or user does not exist."""


class ValidationFailedError(ValueError):
    """A payload failed required‑field, type, enum or range constraints."""

    def __init__(self, violations: List[Violation]):
        self.violations = violations
        fields = ", ".join(v.field for v in violations)
        super().__init__(f"Validation failed: {fields}")


class CapacityExceededError(ValueError):
    """Registration attempted against an event that is already full."""


class DuplicateEmailError(ValueError):
    """A user with the same email is already stored."""


class StoreUnavailableError(RuntimeError):
    """The document store could not be opened."""
