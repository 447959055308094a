"""
Explicit validation pass for stored documents.

``validate_event`` checks a complete candidate event document against
the event schema and reports every failure as a ``Violation`` rather
than raising on the first one.  Services call it before each create
and update and raise ``ValidationFailedError`` when the list is not
empty.
"""

from typing import Any, Iterable, List, Mapping

from pydantic import BaseModel, ValidationError

from ..core.exceptions import Violation
from ..schemas.event import EventRead


def _field_path(loc: Iterable[Any]) -> str:
    # FastAPI prefixes request errors with the source ("body", "query").
    parts = [str(part) for part in loc]
    if parts and parts[0] in {"body", "query", "path"}:
        parts = parts[1:]
    return ".".join(parts) or "document"


def violations_from_errors(errors: Iterable[Mapping[str, Any]]) -> List[Violation]:
    """Convert pydantic/FastAPI error dicts into ``Violation`` objects."""
    return [
        Violation(
            field=_field_path(error.get("loc", ())),
            message=str(error.get("msg", "Invalid value")),
            kind=str(error.get("type", "value_error")),
        )
        for error in errors
    ]


def validate_document(model: type[BaseModel], document: Mapping[str, Any]) -> List[Violation]:
    """Validate ``document`` against ``model`` and collect all violations."""
    try:
        model.model_validate(document)
    except ValidationError as exc:
        return violations_from_errors(exc.errors())
    return []


def validate_event(document: Mapping[str, Any]) -> List[Violation]:
    """Validate a full event document (wire names, including ``_id``)."""
    return validate_document(EventRead, document)
