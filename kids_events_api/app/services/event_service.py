"""
Business logic for events.

Events are stored as JSON documents (see ``core.db``).  ``EventService``
implements listing, search and the create/update/delete operations;
the module‑level helpers ``fetch_event`` and ``save_event`` are shared
with the registration service so both read and write documents the
same way.
"""

import logging
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel

from ..core.db import (
    dump_document,
    get_cursor,
    load_document,
    to_utc_iso,
    utcnow,
    write_transaction,
)
from ..core.exceptions import NotFoundError, ValidationFailedError, Violation
from ..schemas.event import EventRead, EventStatus
from .validation import validate_event

logger = logging.getLogger(__name__)

# Fields a partial update may never touch.
IMMUTABLE_FIELDS = {"_id", "id", "createdAt", "created_at"}


def _index_columns(event: EventRead) -> tuple:
    return (
        event.status.value,
        to_utc_iso(event.date_time),
        event.subject,
        event.location.city,
        event.location.state,
        event.suggested_age_range.min,
        event.suggested_age_range.max,
    )


def _checked(document: Mapping[str, Any]) -> EventRead:
    violations = validate_event(document)
    if violations:
        raise ValidationFailedError(violations)
    return EventRead.model_validate(document)


def fetch_event(cursor: sqlite3.Cursor, event_id: str) -> EventRead:
    """Load one event or raise ``NotFoundError``."""
    row = cursor.execute("SELECT document FROM events WHERE id = ?", (event_id,)).fetchone()
    if not row:
        raise NotFoundError("Event not found")
    return EventRead.model_validate(load_document(row))


def save_event(cursor: sqlite3.Cursor, event: EventRead, insert: bool = False) -> None:
    """Write the full event document and refresh its query columns."""
    document = dump_document(event.model_dump(mode="json", by_alias=True))
    columns = _index_columns(event)
    if insert:
        cursor.execute(
            """
            INSERT INTO events (id, status, date_time, subject, city, state, age_min, age_max, document)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (event.id, *columns, document),
        )
    else:
        cursor.execute(
            """
            UPDATE events
            SET status = ?, date_time = ?, subject = ?, city = ?, state = ?,
                age_min = ?, age_max = ?, document = ?
            WHERE id = ?
            """,
            (*columns, document, event.id),
        )


def wire_path(path: str, model: Type[BaseModel] = EventRead) -> str:
    """Rewrite the snake_case segments of an update key to wire names.

    ``"suggested_age_range.min"`` becomes ``"suggestedAgeRange.min"``.
    Segments the model does not know are kept as they are.
    """
    keys = path.split(".")
    current: Optional[Type[BaseModel]] = model
    for index, key in enumerate(keys):
        if current is None:
            break
        fields = current.model_fields
        field = fields.get(key)
        if field is not None:
            keys[index] = field.alias or key
        else:
            field = next((f for f in fields.values() if f.alias == key), None)
        annotation = field.annotation if field is not None else None
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            current = annotation
        else:
            current = None
    return ".".join(keys)


def apply_set(document: Dict[str, Any], updates: Mapping[str, Any]) -> List[Violation]:
    """Apply ``$set``‑style updates to ``document`` in place.

    A plain key replaces that top‑level field.  A dotted key such as
    ``"location.city"`` replaces only the nested field, creating
    intermediate objects as needed.  Returns violations for keys that
    cannot be applied; ``document`` is then only partially updated and
    must be discarded.
    """
    violations: List[Violation] = []
    for path, value in updates.items():
        keys = path.split(".")
        if keys[0] in IMMUTABLE_FIELDS:
            violations.append(Violation(field=path, message="Field is immutable", kind="immutable"))
            continue
        if not all(keys):
            violations.append(Violation(field=path, message="Invalid field path", kind="invalid_path"))
            continue
        target = document
        for key in keys[:-1]:
            child = target.get(key)
            if child is None:
                child = target[key] = {}
            elif not isinstance(child, dict):
                violations.append(
                    Violation(field=path, message=f"Cannot set a field inside '{key}'", kind="invalid_path")
                )
                break
            target = child
        else:
            target[keys[-1]] = value
    return violations


class EventService:
    """Service for managing teaching events."""

    @classmethod
    async def list_upcoming(cls) -> List[EventRead]:
        """Return all upcoming events ordered by start time."""
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT document FROM events WHERE status = ? ORDER BY date_time ASC, rowid ASC",
                (EventStatus.UPCOMING.value,),
            ).fetchall()
        return [EventRead.model_validate(load_document(row)) for row in rows]

    @classmethod
    async def search_events(
        cls,
        subject: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        min_age: Optional[int] = None,
        max_age: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[EventRead]:
        """Filter upcoming events.

        - ``subject``, ``city``, ``state``: case‑insensitive substring match.
        - ``min_age``/``max_age``: the event's suggested age range must
          overlap the requested one; each bound applies on its own.
        - ``start_date``/``end_date``: inclusive bounds on the start time.

        Empty strings and ``None`` leave a filter out.  Results are
        ordered by start time.
        """
        where_clauses: list[str] = ["status = ?"]
        params: list = [EventStatus.UPCOMING.value]
        for column, value in (("subject", subject), ("city", city), ("state", state)):
            if value:
                where_clauses.append(f"instr(py_casefold({column}), py_casefold(?)) > 0")
                params.append(value)
        if min_age is not None:
            where_clauses.append("age_max >= ?")
            params.append(min_age)
        if max_age is not None:
            where_clauses.append("age_min <= ?")
            params.append(max_age)
        if start_date is not None:
            where_clauses.append("date_time >= ?")
            params.append(to_utc_iso(start_date))
        if end_date is not None:
            where_clauses.append("date_time <= ?")
            params.append(to_utc_iso(end_date))

        query = (
            "SELECT document FROM events WHERE "
            + " AND ".join(where_clauses)
            + " ORDER BY date_time ASC, rowid ASC"
        )
        with get_cursor() as cursor:
            rows = cursor.execute(query, tuple(params)).fetchall()
        return [EventRead.model_validate(load_document(row)) for row in rows]

    @classmethod
    async def get_event(cls, event_id: str) -> EventRead:
        """Retrieve a single event by ID or raise ``NotFoundError``."""
        with get_cursor() as cursor:
            return fetch_event(cursor, event_id)

    @classmethod
    async def create_event(cls, payload: Mapping[str, Any]) -> EventRead:
        """Validate and store a new event.

        A fresh identifier and both timestamps are assigned here; any
        values the caller sent for them are ignored.
        ``currentEnrollment`` defaults to 0 and is otherwise stored as
        given, even when it disagrees with ``participants``.
        """
        document = {key: value for key, value in payload.items() if key not in IMMUTABLE_FIELDS}
        now = utcnow()
        document["_id"] = uuid.uuid4().hex
        document["createdAt"] = now
        document["lastUpdated"] = now
        event = _checked(document)
        with get_cursor() as cursor:
            save_event(cursor, event, insert=True)
        logger.info("Created event %s '%s' hosted by %s", event.id, event.title, event.host_email)
        return event

    @classmethod
    async def update_event(cls, event_id: str, updates: Mapping[str, Any]) -> EventRead:
        """Apply a partial update and return the stored event.

        ``currentEnrollment`` is written exactly as supplied and is not
        reconciled with ``participants`` or ``maxCapacity``.  Keys may
        use either the camelCase or the snake_case field names.
        """
        updates = {wire_path(path): value for path, value in updates.items()}
        with write_transaction() as cursor:
            current = fetch_event(cursor, event_id)
            document = current.model_dump(mode="json", by_alias=True)
            violations = apply_set(document, updates)
            if violations:
                raise ValidationFailedError(violations)
            document["lastUpdated"] = utcnow()
            event = _checked(document)
            save_event(cursor, event)
        logger.info("Updated event %s fields %s", event_id, sorted(updates))
        return event

    @classmethod
    async def delete_event(cls, event_id: str) -> None:
        """Delete an event or raise ``NotFoundError``."""
        with get_cursor() as cursor:
            cursor.execute("DELETE FROM events WHERE id = ?", (event_id,))
            if cursor.rowcount == 0:
                raise NotFoundError("Event not found")
        logger.info("Deleted event %s", event_id)
