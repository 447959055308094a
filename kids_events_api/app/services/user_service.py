"""
Business logic for users.

Users are stored as JSON documents with the password kept as a
PBKDF2 hash (see ``core.security``).  No HTTP route uses this service
yet; it is the record store that account features will build on.
"""

import logging
import sqlite3
import uuid
from typing import Any, Mapping, Optional

from ..core.db import dump_document, get_cursor, load_document, utcnow, write_transaction
from ..core.exceptions import (
    DuplicateEmailError,
    NotFoundError,
    ValidationFailedError,
    Violation,
)
from ..core.security import hash_password, verify_password
from ..schemas.user import EventRelation, UserCreate, UserRead, UserRecord
from .validation import validate_document

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = {"_id", "id", "createdAt"}


def _public(record: UserRecord) -> UserRead:
    return UserRead.model_validate(record.model_dump(exclude={"password"}))


def _fetch_record(cursor: sqlite3.Cursor, user_id: str) -> UserRecord:
    row = cursor.execute("SELECT document FROM users WHERE id = ?", (user_id,)).fetchone()
    if not row:
        raise NotFoundError("User not found")
    return UserRecord.model_validate(load_document(row))


def _fetch_record_by_email(cursor: sqlite3.Cursor, email: str) -> Optional[UserRecord]:
    row = cursor.execute(
        "SELECT document FROM users WHERE email = ?", (email.strip().lower(),)
    ).fetchone()
    return UserRecord.model_validate(load_document(row)) if row else None


def _save_record(cursor: sqlite3.Cursor, record: UserRecord, insert: bool = False) -> None:
    document = dump_document(record.model_dump(mode="json", by_alias=True))
    columns = (record.email, record.role.value, record.address.city, record.address.state)
    try:
        if insert:
            cursor.execute(
                "INSERT INTO users (id, email, role, city, state, document) VALUES (?, ?, ?, ?, ?, ?)",
                (record.id, *columns, document),
            )
        else:
            cursor.execute(
                "UPDATE users SET email = ?, role = ?, city = ?, state = ?, document = ? WHERE id = ?",
                (*columns, document, record.id),
            )
    except sqlite3.IntegrityError as exc:
        raise DuplicateEmailError(f"User with email {record.email} already exists") from exc


class UserService:
    """Service for storing and looking up users."""

    @classmethod
    async def create_user(cls, data: UserCreate) -> UserRead:
        """Create a new user.

        The email is stored trimmed and lower‑cased and must be unique;
        the password is hashed before it is written.
        """
        now = utcnow()
        record = UserRecord(
            **data.model_dump(exclude={"password"}),
            id=uuid.uuid4().hex,
            password=hash_password(data.password),
            last_login=now,
            created_at=now,
            updated_at=now,
        )
        with get_cursor() as cursor:
            _save_record(cursor, record, insert=True)
        logger.info("Created %s user %s (%s)", record.role.value, record.id, record.email)
        return _public(record)

    @classmethod
    async def get_user(cls, user_id: str) -> UserRead:
        with get_cursor() as cursor:
            return _public(_fetch_record(cursor, user_id))

    @classmethod
    async def get_user_by_email(cls, email: str) -> UserRead:
        with get_cursor() as cursor:
            record = _fetch_record_by_email(cursor, email)
        if record is None:
            raise NotFoundError("User not found")
        return _public(record)

    @classmethod
    async def update_user(cls, user_id: str, updates: Mapping[str, Any]) -> UserRead:
        """Replace top‑level fields of a user.

        Keys use the wire names (``firstName``, ``address``).  A new
        ``password`` is hashed; ``updatedAt`` is refreshed.  Raises
        ``ValidationFailedError`` if the result breaks the schema.
        """
        with write_transaction() as cursor:
            record = _fetch_record(cursor, user_id)
            document = record.model_dump(mode="json", by_alias=True)
            violations = []
            for key, value in updates.items():
                if key in IMMUTABLE_FIELDS:
                    violations.append(Violation(field=key, message="Field is immutable", kind="immutable"))
                    continue
                if key == "password" and isinstance(value, str) and value:
                    value = hash_password(value)
                document[key] = value
            if violations:
                raise ValidationFailedError(violations)
            document["updatedAt"] = utcnow()
            violations = validate_document(UserRecord, document)
            if violations:
                raise ValidationFailedError(violations)
            updated = UserRecord.model_validate(document)
            _save_record(cursor, updated)
        logger.info("Updated user %s fields %s", user_id, sorted(updates))
        return _public(updated)

    @classmethod
    async def check_password(cls, email: str, candidate: str) -> bool:
        """Return ``True`` if ``candidate`` matches the stored password.

        An unknown email gives ``False``.
        """
        with get_cursor() as cursor:
            record = _fetch_record_by_email(cursor, email)
        if record is None:
            return False
        return verify_password(candidate, record.password)

    @classmethod
    async def add_event_reference(
        cls, user_id: str, relation: EventRelation, event_id: str
    ) -> UserRead:
        """Append ``event_id`` to one of the user's event lists once."""
        attribute = {
            EventRelation.HOSTED: "hosted_events",
            EventRelation.REGISTERED: "registered_events",
            EventRelation.WAITLISTED: "waitlisted_events",
        }[relation]
        with write_transaction() as cursor:
            record = _fetch_record(cursor, user_id)
            references = getattr(record, attribute)
            if event_id not in references:
                references.append(event_id)
                record.updated_at = utcnow()
                _save_record(cursor, record)
        return _public(record)
