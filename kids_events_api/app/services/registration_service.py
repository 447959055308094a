"""
Business logic for event registrations.

Registering appends a participant to the event document and
cancelling removes one.  Both run the whole read‑check‑write sequence
inside one ``BEGIN IMMEDIATE`` transaction, so two requests racing
for the last seat cannot both succeed.  After either operation
``currentEnrollment`` equals the number of participants.
"""

import logging

from ..core.db import utcnow, write_transaction
from ..core.exceptions import CapacityExceededError, NotFoundError
from ..schemas.event import EventRead, Participant, RegistrationCreate
from .event_service import fetch_event, save_event

logger = logging.getLogger(__name__)


class RegistrationService:
    """Service for registering and cancelling participants."""

    @classmethod
    async def register_participant(cls, event_id: str, registration: RegistrationCreate) -> EventRead:
        """Add a participant to an event.

        Raises ``NotFoundError`` if the event does not exist and
        ``CapacityExceededError`` if ``currentEnrollment`` has already
        reached ``maxCapacity``.  The same parent and child may
        register more than once.
        """
        with write_transaction() as cursor:
            event = fetch_event(cursor, event_id)
            if event.current_enrollment >= event.max_capacity:
                logger.info(
                    "Rejected registration of %s for full event %s (%s/%s)",
                    registration.parent_email,
                    event_id,
                    event.current_enrollment,
                    event.max_capacity,
                )
                raise CapacityExceededError("Event is full")
            now = utcnow()
            event.participants.append(Participant(**registration.model_dump(), registered_at=now))
            event.current_enrollment = len(event.participants)
            event.last_updated = now
            save_event(cursor, event)
        logger.info(
            "Registered %s (%s) for event %s, enrollment %s/%s",
            registration.child_name,
            registration.parent_email,
            event_id,
            event.current_enrollment,
            event.max_capacity,
        )
        return event

    @classmethod
    async def cancel_registration(cls, event_id: str, parent_email: str) -> EventRead:
        """Remove the first participant registered under ``parent_email``.

        The email must match exactly, including case.  Only one entry is
        removed even if several share the email.
        """
        with write_transaction() as cursor:
            event = fetch_event(cursor, event_id)
            index = next(
                (i for i, p in enumerate(event.participants) if p.parent_email == parent_email),
                None,
            )
            if index is None:
                raise NotFoundError("Registration not found")
            del event.participants[index]
            event.current_enrollment = len(event.participants)
            event.last_updated = utcnow()
            save_event(cursor, event)
        logger.info(
            "Cancelled registration of %s for event %s, enrollment %s/%s",
            parent_email,
            event_id,
            event.current_enrollment,
            event.max_capacity,
        )
        return event
