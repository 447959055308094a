"""
Event endpoints.

These routes expose listing, search, CRUD and registration for
teaching events.  Handlers delegate to ``EventService`` and
``RegistrationService`` and translate service errors into HTTP
errors; the JSON error body is shaped by the handlers in ``main``.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Path, Query, status

from kids_events_api.app.core.exceptions import (
    CapacityExceededError,
    NotFoundError,
    ValidationFailedError,
)
from kids_events_api.app.schemas.base import MessageResponse
from kids_events_api.app.schemas.event import EventRead, RegistrationCreate
from kids_events_api.app.services.event_service import EventService
from kids_events_api.app.services.registration_service import RegistrationService


router = APIRouter()


def _validation_error(exc: ValidationFailedError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "message": "Validation failed",
            "errors": [violation.to_dict() for violation in exc.violations],
        },
    )


@router.get("", response_model=List[EventRead], include_in_schema=False)
@router.get("/", response_model=List[EventRead])
async def list_events() -> List[EventRead]:
    """List upcoming events, earliest first."""
    return await EventService.list_upcoming()


@router.get("/search/filter", response_model=List[EventRead])
async def search_events(
    subject: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    min_age: Optional[int] = Query(None, alias="minAge", ge=0, le=150),
    max_age: Optional[int] = Query(None, alias="maxAge", ge=0, le=150),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
) -> List[EventRead]:
    """Search upcoming events.

    - **subject**, **city**, **state**: case‑insensitive substring.
    - **minAge**, **maxAge**: overlap with the event's suggested age range.
    - **startDate**, **endDate**: inclusive bounds on the start time (ISO).
    """
    return await EventService.search_events(
        subject=subject,
        city=city,
        state=state,
        min_age=min_age,
        max_age=max_age,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event_id: str) -> EventRead:
    """Retrieve a single event by its ID."""
    try:
        return await EventService.get_event(event_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("", response_model=EventRead, status_code=status.HTTP_201_CREATED, include_in_schema=False)
@router.post("/", response_model=EventRead, status_code=status.HTTP_201_CREATED)
async def create_event(payload: Dict[str, Any] = Body(...)) -> EventRead:
    """Create a new event from a full event payload."""
    try:
        return await EventService.create_event(payload)
    except ValidationFailedError as e:
        raise _validation_error(e) from e


@router.put("/{event_id}", response_model=EventRead)
async def update_event(event_id: str, updates: Dict[str, Any] = Body(...)) -> EventRead:
    """Update an existing event.

    Only the supplied fields change; dotted keys such as
    ``location.city`` change a single nested field.
    """
    try:
        return await EventService.update_event(event_id, updates)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValidationFailedError as e:
        raise _validation_error(e) from e


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(event_id: str) -> MessageResponse:
    """Delete an event."""
    try:
        await EventService.delete_event(event_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return MessageResponse(message="Event deleted successfully")


@router.post("/{event_id}/register", response_model=EventRead)
async def register_participant(
    registration: RegistrationCreate,
    event_id: str = Path(..., description="ID of the event"),
) -> EventRead:
    """Register a child for an event.

    Returns HTTP 400 when the event is already full.
    """
    try:
        return await RegistrationService.register_participant(event_id, registration)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except CapacityExceededError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete("/{event_id}/register/{participant_email}", response_model=EventRead)
async def cancel_registration(
    event_id: str = Path(..., description="ID of the event"),
    participant_email: str = Path(..., description="Parent email used at registration"),
) -> EventRead:
    """Cancel the first registration made with the given parent email."""
    try:
        return await RegistrationService.cancel_registration(event_id, participant_email)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
