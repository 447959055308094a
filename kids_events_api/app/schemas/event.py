"""
Pydantic models for event data.

``EventBase`` holds the caller‑supplied fields of a teaching event;
``EventCreate`` is the create payload and ``EventRead`` the stored
document, which adds the identifier (``_id`` on the wire) and the
timestamps.  ``RegistrationCreate`` is the body of a registration
request and ``Participant`` the record kept on the event.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import CamelModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    CANCELLED = "cancelled"


class Location(CamelModel):
    address: str = Field(..., min_length=1, examples=["12 Oak Street"])
    city: str = Field(..., min_length=1, examples=["Seattle"])
    state: str = Field(..., min_length=1, examples=["WA"])
    zip_code: str = Field(..., min_length=1, examples=["98101"])


class AgeRange(CamelModel):
    min: int = Field(..., ge=0, le=150, examples=[4])
    max: int = Field(..., ge=0, le=150, examples=[10])


class RegistrationCreate(CamelModel):
    """Schema for registering a child for an event."""

    parent_name: str = Field(..., min_length=1, examples=["Li Na"])
    parent_email: str = Field(..., min_length=1, examples=["li.na@example.com"])
    parent_wechat_id: str = Field(..., min_length=1, examples=["lina_wx"])
    child_name: str = Field(..., min_length=1, examples=["Mia"])
    child_age: int = Field(..., ge=0, examples=[6])
    notes: Optional[str] = Field(None, examples=["Allergic to peanuts"])


class Participant(RegistrationCreate):
    """A registration as stored on the event."""

    registered_at: datetime = Field(default_factory=_utcnow)


class EventBase(CamelModel):
    title: str = Field(..., min_length=1, examples=["Fun with Fractions"])
    host_name: str = Field(..., min_length=1, examples=["Wang Fang"])
    host_email: str = Field(..., min_length=1, examples=["wang.fang@example.com"])
    host_wechat_id: str = Field(..., min_length=1, examples=["wangfang_wx"])
    description: str = Field(..., min_length=1, examples=["Hands-on fractions with pizza slices"])

    location: Location

    date_time: datetime = Field(..., examples=["2026-11-07T10:00:00Z"])
    duration: int = Field(..., description="Length in minutes", examples=[60])

    max_capacity: int = Field(..., gt=0, examples=[8])
    current_enrollment: int = Field(0, ge=0)

    suggested_age_range: AgeRange

    subject: str = Field(..., min_length=1, examples=["Mathematics"])
    skill_level: SkillLevel = SkillLevel.BEGINNER

    materials_provided: bool = False
    required_materials: List[str] = Field(default_factory=list)
    additional_notes: Optional[str] = None

    participants: List[Participant] = Field(default_factory=list)

    status: EventStatus = EventStatus.UPCOMING


class EventCreate(EventBase):
    """Schema for creating an event."""
    pass


class EventRead(EventBase):
    """A stored event as returned by the API."""

    id: str = Field(..., alias="_id")
    last_updated: datetime
    created_at: datetime
