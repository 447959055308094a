"""
Pydantic models for user data.

Users are parents, teachers or administrators.  Teachers may carry a
``teachingProfile``, parents a list of ``children``.  The stored
record keeps a password hash which is never part of ``UserRead``.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .base import CamelModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    PARENT = "parent"
    TEACHER = "teacher"
    ADMIN = "admin"


class EventRelation(str, Enum):
    """Which event list on a user an event id belongs to."""

    HOSTED = "hostedEvents"
    REGISTERED = "registeredEvents"
    WAITLISTED = "waitlistedEvents"


class TeachingProfile(CamelModel):
    bio: Optional[str] = None
    expertise: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    years_of_experience: Optional[int] = Field(None, ge=0)


class Child(CamelModel):
    name: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    special_needs: Optional[str] = None
    interests: List[str] = Field(default_factory=list)


class Address(CamelModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)


class NotificationPreferences(CamelModel):
    email: bool = True
    sms: bool = False


class Preferences(CamelModel):
    max_travel_distance: Optional[float] = None
    preferred_subjects: List[str] = Field(default_factory=list)
    notification_preferences: NotificationPreferences = Field(default_factory=NotificationPreferences)


class UserBase(CamelModel):
    email: str = Field(..., min_length=1, examples=["parent@example.com"])
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    role: UserRole

    teaching_profile: Optional[TeachingProfile] = None
    children: List[Child] = Field(default_factory=list)

    address: Address
    preferences: Preferences = Field(default_factory=Preferences)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        return value.strip().lower()


class UserCreate(UserBase):
    """Schema for creating a user; ``password`` is plain text here."""

    password: str = Field(..., min_length=1)


class UserRead(UserBase):
    """A stored user without credentials."""

    id: str = Field(..., alias="_id")
    hosted_events: List[str] = Field(default_factory=list)
    registered_events: List[str] = Field(default_factory=list)
    waitlisted_events: List[str] = Field(default_factory=list)
    is_active: bool = True
    last_login: datetime = Field(default_factory=_utcnow)
    created_at: datetime
    updated_at: datetime


class UserRecord(UserRead):
    """Stored form of a user, including the password hash."""

    password: str
