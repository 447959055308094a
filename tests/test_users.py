import pytest
from pydantic import ValidationError

from factories import run
from kids_events_api.app.core.db import get_cursor
from kids_events_api.app.core.exceptions import DuplicateEmailError, NotFoundError, ValidationFailedError
from kids_events_api.app.schemas.user import EventRelation, UserCreate, UserRole
from kids_events_api.app.services.user_service import UserService


def user_payload(**overrides):
    payload = {
        "email": "  Parent@Example.COM ",
        "password": "s3cret",
        "firstName": "Li",
        "lastName": "Na",
        "phoneNumber": "555-0100",
        "role": "parent",
        "children": [{"name": "Mia", "age": 6, "interests": ["art"]}],
        "address": {"street": "1 Elm St", "city": "Seattle", "state": "WA", "zipCode": "98101"},
    }
    payload.update(overrides)
    return payload


def create_user(**overrides):
    return run(UserService.create_user(UserCreate(**user_payload(**overrides))))


def test_create_user_normalises_email_and_applies_defaults():
    user = create_user()

    assert user.email == "parent@example.com"
    assert user.role is UserRole.PARENT
    assert user.is_active is True
    assert user.preferences.notification_preferences.email is True
    assert user.preferences.notification_preferences.sms is False
    assert user.hosted_events == user.registered_events == user.waitlisted_events == []
    assert user.children[0].name == "Mia"


def test_password_is_hashed_and_never_returned():
    user = create_user()

    assert "password" not in user.model_dump(by_alias=True)
    with get_cursor() as cursor:
        stored = cursor.execute("SELECT document FROM users WHERE id = ?", (user.id,)).fetchone()
    assert "s3cret" not in stored["document"]


def test_email_is_unique():
    create_user()

    with pytest.raises(DuplicateEmailError):
        create_user(email="parent@example.com")


def test_lookup_by_id_and_email():
    user = create_user()

    assert run(UserService.get_user(user.id)).email == user.email
    assert run(UserService.get_user_by_email("PARENT@example.com")).id == user.id
    with pytest.raises(NotFoundError):
        run(UserService.get_user("missing"))
    with pytest.raises(NotFoundError):
        run(UserService.get_user_by_email("nobody@example.com"))


def test_check_password():
    create_user()

    assert run(UserService.check_password("parent@example.com", "s3cret")) is True
    assert run(UserService.check_password("parent@example.com", "wrong")) is False
    assert run(UserService.check_password("nobody@example.com", "s3cret")) is False


def test_update_user_rehashes_password():
    user = create_user()

    updated = run(UserService.update_user(user.id, {"password": "n3w", "firstName": "Lina"}))

    assert updated.first_name == "Lina"
    assert updated.updated_at >= user.updated_at
    assert run(UserService.check_password(user.email, "n3w")) is True
    assert run(UserService.check_password(user.email, "s3cret")) is False


def test_update_user_validates():
    user = create_user()

    with pytest.raises(ValidationFailedError) as excinfo:
        run(UserService.update_user(user.id, {"role": "superhero"}))
    assert excinfo.value.violations[0].field == "role"

    with pytest.raises(ValidationFailedError):
        run(UserService.update_user(user.id, {"_id": "other"}))


def test_teacher_profile():
    user = create_user(
        email="teacher@example.com",
        role="teacher",
        teachingProfile={"bio": "Math tutor", "expertise": ["math"], "yearsOfExperience": 5},
    )

    assert user.teaching_profile.years_of_experience == 5
    assert user.teaching_profile.certifications == []


def test_add_event_reference_once():
    user = create_user()

    run(UserService.add_event_reference(user.id, EventRelation.HOSTED, "event-1"))
    updated = run(UserService.add_event_reference(user.id, EventRelation.HOSTED, "event-1"))

    assert updated.hosted_events == ["event-1"]
    assert run(UserService.get_user(user.id)).hosted_events == ["event-1"]


def test_address_is_required():
    payload = user_payload()
    del payload["address"]

    with pytest.raises(ValidationError):
        UserCreate(**payload)
