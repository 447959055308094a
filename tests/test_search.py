from datetime import datetime, timezone

from factories import make_event, run
from kids_events_api.app.services.event_service import EventService


def add(**overrides):
    return run(EventService.create_event(make_event(**overrides)))


def search(**filters):
    return [event.title for event in run(EventService.search_events(**filters))]


def test_subject_is_case_insensitive_substring():
    add(title="Maths", subject="Mathematics")
    add(title="Painting", subject="Art")

    assert search(subject="math") == ["Maths"]


def test_text_filters_fold_non_ascii_case():
    add(title="Music", subject="Éveil musical", location={**make_event()["location"], "city": "ZÜRICH"})
    add(title="Maths", subject="Mathematics")

    assert search(subject="éveil") == ["Music"]
    assert search(city="zürich") == ["Music"]
    assert search(subject="MUSICAL", city="Zürich") == ["Music"]


def test_subject_is_matched_literally():
    add(title="Coding", subject="C++ for kids")
    add(title="Other", subject="Cooking")

    assert search(subject="c++") == ["Coding"]
    assert search(subject="c.o") == []


def test_age_range_overlap():
    add(title="Young", suggestedAgeRange={"min": 4, "max": 10})
    add(title="Teens", suggestedAgeRange={"min": 12, "max": 16})

    assert search(min_age=5, max_age=8) == ["Young"]


def test_age_bounds_apply_independently():
    add(title="Young", suggestedAgeRange={"min": 4, "max": 10})
    add(title="Teens", suggestedAgeRange={"min": 12, "max": 16})

    assert search(min_age=11) == ["Teens"]
    assert search(max_age=4) == ["Young"]


def test_location_filters():
    add(title="Seattle", location={"address": "1 A St", "city": "Seattle", "state": "WA", "zipCode": "98101"})
    add(title="Portland", location={"address": "2 B St", "city": "Portland", "state": "OR", "zipCode": "97201"})

    assert search(city="SEAT") == ["Seattle"]
    assert search(state="or") == ["Portland"]
    assert search(city="", state="") == ["Seattle", "Portland"]


def test_date_range_is_inclusive():
    add(title="First", dateTime="2026-11-01T10:00:00Z")
    add(title="Second", dateTime="2026-11-02T10:00:00Z")
    add(title="Third", dateTime="2026-11-03T10:00:00Z")

    middle = datetime(2026, 11, 2, 10, tzinfo=timezone.utc)
    assert search(start_date=middle, end_date=middle) == ["Second"]
    assert search(start_date=middle) == ["Second", "Third"]
    assert search(end_date=middle) == ["First", "Second"]


def test_date_bounds_compare_across_offsets():
    add(title="Morning", dateTime="2026-11-02T09:00:00+02:00")

    assert search(start_date=datetime(2026, 11, 2, 7, tzinfo=timezone.utc)) == ["Morning"]
    assert search(start_date=datetime(2026, 11, 2, 7, 1, tzinfo=timezone.utc)) == []


def test_search_skips_cancelled_and_sorts_by_start():
    add(title="Later", subject="Math", dateTime="2026-12-01T10:00:00Z")
    add(title="Sooner", subject="Math", dateTime="2026-11-01T10:00:00Z")
    add(title="Cancelled", subject="Math", status="cancelled")

    assert search(subject="math") == ["Sooner", "Later"]


def test_search_endpoint(client):
    client.post("/api/events/", json=make_event(title="Maths", subject="Mathematics"))
    client.post("/api/events/", json=make_event(title="Painting", subject="Art"))

    response = client.get(
        "/api/events/search/filter",
        params={"subject": "math", "minAge": 5, "maxAge": 8, "startDate": "2026-01-01T00:00:00Z"},
    )

    assert response.status_code == 200
    assert [event["title"] for event in response.json()] == ["Maths"]


def test_search_endpoint_rejects_bad_age(client):
    response = client.get("/api/events/search/filter", params={"minAge": "five"})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "minAge"


def test_search_endpoint_rejects_out_of_range_age(client):
    response = client.get("/api/events/search/filter", params={"maxAge": 10**20})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "maxAge"
    assert client.get("/api/events/search/filter", params={"minAge": -1}).status_code == 400
