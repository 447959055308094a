import pytest
from fastapi.testclient import TestClient

from kids_events_api.app.core import db
from kids_events_api.app.core.config import settings
from kids_events_api.app.main import app


@pytest.fixture(autouse=True)
def store(tmp_path, monkeypatch):
    """Point every test at its own empty document store."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "events.db"))
    monkeypatch.setattr(settings, "db_retry_delay", 0)
    db.init_db()
    yield
    db.close_db()


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client
