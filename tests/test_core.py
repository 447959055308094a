from datetime import datetime, timedelta, timezone

import pytest

from kids_events_api.app.core import db
from kids_events_api.app.core.config import settings
from kids_events_api.app.core.exceptions import StoreUnavailableError
from kids_events_api.app.core.security import hash_password, verify_password


def test_hash_and_verify_password():
    hashed = hash_password("correct horse")

    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)
    assert hashed != hash_password("correct horse")


def test_verify_password_rejects_malformed_hash():
    assert verify_password("x", "not-a-hash") is False
    assert verify_password("x", "zz$zz") is False


def test_to_utc_iso_normalises_offsets():
    naive = datetime(2026, 11, 2, 7, 0)
    aware = datetime(2026, 11, 2, 9, 0, tzinfo=timezone(timedelta(hours=2)))

    assert db.to_utc_iso(naive) == db.to_utc_iso(aware) == "2026-11-02T07:00:00.000000+00:00"


def test_database_path_strips_sqlite_prefix(monkeypatch, tmp_path):
    target = tmp_path / "other.db"
    monkeypatch.setattr(settings, "database_url", f"sqlite:///{target}")

    assert db.get_database_path() == str(target)


def test_init_db_is_idempotent():
    db.init_db()
    db.init_db()

    with db.get_cursor() as cursor:
        versions = [row["version"] for row in cursor.execute("SELECT version FROM migrations")]
    assert versions == [1]
    assert db.store_state.is_open


def test_init_db_gives_up_after_retries(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "missing-dir" / "events.db"))
    monkeypatch.setattr(settings, "db_connect_retries", 2)

    with pytest.raises(StoreUnavailableError):
        db.init_db()
    assert not db.store_state.is_open


def test_close_db_clears_state():
    db.close_db()

    assert db.store_state.path is None
    assert db.store_state.connected_at is None


def test_hash_records_algorithm_and_iterations():
    hashed = hash_password("pw", iterations=1000)

    algorithm, iterations, salt, digest = hashed.split("$")
    assert (algorithm, iterations) == ("pbkdf2_sha256", "1000")
    assert len(bytes.fromhex(salt)) == 16
    assert verify_password("pw", hashed)
    assert not verify_password("pw", hashed.replace("pbkdf2_sha256", "md5"))
