import json

import pytest
from sqlalchemy.exc import OperationalError

from database import connection
from database.kv_store import SqliteKeyValueStore
from plans.models import Plan, SavedPlan
from projects.store import ProjectStore
from shared.errors import StorageQuotaExceededError, StorageReadError


def test_missing_key_returns_none(temp_database):
    store = SqliteKeyValueStore()
    assert store.get("nope") is None


def test_set_overwrites_and_persists(temp_database):
    store = SqliteKeyValueStore()
    store.set("k", "uno")
    store.set("k", "dos")

    assert SqliteKeyValueStore().get("k") == "dos"
    assert temp_database.exists()


def test_delete_removes_value(temp_database):
    store = SqliteKeyValueStore()
    store.set("k", "valor")
    store.delete("k")
    store.delete("k")
    assert store.get("k") is None


def test_quota_rejects_oversized_value_and_keeps_previous(temp_database):
    store = SqliteKeyValueStore(max_value_bytes=10)
    store.set("k", "corto")

    with pytest.raises(StorageQuotaExceededError):
        store.set("k", "ñ" * 6)

    assert store.get("k") == "corto"


def test_project_store_on_sqlite(temp_database):
    storage = SqliteKeyValueStore()
    projects = ProjectStore(storage)
    projects.add(SavedPlan(id="1", name="Taller", timestamp=1, plan=Plan.from_contents({"roi": "mucho"})))

    reopened = ProjectStore(SqliteKeyValueStore())
    assert [p.name for p in reopened.projects] == ["Taller"]
    assert reopened.projects[0].plan.roi.content == "mucho"
    assert json.loads(storage.get(projects.key))[0]["id"] == "1"


def _lock_database(monkeypatch):
    """Make database sessions fail like a locked SQLite file while ``lock["on"]``."""
    real = connection.get_db_session
    lock = {"on": True}

    def session():
        if lock["on"]:
            raise OperationalError("SELECT", {}, Exception("database is locked"))
        return real()

    monkeypatch.setattr(connection, "get_db_session", session)
    return lock


def test_read_error_is_not_a_missing_key(temp_database, monkeypatch):
    store = SqliteKeyValueStore()
    store.set("k", "valor")
    lock = _lock_database(monkeypatch)

    with pytest.raises(StorageReadError):
        store.get("k")
    lock["on"] = False
    assert store.get("k") == "valor"


def test_locked_database_does_not_erase_saved_projects(temp_database, monkeypatch):
    projects = ProjectStore(SqliteKeyValueStore())
    for project_id in ("1", "2", "3"):
        projects.add(SavedPlan(id=project_id, name=f"P{project_id}", plan=Plan()))

    lock = _lock_database(monkeypatch)
    reopened = ProjectStore(SqliteKeyValueStore())
    assert reopened.loaded is False

    with pytest.raises(StorageReadError):
        reopened.add(SavedPlan(id="9", name="Nuevo", plan=Plan()))

    lock["on"] = False
    reopened.add(SavedPlan(id="9", name="Nuevo", plan=Plan()))
    stored = json.loads(SqliteKeyValueStore().get(reopened.key))
    assert [item["id"] for item in stored] == ["9", "3", "2", "1"]
