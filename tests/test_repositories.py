import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from task_api import repositories
from task_api.db import SQLiteRepository
from task_api.repositories import InMemoryRepository, ListQuery, get_repository
from task_api.validation import validate_task_attributes


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteRepository(str(tmp_path / "nested" / "tasks.db"))
    return InMemoryRepository()


def _create(store, **body):
    body.setdefault("name", "Task")
    body.setdefault("description", "")
    return store.create(validate_task_attributes(body, "create"))


def test_create_assigns_id_and_timestamps(store):
    created = _create(store, name="Buy milk", due_date=1700000000)
    assert created["id"] >= 1
    assert created["name"] == "Buy milk"
    assert created["is_complete"] is False
    assert created["due_date"] == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert created["created_at"] == created["updated_at"]
    assert created["created_at"].tzinfo is not None


def test_get_missing_returns_none(store):
    assert store.get(99999) is None


def test_update_merges_provided_fields(store):
    created = _create(store, name="Old", description="keep", due_date=1700000000)
    updated = store.update(created["id"], validate_task_attributes({"name": "New"}, "update"))
    assert updated["id"] == created["id"]
    assert updated["name"] == "New"
    assert updated["description"] == "keep"
    assert updated["due_date"] == created["due_date"]
    assert updated["created_at"] == created["created_at"]
    assert updated["updated_at"] >= created["updated_at"]
    assert store.get(created["id"]) == updated


def test_update_can_clear_due_date(store):
    created = _create(store, due_date=1700000000)
    updated = store.update(created["id"], validate_task_attributes({"due_date": None}, "update"))
    assert updated["due_date"] is None


def test_update_missing_returns_none(store):
    assert store.update(424242, validate_task_attributes({"name": "x"}, "update")) is None


def test_delete(store):
    created = _create(store)
    assert store.delete(created["id"]) is True
    assert store.get(created["id"]) is None
    assert store.delete(created["id"]) is False


def test_list_order_filter_and_slice(store):
    ids = [_create(store, name=f"Task {i}", is_complete=(i % 2 == 0))["id"] for i in range(5)]

    assert [t["id"] for t in store.list()] == ids
    assert [t["id"] for t in store.list(ListQuery(is_complete=True))] == [ids[0], ids[2], ids[4]]
    assert [t["id"] for t in store.list(ListQuery(limit=2, offset=1))] == ids[1:3]
    assert store.list(ListQuery(limit=0)) == []
    assert [t["id"] for t in store.list(ListQuery(offset=3))] == ids[3:]


def test_returned_entities_are_copies():
    store = InMemoryRepository()
    created = _create(store, name="Original")
    created["name"] = "Mutated"
    assert store.get(created["id"])["name"] == "Original"


def test_get_repository_builds_one_instance_under_concurrency(monkeypatch):
    built = []

    def slow_build():
        time.sleep(0.05)
        repo = InMemoryRepository()
        built.append(repo)
        return repo

    monkeypatch.setattr(repositories, "_repository", None)
    monkeypatch.setattr(repositories, "_build_repository", slow_build)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: get_repository(), range(8)))

    assert len(built) == 1
    assert all(r is built[0] for r in results)
