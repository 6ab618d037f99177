import os

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from task_api.main import app  # noqa: E402
from task_api.repositories import InMemoryRepository, get_repository  # noqa: E402


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def client(repo):
    # Fresh store per test so list assertions see only what the test created
    app.dependency_overrides[get_repository] = lambda: repo
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
