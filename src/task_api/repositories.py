from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import Iterable, List, Optional

from .models import TaskEntity
from .schemas import TaskAttributes
from .settings import get_settings


@dataclass(frozen=True)
class ListQuery:
    """
    Query parameters for listing tasks.
    """
    limit: Optional[int] = None
    offset: int = 0
    is_complete: Optional[bool] = None


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    name: str = "abstract"

    @abstractmethod
    def create(self, attrs: TaskAttributes) -> TaskEntity:
        """Create and return a new TaskEntity with id and timestamps assigned."""

    @abstractmethod
    def get(self, task_id: int) -> Optional[TaskEntity]:
        """Return a TaskEntity by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: int, attrs: TaskAttributes) -> Optional[TaskEntity]:
        """Apply the provided attributes. Return the updated entity or None if not found."""

    @abstractmethod
    def delete(self, task_id: int) -> bool:
        """Delete a TaskEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self, query: Optional[ListQuery] = None) -> List[TaskEntity]:
        """
        Return TaskEntities in ascending id order.
        - Filter by is_complete
        - Supports limit/offset; a None limit returns every remaining row
        """


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TaskEntity] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def create(self, attrs: TaskAttributes) -> TaskEntity:
        now = self._now()
        entity: TaskEntity = {
            "id": self._allocate_id(),
            "name": attrs.name,  # type: ignore[typeddict-item]
            "description": attrs.description,  # type: ignore[typeddict-item]
            "due_date": attrs.due_date,
            "is_complete": bool(attrs.is_complete),
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()  # type: ignore[return-value]

    def get(self, task_id: int) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()  # type: ignore[return-value]

    def update(self, task_id: int, attrs: TaskAttributes) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None

            # Only provided fields change; an explicit null due_date clears it
            updated = existing.copy()
            updated.update(attrs.changes())  # type: ignore[typeddict-item]
            updated["updated_at"] = self._now()

            self._items[task_id] = updated  # type: ignore[assignment]
            return updated.copy()  # type: ignore[return-value]

    def delete(self, task_id: int) -> bool:
        with self._lock:
            return self._items.pop(task_id, None) is not None

    def list(self, query: Optional[ListQuery] = None) -> List[TaskEntity]:
        q = query or ListQuery()
        with self._lock:
            items: Iterable[TaskEntity] = sorted(self._items.values(), key=lambda t: t["id"])

            if q.is_complete is not None:
                items = [t for t in items if t["is_complete"] == q.is_complete]

            start = max(q.offset, 0)
            end = None if q.limit is None else start + max(q.limit, 0)

            # Return copies to avoid external mutation
            return [t.copy() for t in list(items)[start:end]]  # type: ignore[misc]


_repository: Optional[Repository] = None
_repository_lock = RLock()


def _build_repository() -> Repository:
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path)
    return InMemoryRepository()


# PUBLIC_INTERFACE
def get_repository() -> Repository:
    """
    Return the configured repository, built once per process.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository (standard library sqlite3)

    Tests swap the instance through app.dependency_overrides.

    Construction is guarded by a lock so concurrent first requests share
    one instance.
    """
    global _repository
    if _repository is None:
        with _repository_lock:
            if _repository is None:
                _repository = _build_repository()
    return _repository
