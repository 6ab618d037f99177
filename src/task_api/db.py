from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generator, List, Optional

from .models import TaskEntity
from .repositories import ListQuery, Repository
from .schemas import TaskAttributes


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    name: str = "name"
    description: str = "description"
    due_date: str = "due_date"
    is_complete: str = "is_complete"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_dt(s: Optional[str]) -> Optional[datetime]:
    if s is None:
        return None
    dt = datetime.fromisoformat(s)
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.
    Datetimes are stored as ISO8601 text with an explicit UTC offset.
    """

    name = "sqlite"

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.name} TEXT NOT NULL,
                    {_COLS.description} TEXT NOT NULL,
                    {_COLS.due_date} TEXT NULL,
                    {_COLS.is_complete} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_is_complete ON {_COLS.table}({_COLS.is_complete})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": int(row[_COLS.id]),
            "name": str(row[_COLS.name]),
            "description": str(row[_COLS.description]),
            "due_date": _parse_dt(row[_COLS.due_date]),
            "is_complete": bool(row[_COLS.is_complete]),
            "created_at": _parse_dt(row[_COLS.created_at]),  # type: ignore
            "updated_at": _parse_dt(row[_COLS.updated_at]),  # type: ignore
        }

    def _select(self, conn: sqlite3.Connection, task_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)).fetchone()

    def create(self, attrs: TaskAttributes) -> TaskEntity:
        now = datetime.now(timezone.utc).isoformat()
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.name}, {_COLS.description}, {_COLS.due_date},
                    {_COLS.is_complete}, {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (attrs.name, attrs.description, _iso(attrs.due_date), 1 if attrs.is_complete else 0, now, now),
            )
            row = self._select(conn, cur.lastrowid)  # type: ignore[arg-type]
            assert row is not None
            return self._row_to_entity(row)

    def get(self, task_id: int) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = self._select(conn, task_id)
            return self._row_to_entity(row) if row else None

    def update(self, task_id: int, attrs: TaskAttributes) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = self._select(conn, task_id)
            if not row:
                return None
            merged = self._row_to_entity(row)
            merged.update(attrs.changes())  # type: ignore[typeddict-item]

            conn.execute(
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.name} = ?, {_COLS.description} = ?, {_COLS.due_date} = ?,
                    {_COLS.is_complete} = ?, {_COLS.updated_at} = ?
                WHERE {_COLS.id} = ?
                """,
                (
                    merged["name"],
                    merged["description"],
                    _iso(merged["due_date"]),
                    1 if merged["is_complete"] else 0,
                    datetime.now(timezone.utc).isoformat(),
                    task_id,
                ),
            )
            row2 = self._select(conn, task_id)
            assert row2 is not None
            return self._row_to_entity(row2)

    def delete(self, task_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            return cur.rowcount > 0

    def list(self, query: Optional[ListQuery] = None) -> List[TaskEntity]:
        q = query or ListQuery()
        where_sql = ""
        params: list = []

        if q.is_complete is not None:
            where_sql = f"WHERE {_COLS.is_complete} = ?"
            params.append(1 if q.is_complete else 0)

        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM {_COLS.table}
                {where_sql}
                ORDER BY {_COLS.id} ASC
                LIMIT ? OFFSET ?
                """,
                # LIMIT -1 is unbounded in SQLite
                [*params, -1 if q.limit is None else max(q.limit, 0), max(q.offset, 0)],
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]
