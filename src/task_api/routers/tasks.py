from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import APIRouter, Body, Depends, Query, Response, status

from ..errors import StoreFailure, TaskNotFound
from ..rendering import render_task, render_tasks
from ..repositories import ListQuery, Repository, get_repository
from ..schemas import TaskOut, ValidationErrorOut
from ..validation import validate_task_attributes

logger = logging.getLogger(__name__)

# No route prefix: the collection path is plural, every single-resource path singular.
router = APIRouter(tags=["tasks"])

_ID_PATTERN = re.compile(r"[0-9]+")
# Largest id any backend can hold (SQLite INTEGER)
_MAX_ID = 2**63 - 1

_T = TypeVar("_T")

_NOT_FOUND = {404: {"description": "Task not found"}}
_INVALID = {422: {"model": ValidationErrorOut, "description": "Validation failed"}}


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


def _parse_task_id(raw: str) -> int:
    """A path id that is not a plain decimal integer names no resource."""
    if not _ID_PATTERN.fullmatch(raw):
        raise TaskNotFound(raw)
    task_id = int(raw)
    if task_id > _MAX_ID:
        raise TaskNotFound(raw)
    return task_id


def _store(op: Callable[..., _T], *args: Any) -> _T:
    """Run a repository call; any failure becomes an opaque StoreFailure."""
    try:
        return op(*args)
    except Exception as exc:
        logger.exception("Repository call %s failed", getattr(op, "__name__", op))
        raise StoreFailure() from exc


def _task_location(task_id: int) -> str:
    return f"/task/{task_id}"


# PUBLIC_INTERFACE
@router.get(
    "/tasks",
    response_model=List[TaskOut],
    summary="List Tasks",
    description=(
        "List tasks as a flat JSON array in creation order.\n\n"
        "Query parameters:\n"
        "- is_complete: filter by completion status\n"
        "- limit: max number of items to return (>=0; all when omitted)\n"
        "- offset: number of items to skip (>=0)"
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        422: {"model": ValidationErrorOut, "description": "Invalid query parameters"},
    },
)
def list_tasks(
    is_complete: Optional[bool] = Query(None, description="Filter by completion status"),
    limit: Optional[int] = Query(None, ge=0, description="Maximum number of items to return; all when omitted"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    repo: Repository = Depends(_get_repo),
) -> List[Dict[str, Any]]:
    """
    List tasks, optionally filtered and sliced.
    """
    query = ListQuery(limit=limit, offset=offset, is_complete=is_complete)
    return render_tasks(_store(repo.list, query))


# PUBLIC_INTERFACE
@router.get(
    "/task/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={200: {"description": "Task found"}, **_NOT_FOUND},
)
def show_task(task_id: str, repo: Repository = Depends(_get_repo)) -> Dict[str, Any]:
    """
    Retrieve a single task by its ID.
    """
    tid = _parse_task_id(task_id)
    item = _store(repo.get, tid)
    if item is None:
        raise TaskNotFound(tid)
    return render_task(item)


# PUBLIC_INTERFACE
@router.post(
    "/task",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description=(
        "Create a new task from a flat JSON body and return it. "
        "The Location header points at the new task."
    ),
    responses={201: {"description": "Task created successfully"}, **_INVALID},
)
def create_task(
    response: Response,
    payload: Any = Body(default=None, examples=[{"name": "Buy milk", "description": "2%", "due_date": 1700000000}]),
    repo: Repository = Depends(_get_repo),
) -> Dict[str, Any]:
    """
    Create a new task.
    """
    attrs = validate_task_attributes(payload, "create")
    created = _store(repo.create, attrs)
    logger.info("Created task %s", created["id"])
    response.headers["Location"] = _task_location(created["id"])
    return render_task(created)


def _update(task_id: str, payload: Any, repo: Repository) -> Dict[str, Any]:
    tid = _parse_task_id(task_id)
    attrs = validate_task_attributes(payload, "update")
    updated = _store(repo.update, tid, attrs)
    if updated is None:
        raise TaskNotFound(tid)
    logger.info("Updated task %s (%s)", tid, ", ".join(sorted(attrs.provided)) or "no fields")
    return render_task(updated)


# PUBLIC_INTERFACE
@router.put(
    "/task/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Update a task. Fields omitted from the body are left unchanged.",
    responses={200: {"description": "Task updated"}, **_NOT_FOUND, **_INVALID},
)
def put_task(
    task_id: str,
    payload: Any = Body(default=None),
    repo: Repository = Depends(_get_repo),
) -> Dict[str, Any]:
    """
    PUT shares PATCH semantics: provided fields are merged onto the stored task.
    """
    return _update(task_id, payload, repo)


# PUBLIC_INTERFACE
@router.patch(
    "/task/{task_id}",
    response_model=TaskOut,
    summary="Patch Task",
    description="Partially update fields of a task.",
    responses={200: {"description": "Task updated"}, **_NOT_FOUND, **_INVALID},
)
def patch_task(
    task_id: str,
    payload: Any = Body(default=None),
    repo: Repository = Depends(_get_repo),
) -> Dict[str, Any]:
    """
    Partial update of a task.
    """
    return _update(task_id, payload, repo)


# PUBLIC_INTERFACE
@router.delete(
    "/task/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    description="Delete a task by ID.",
    responses={204: {"description": "Task deleted"}, **_NOT_FOUND},
)
def delete_task(task_id: str, repo: Repository = Depends(_get_repo)) -> Response:
    """
    Delete a task. Returns 204 on success, 404 if not found.
    """
    tid = _parse_task_id(task_id)
    if not _store(repo.delete, tid):
        raise TaskNotFound(tid)
    logger.info("Deleted task %s", tid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
