from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .models import TaskEntity
from .schemas import TaskOut
from .timestamps import to_wire


# PUBLIC_INTERFACE
def render_task(entity: TaskEntity) -> Dict[str, Any]:
    """
    Render a stored task as a flat wire object.

    Only id, name, description, due_date and is_complete are emitted;
    created_at/updated_at stay server-side. due_date becomes epoch seconds.
    """
    out = TaskOut(
        id=entity["id"],
        name=entity["name"],
        description=entity["description"],
        due_date=to_wire(entity["due_date"]),
        is_complete=entity["is_complete"],
    )
    return out.model_dump()


# PUBLIC_INTERFACE
def render_tasks(entities: Iterable[TaskEntity]) -> List[Dict[str, Any]]:
    """Render each task independently, keeping the given order."""
    return [render_task(e) for e in entities]
