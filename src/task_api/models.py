from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a Task as held by the storage
    backends.

    Fields:
    - id: Unique integer identifier, assigned by the repository
    - name: Non-empty name (trimmed on input by the validator)
    - description: Description text; may be an empty string
    - due_date: Optional due datetime (aware, UTC)
    - is_complete: Boolean completion flag
    - created_at: UTC creation timestamp (datetime)
    - updated_at: UTC last update timestamp (datetime)
    """

    id: int
    name: str
    description: str
    due_date: Optional[datetime]
    is_complete: bool
    created_at: datetime
    updated_at: datetime
