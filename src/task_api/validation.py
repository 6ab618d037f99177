from __future__ import annotations

from typing import Any, Dict, List, Literal, Type, Union

from pydantic import BaseModel, ValidationError

from .errors import ValidationFailure, collect_errors
from .schemas import TaskAttributes, TaskCreateIn, TaskUpdateIn
from .timestamps import from_wire

Operation = Literal["create", "update"]

_RULES: Dict[str, Type[Union[TaskCreateIn, TaskUpdateIn]]] = {
    "create": TaskCreateIn,
    "update": TaskUpdateIn,
}


# PUBLIC_INTERFACE
def validate_task_attributes(body: Any, operation: Operation) -> TaskAttributes:
    """
    Validate a flat JSON body and normalize it into TaskAttributes.

    The body is used as-is: fields are expected at the top level, never
    under a "task" key. Unknown keys are ignored.

    - create: name and description required; is_complete defaults to False;
      due_date optional, null meaning no due date.
    - update: every field optional; only fields present in the body are
      marked as provided.

    Raises:
        ValidationFailure listing every offending field, not just the first.
    """
    rules = _RULES[operation]
    errors: Dict[str, List[str]] = {}

    try:
        parsed: BaseModel = rules.model_validate(body)
    except ValidationError as exc:
        errors.update(collect_errors(exc.errors()))
        parsed = None  # type: ignore[assignment]

    # Conversion runs even when other fields failed so every problem is reported
    due_date = None
    raw_due = body.get("due_date") if isinstance(body, dict) else None
    if "due_date" not in errors and isinstance(raw_due, int) and not isinstance(raw_due, bool):
        try:
            due_date = from_wire(raw_due)
        except (OverflowError, OSError, ValueError):
            errors["due_date"] = ["is out of range"]

    if errors:
        raise ValidationFailure(errors)

    if operation == "create":
        provided = frozenset(("name", "description", "due_date", "is_complete"))
    else:
        provided = frozenset(parsed.model_fields_set)

    return TaskAttributes(
        name=parsed.name,  # type: ignore[attr-defined]
        description=parsed.description,  # type: ignore[attr-defined]
        due_date=due_date,
        is_complete=parsed.is_complete,  # type: ignore[attr-defined]
        provided=provided,
    )
