from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator

# Client-writable attributes, in wire order
ATTRIBUTE_FIELDS = ("name", "description", "due_date", "is_complete")


def _check_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not v.strip():
        raise ValueError("can't be blank")
    return v


# PUBLIC_INTERFACE
class TaskCreateIn(BaseModel):
    """
    Field rules for a flat create body. Unknown keys are ignored.
    """

    model_config = ConfigDict(
        strict=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "name": "Buy milk",
                "description": "2%",
                "due_date": 1700000000,
                "is_complete": False,
            }
        },
    )

    name: StrictStr = Field(..., description="Name of the task; must not be blank")
    description: StrictStr = Field(..., description="Description text; may be empty")
    due_date: Optional[StrictInt] = Field(default=None, description="Due date as Unix epoch seconds")
    is_complete: StrictBool = Field(default=False, description="Completion status flag")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject names that are blank once whitespace is ignored; the value is kept as sent."""
        return _check_name(v)  # type: ignore[return-value]


# PUBLIC_INTERFACE
class TaskUpdateIn(BaseModel):
    """
    Field rules for a flat update body.
    All fields are optional; a field that is present follows the create rule.
    Only due_date may be explicitly null.
    """

    model_config = ConfigDict(
        strict=True,
        extra="ignore",
        json_schema_extra={"example": {"is_complete": True}},
    )

    # Defaults are not validated, so an explicit null still fails the strict type check
    name: StrictStr = Field(default=None, description="Name of the task")  # type: ignore[assignment]
    description: StrictStr = Field(default=None, description="Description text")  # type: ignore[assignment]
    due_date: Optional[StrictInt] = Field(default=None, description="Due date as Unix epoch seconds, or null")
    is_complete: StrictBool = Field(default=None, description="Completion status flag")  # type: ignore[assignment]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject names that are blank once whitespace is ignored; the value is kept as sent."""
        return _check_name(v)  # type: ignore[return-value]


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskAttributes:
    """
    Normalized, validated task attributes.

    Produced only by validation.validate_task_attributes. `provided` lists the
    fields the client actually sent; repositories apply exactly those.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    is_complete: Optional[bool] = None
    provided: FrozenSet[str] = field(default_factory=frozenset)

    def changes(self) -> Dict[str, Any]:
        """Return only the provided attributes, keyed by field name."""
        return {f: getattr(self, f) for f in ATTRIBUTE_FIELDS if f in self.provided}


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Flat wire representation of a Task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 123,
                "name": "Buy milk",
                "description": "2%",
                "due_date": 1700000000,
                "is_complete": False,
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the task")
    name: str = Field(..., description="Name of the task")
    description: str = Field(..., description="Description text")
    due_date: Optional[int] = Field(default=None, description="Due date as Unix epoch seconds, or null")
    is_complete: bool = Field(..., description="Completion status flag")


# PUBLIC_INTERFACE
class ValidationErrorOut(BaseModel):
    """
    Body returned with 422 responses.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"errors": {"name": ["is required"]}}}
    )

    errors: Dict[str, List[str]] = Field(..., description="Reasons keyed by offending field")
