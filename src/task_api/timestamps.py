from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional


# PUBLIC_INTERFACE
def to_wire(value: Optional[datetime]) -> Optional[int]:
    """
    Convert an internal datetime to epoch seconds for the wire.

    - None passes through unchanged (no due date).
    - Aware datetimes are normalized to UTC first; naive ones are taken as UTC.
    - Sub-second precision is dropped (floored), so the result is whole seconds.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return math.floor(value.astimezone(timezone.utc).timestamp())


# PUBLIC_INTERFACE
def from_wire(value: Optional[int]) -> Optional[datetime]:
    """
    Convert epoch seconds from the wire to an aware UTC datetime.

    None passes through unchanged. Raises ValueError/OverflowError when the
    integer lies outside the range datetime can represent.
    """
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)
