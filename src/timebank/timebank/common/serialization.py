from __future__ import annotations

import dataclasses
from datetime import date, datetime, time
from enum import Enum
from typing import Any


def to_jsonable(value: Any) -> Any:
    """Dataclasses, enums and dates to plain JSON values (dates as ISO strings)."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        payload = {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
        payload.setdefault("kind", type(value).__name__)
        return payload
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value
