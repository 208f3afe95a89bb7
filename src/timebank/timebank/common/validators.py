from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_length_between(value: str, field_name: str, min_len: int, max_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must have at least {min_len} characters")
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must have at most {max_len} characters")
    return value
