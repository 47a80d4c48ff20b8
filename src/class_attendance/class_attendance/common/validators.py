from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_id(value: Any, field_name: str) -> int:
    """Identifiers are positive integers; anything else is malformed."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} is not a valid id")
    try:
        ident = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id")
    if ident <= 0:
        raise ValidationError(f"{field_name} is not a valid id")
    return ident


def optional_id(value: Any, field_name: str) -> int | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_id(value, field_name)


def require_id_list(values: Any, field_name: str) -> list[int]:
    if values is None:
        return []
    if not isinstance(values, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list")
    out: list[int] = []
    for v in values:
        ident = require_id(v, field_name)
        if ident not in out:
            out.append(ident)
    return out
