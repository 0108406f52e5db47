from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} non valido")
    return value.strip()


def require_id(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} non valido")
    if number <= 0:
        raise ValidationError(f"{field_name} non valido")
    return number


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    """Accept an enum member, its value or its NAME (case-insensitive)."""

    if isinstance(value, enum_cls):
        return value
    raw = str(value or "").strip()
    if not raw:
        raise ValidationError(f"{field_name} mancante")
    for member in enum_cls:
        if raw == member.value or raw.upper() == member.name:
            return member
    raise ValidationError(f"{field_name} non valido: {raw}")
