from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from sqlalchemy.orm import Session

from paintops.errors import NotFoundError, ValidationFailed

T = TypeVar('T')


def get_or_raise(db: Session, model: type[T], record_id: int, *, label: str) -> T:
    obj = db.get(model, record_id)
    if obj is None:
        raise NotFoundError(f'{label} not found')
    return obj


def add_flush(db: Session, obj: T) -> T:
    db.add(obj)
    db.flush()
    return obj


def apply_changes(obj: Any, changes: Mapping[str, Any], *, required: Iterable[str] = ()) -> list[str]:
    """Copy a partial update onto ``obj``; returns the names of fields that changed value."""
    required = set(required)
    missing = [name for name, value in changes.items() if name in required and value is None]
    if missing:
        raise ValidationFailed(
            'Required fields cannot be cleared',
            [{'field': name, 'message': 'Field is required'} for name in missing],
        )
    changed: list[str] = []
    for name, value in changes.items():
        if getattr(obj, name) != value:
            setattr(obj, name, value)
            changed.append(name)
    return changed
