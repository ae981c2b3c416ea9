"""
Guard helpers shared by the workflow state machines.

Each helper raises the typed error for the invariant it checks and names
the offending entity and field.
"""

from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from app.core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from app.workflow.effects import EntityType
from app.workflow.permissions import Capability, Permissions


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _label(value: Any) -> str:
    return str(getattr(value, "value", value))


def require_status(entity: EntityType, record, allowed: Iterable, action: str) -> None:
    allowed = tuple(allowed)
    if record.status in allowed:
        return
    expected = " or ".join(f"'{_label(s)}'" for s in allowed)
    raise ConflictError(
        f"Cannot {action}: {entity.value} {record.id} must be {expected} but is '{_label(record.status)}'",
        entity=entity.value,
        entity_id=record.id,
        expected=list(allowed) if len(allowed) > 1 else allowed[0],
        actual=record.status,
    )


def require_capability(permissions: Permissions, capability: Capability, action: str) -> None:
    if not permissions.has(capability):
        raise PermissionDeniedError(
            f"Permission '{capability.value}' is required to {action}",
            field=capability.value,
        )


def require_reason(reason: Optional[str], entity: EntityType, entity_id: Any) -> str:
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationError(
            f"A reason is required to reject {entity.value} {entity_id}",
            entity=entity.value,
            entity_id=entity_id,
            field="reason",
        )
    return cleaned


def require_positive(value: Optional[float], entity: EntityType, entity_id: Any, field: str) -> float:
    if value is None or value <= 0:
        raise ValidationError(
            f"'{field}' must be a positive number",
            entity=entity.value,
            entity_id=entity_id,
            field=field,
        )
    return value


def require_date_order(start: Optional[date], end: Optional[date], entity: EntityType, entity_id: Any = None) -> None:
    if start is not None and end is not None and end < start:
        raise ValidationError(
            f"End date ({end}) cannot be before start date ({start})",
            entity=entity.value,
            entity_id=entity_id,
            field="end_date",
        )
