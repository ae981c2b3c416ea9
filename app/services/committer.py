"""
Single commit step for workflow decisions.

Applies every effect of a TransitionResult inside one database transaction.
Each update target is re-read under a row lock immediately before the
write and checked against the values the decision was made on; any
mismatch aborts the whole transaction with a ConflictError.
An update with no changes is a guard only: its row is locked and checked
but not written.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import ConflictError, ExternalServiceError, NotFoundError, WorkflowError
from app.crud import records
from app.workflow.effects import CreateEffect, Ref, TransitionResult, UpdateEffect

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, operation: str):
    """
    Run a block as one transaction: commit on success, roll back on any error.

    Database failures are translated into workflow errors; workflow errors
    raised inside the block propagate unchanged.
    """
    try:
        yield
        db.commit()
    except WorkflowError:
        db.rollback()
        raise
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"Concurrent modification during {operation}: {e}")
        raise ConflictError(
            f"A record changed while '{operation}' was being saved; reload and try again",
            field="version",
        ) from e
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity violation during {operation}: {e.orig}")
        raise ConflictError(
            f"'{operation}' conflicts with existing data",
            field=None,
        ) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Record store failure during {operation}: {e}")
        raise ExternalServiceError(f"Record store unavailable while running '{operation}'") from e
    except Exception:
        db.rollback()
        raise


def decide(decision: Callable[..., TransitionResult], *args, **kwargs) -> TransitionResult:
    """Run a workflow decision, logging any refused transition before it propagates."""
    try:
        return decision(*args, **kwargs)
    except WorkflowError as e:
        logger.warning(
            f"{decision.__name__} refused: {e.message}",
            extra={"error": e.code, "entity": e.entity, "entity_id": e.entity_id, "field": e.field},
        )
        raise


def _resolve(value: Any, created: Dict[str, Any]) -> Any:
    if isinstance(value, Ref):
        if value.name not in created:
            raise KeyError(f"Unresolved reference '{value.name}'")
        return created[value.name].id
    return value


def _resolve_all(values: Dict[str, Any], created: Dict[str, Any]) -> Dict[str, Any]:
    return {key: _resolve(value, created) for key, value in values.items()}


def _check_expected(effect: UpdateEffect, record) -> None:
    for field, expected in effect.expected.items():
        actual = getattr(record, field)
        if actual != expected:
            raise ConflictError(
                f"{effect.entity.value} {effect.entity_id} changed since it was read: "
                f"{field} is '{getattr(actual, 'value', actual)}', expected '{getattr(expected, 'value', expected)}'",
                entity=effect.entity.value,
                entity_id=effect.entity_id,
                field=field,
                expected=expected,
                actual=actual,
            )


def commit(db: Session, result: TransitionResult, actor_id: str) -> Dict[str, Any]:
    """
    Persist a TransitionResult atomically.

    Args:
        db: Database session (must not hold uncommitted work of its own)
        result: Effects returned by a workflow decision
        actor_id: Acting user recorded in created_by / updated_by

    Returns:
        Created records keyed by their effect ref

    Raises:
        ConflictError: A guarded field no longer matches, or a concurrent
            write bumped a row version
        NotFoundError: An update target disappeared
        ExternalServiceError: The database failed
    """
    created: Dict[str, Any] = {}

    with atomic(db, result.summary):
        for effect in result.effects:
            model = records.model_for(effect.entity)

            if isinstance(effect, CreateEffect):
                fields = _resolve_all(effect.fields, created)
                fields.setdefault("created_by", actor_id)
                record = records.create(db, model, fields)
                if effect.ref:
                    created[effect.ref] = record
                continue

            entity_id = _resolve(effect.entity_id, created)
            record = records.get_for_update(db, model, entity_id)
            if record is None:
                raise NotFoundError(
                    f"{effect.entity.value} {entity_id} not found",
                    entity=effect.entity.value,
                    entity_id=entity_id,
                )
            _check_expected(effect, record)
            if not effect.changes:
                continue

            changes = _resolve_all(effect.changes, created)
            changes["updated_by"] = actor_id
            records.update(db, record, changes)

    for record in created.values():
        db.refresh(record)

    logger.info(
        f"Committed: {result.summary}",
        extra={"actor_id": actor_id, "effects": len(result.effects)},
    )
    return created
