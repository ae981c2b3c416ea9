"""
Record Store: generic CRUD for every workflow entity.

Implements the Repository pattern over SQLAlchemy sessions. Create and
update only flush; the committer (app.services.committer) owns the
transaction and decides when to commit or roll back.
"""

from typing import Any, Dict, List, Optional, Type

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models import (
    ApprovalRequest,
    Candidate,
    Company,
    Consultant,
    HrTicket,
    Interview,
    Mission,
    Offer,
    Project,
    Requirement,
)
from app.models.mixins import SoftDeleteMixin
from app.workflow.effects import EntityType
from app.workflow.guards import utcnow

MODELS: Dict[EntityType, Type] = {
    EntityType.CANDIDATE: Candidate,
    EntityType.INTERVIEW: Interview,
    EntityType.OFFER: Offer,
    EntityType.CONSULTANT: Consultant,
    EntityType.COMPANY: Company,
    EntityType.REQUIREMENT: Requirement,
    EntityType.PROJECT: Project,
    EntityType.MISSION: Mission,
    EntityType.APPROVAL_REQUEST: ApprovalRequest,
    EntityType.HR_TICKET: HrTicket,
}
_ENTITY_NAMES = {model: entity.value for entity, model in MODELS.items()}


def model_for(entity: EntityType) -> Type:
    return MODELS[entity]


def _is_soft_deletable(model) -> bool:
    return issubclass(model, SoftDeleteMixin)


def get(db: Session, model, record_id: Any, include_deleted: bool = False):
    """
    Retrieve a record by its ID.

    Args:
        db: Database session
        model: Model class to query
        record_id: Primary key
        include_deleted: Also return soft-deleted rows

    Returns:
        Model instance if found, None otherwise
    """
    query = db.query(model).filter(model.id == record_id)
    if _is_soft_deletable(model) and not include_deleted:
        query = query.filter(model.deleted_at.is_(None))
    return query.first()


def get_or_raise(db: Session, model, record_id: Any, include_deleted: bool = False):
    """Same as get() but raises NotFoundError when the id does not resolve."""
    record = get(db, model, record_id, include_deleted=include_deleted)
    if record is None:
        raise NotFoundError(
            f"{model.__name__} {record_id} not found",
            entity=_ENTITY_NAMES.get(model),
            entity_id=record_id,
        )
    return record


def get_for_update(db: Session, model, record_id: Any):
    """
    Re-read a row under a row lock, discarding any stale identity-map state.

    Used by the committer immediately before writing so guards are checked
    against current data.
    """
    return (
        db.query(model)
        .filter(model.id == record_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def get_multi(
    db: Session,
    model,
    skip: int = 0,
    limit: Optional[int] = 100,
    include_deleted: bool = False,
    **filters
) -> List:
    """
    Retrieve multiple records with pagination and optional equality filters.

    Args:
        db: Database session
        model: Model class to query
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return (None for no limit)
        include_deleted: Also return soft-deleted rows
        **filters: column=value pairs; None values are ignored

    Returns:
        List of model instances ordered by id
    """
    query = db.query(model)
    if _is_soft_deletable(model) and not include_deleted:
        query = query.filter(model.deleted_at.is_(None))

    for column, value in filters.items():
        if value is not None:
            query = query.filter(getattr(model, column) == value)

    return query.order_by(model.id).offset(skip).limit(limit).all()


def create(db: Session, model, fields: Dict[str, Any]):
    """
    Add a new record and flush so its id is assigned.

    Args:
        db: Database session
        model: Model class to instantiate
        fields: Column values

    Returns:
        Created instance with id
    """
    record = model(**fields)
    db.add(record)
    db.flush()
    return record


def update(db: Session, record, changes: Dict[str, Any]):
    """Apply a partial update and flush."""
    for column, value in changes.items():
        setattr(record, column, value)
    db.flush()
    return record


def soft_delete(db: Session, record, actor_id: str):
    record.deleted_at = utcnow()
    record.deleted_by = actor_id
    db.flush()
    return record


def restore(db: Session, record):
    record.deleted_at = None
    record.deleted_by = None
    db.flush()
    return record


def hard_delete(db: Session, record) -> None:
    """Irreversibly delete a record. Permission checks belong to the caller."""
    db.delete(record)
    db.flush()
