"""
Declared side effects returned by workflow decisions.

Decision functions never touch storage. They return a TransitionResult
listing every row to create or update; app.services.committer applies the
whole list in one transaction. A Ref placeholder lets a later effect point
at the id of a row created earlier in the same result (e.g. a new Project
linked back onto its Requirement).
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


class EntityType(str, enum.Enum):
    CANDIDATE = "candidate"
    INTERVIEW = "interview"
    OFFER = "offer"
    CONSULTANT = "consultant"
    COMPANY = "company"
    REQUIREMENT = "requirement"
    PROJECT = "project"
    MISSION = "mission"
    APPROVAL_REQUEST = "approval_request"
    HR_TICKET = "hr_ticket"


@dataclass(frozen=True)
class Ref:
    """Id of an entity created earlier in the same TransitionResult."""
    name: str


@dataclass(frozen=True)
class CreateEffect:
    entity: EntityType
    fields: Dict[str, Any]
    ref: Optional[str] = None


@dataclass(frozen=True)
class UpdateEffect:
    entity: EntityType
    entity_id: Any
    changes: Dict[str, Any]
    # Field values the committer re-checks against a fresh read before writing
    expected: Dict[str, Any] = field(default_factory=dict)


Effect = Union[CreateEffect, UpdateEffect]


@dataclass
class TransitionResult:
    effects: List[Effect]
    summary: str

    def created(self, entity: EntityType) -> List[CreateEffect]:
        return [e for e in self.effects if isinstance(e, CreateEffect) and e.entity == entity]

    def updates_for(self, entity: EntityType, entity_id: Any = None) -> List[UpdateEffect]:
        return [
            e for e in self.effects
            if isinstance(e, UpdateEffect)
            and e.entity == entity
            and (entity_id is None or e.entity_id == entity_id)
        ]

    def update_for(self, entity: EntityType, entity_id: Any = None) -> Optional[UpdateEffect]:
        updates = self.updates_for(entity, entity_id)
        return updates[0] if updates else None


def guard(record, *, with_version: bool = True, expected_version: Optional[int] = None) -> Dict[str, Any]:
    """
    Build the `expected` map for an update of `record`.

    The primary entity of an operation is pinned on status and version;
    side-effect entities (with_version=False) only on status. A caller
    supplied expected_version overrides the snapshot's version so a stale
    cached view surfaces as a conflict.
    """
    expected: Dict[str, Any] = {}
    if hasattr(record, "status"):
        expected["status"] = record.status
    if expected_version is not None:
        expected["version"] = expected_version
    elif with_version and getattr(record, "version", None) is not None:
        expected["version"] = record.version
    return expected
