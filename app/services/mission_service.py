"""
Mission lifecycle and consultant operations.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.deps import Actor
from app.crud import records
from app.models.consultant import Consultant, ConsultantStatus
from app.models.mission import Mission, MissionStatus
from app.services.committer import commit, decide
from app.workflow import missions as workflow
from app.workflow.guards import require_capability
from app.workflow.permissions import Capability

logger = logging.getLogger(__name__)


def _load(db: Session, mission_id: int):
    mission = records.get_or_raise(db, Mission, mission_id)
    consultant = records.get_or_raise(db, Consultant, mission.consultant_id)
    # Fresh read of the consultant's other missions for the bench decision
    others = (
        db.query(Mission)
        .filter(Mission.consultant_id == mission.consultant_id, Mission.id != mission.id)
        .all()
    )
    return mission, consultant, others


def get_mission(db: Session, actor: Actor, mission_id: int) -> Mission:
    require_capability(actor.permissions, Capability.VIEW_ORGANISATION, "view missions")
    return records.get_or_raise(db, Mission, mission_id)


def list_missions(
    db: Session,
    actor: Actor,
    skip: int = 0,
    limit: int = 100,
    status: Optional[MissionStatus] = None,
    consultant_id: Optional[int] = None,
) -> List[Mission]:
    require_capability(actor.permissions, Capability.VIEW_ORGANISATION, "view missions")
    return records.get_multi(db, Mission, skip=skip, limit=limit, status=status, consultant_id=consultant_id)


def update_mission(
    db: Session,
    actor: Actor,
    mission_id: int,
    changes: Dict[str, Any],
    expected_version: Optional[int] = None,
) -> Mission:
    mission, consultant, others = _load(db, mission_id)
    result = decide(
        workflow.decide_update_mission,
        mission, consultant, others, changes, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return mission


def complete_mission(
    db: Session,
    actor: Actor,
    mission_id: int,
    end_date: date,
    expected_version: Optional[int] = None,
) -> Mission:
    mission, consultant, others = _load(db, mission_id)
    result = decide(
        workflow.decide_complete_mission,
        mission, consultant, others, end_date, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return mission


def get_consultant(db: Session, actor: Actor, consultant_id: int) -> Consultant:
    require_capability(actor.permissions, Capability.VIEW_ORGANISATION, "view consultants")
    return records.get_or_raise(db, Consultant, consultant_id)


def list_consultants(
    db: Session,
    actor: Actor,
    skip: int = 0,
    limit: int = 100,
    status: Optional[ConsultantStatus] = None,
) -> List[Consultant]:
    require_capability(actor.permissions, Capability.VIEW_ORGANISATION, "view consultants")
    return records.get_multi(db, Consultant, skip=skip, limit=limit, status=status)
