"""
Candidate and interview operations.

Each operation loads the current snapshot from the record store, asks the
workflow engine for a decision and hands the result to the committer.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.deps import Actor
from app.core.exceptions import ConflictError, PermissionDeniedError
from app.crud import records
from app.models.candidate import Candidate, CandidateStatus
from app.models.consultant import Consultant
from app.models.interview import Interview, InterviewOutcome, InterviewStage
from app.services.committer import atomic, commit, decide
from app.workflow import candidates as workflow
from app.workflow.effects import EntityType
from app.workflow.guards import require_capability
from app.workflow.permissions import Capability
from app.workflow.pipeline_status import PipelineStatus, compute_candidate_pipeline_status

logger = logging.getLogger(__name__)


def pipeline_status(candidate: Candidate) -> PipelineStatus:
    """The single place candidate pipeline status is computed for display."""
    return compute_candidate_pipeline_status(candidate.interviews, candidate.status)


def get_candidate(db: Session, actor: Actor, candidate_id: int, include_deleted: bool = False) -> Candidate:
    require_capability(actor.permissions, Capability.VIEW_CANDIDATES, "view candidates")
    return records.get_or_raise(db, Candidate, candidate_id, include_deleted=include_deleted)


def list_candidates(
    db: Session,
    actor: Actor,
    skip: int = 0,
    limit: int = 100,
    status: Optional[CandidateStatus] = None,
    include_deleted: bool = False,
) -> List[Tuple[Candidate, PipelineStatus]]:
    """
    List candidates with their derived status.

    A status filter applies to the derived pipeline status, not the stored
    override.
    """
    require_capability(actor.permissions, Capability.VIEW_CANDIDATES, "view candidates")
    rows = records.get_multi(db, Candidate, skip=0, limit=None, include_deleted=include_deleted)
    items = [(c, pipeline_status(c)) for c in rows]
    if status is not None:
        items = [item for item in items if item[1].status == status]
    return items[skip:skip + limit]


def create_candidate(db: Session, actor: Actor, fields: Dict[str, Any]) -> Candidate:
    result = decide(workflow.decide_create_candidate, fields, actor.id, actor.permissions)
    created = commit(db, result, actor.id)
    return created["candidate"]


def update_candidate(
    db: Session,
    actor: Actor,
    candidate_id: int,
    changes: Dict[str, Any],
    expected_version: Optional[int] = None,
) -> Candidate:
    candidate = records.get_or_raise(db, Candidate, candidate_id)
    result = decide(workflow.decide_update_candidate, candidate, changes, actor.permissions, expected_version)
    commit(db, result, actor.id)
    return candidate


def close_candidate(
    db: Session,
    actor: Actor,
    candidate_id: int,
    status: CandidateStatus,
    expected_version: Optional[int] = None,
) -> Candidate:
    candidate = records.get_or_raise(db, Candidate, candidate_id)
    result = decide(workflow.decide_close_candidate, candidate, status, actor.permissions, expected_version)
    commit(db, result, actor.id)
    return candidate


def soft_delete_candidate(db: Session, actor: Actor, candidate_id: int) -> Candidate:
    require_capability(actor.permissions, Capability.DELETE_CANDIDATES, "delete a candidate")
    candidate = records.get_or_raise(db, Candidate, candidate_id)
    with atomic(db, f"soft delete candidate {candidate_id}"):
        records.soft_delete(db, candidate, actor.id)
    logger.info(f"Candidate {candidate_id} soft-deleted", extra={"actor_id": actor.id})
    return candidate


def restore_candidate(db: Session, actor: Actor, candidate_id: int) -> Candidate:
    require_capability(actor.permissions, Capability.DELETE_CANDIDATES, "restore a candidate")
    candidate = records.get_or_raise(db, Candidate, candidate_id, include_deleted=True)
    with atomic(db, f"restore candidate {candidate_id}"):
        records.restore(db, candidate)
    logger.info(f"Candidate {candidate_id} restored", extra={"actor_id": actor.id})
    return candidate


def hard_delete_candidate(db: Session, actor: Actor, candidate_id: int) -> None:
    """Permanently delete a candidate. Superadmin only; refused once converted."""
    if not actor.permissions.can_hard_delete:
        raise PermissionDeniedError(
            "Permission 'can_hard_delete' is required to permanently delete a candidate",
            entity=EntityType.CANDIDATE.value,
            entity_id=candidate_id,
            field=Capability.HARD_DELETE.value,
        )
    candidate = records.get_or_raise(db, Candidate, candidate_id, include_deleted=True)
    consultant = db.query(Consultant).filter(Consultant.candidate_id == candidate_id).first()
    if consultant is not None:
        raise ConflictError(
            f"Candidate {candidate_id} has been converted to consultant {consultant.id} and cannot be deleted",
            entity=EntityType.CANDIDATE.value,
            entity_id=candidate_id,
            field="consultant",
            actual=candidate.status,
        )
    with atomic(db, f"hard delete candidate {candidate_id}"):
        records.hard_delete(db, candidate)
    logger.info(f"Candidate {candidate_id} permanently deleted", extra={"actor_id": actor.id})


def schedule_interview(
    db: Session,
    actor: Actor,
    candidate_id: int,
    stage: InterviewStage,
    scheduled_at=None,
    interviewer_id: Optional[str] = None,
) -> Interview:
    candidate = records.get_or_raise(db, Candidate, candidate_id)
    result = decide(
        workflow.decide_schedule_interview,
        candidate, stage, scheduled_at, interviewer_id, actor.id, actor.permissions,
    )
    created = commit(db, result, actor.id)
    return created["interview"]


def record_interview_outcome(
    db: Session,
    actor: Actor,
    interview_id: int,
    outcome: InterviewOutcome,
    feedback: Dict[str, Any],
) -> Interview:
    interview = records.get_or_raise(db, Interview, interview_id)
    candidate = records.get_or_raise(db, Candidate, interview.candidate_id)
    result = decide(workflow.decide_record_outcome, interview, candidate, outcome, feedback, actor.permissions)
    commit(db, result, actor.id)
    return interview


def list_interviews(db: Session, actor: Actor, candidate_id: int) -> List[Interview]:
    require_capability(actor.permissions, Capability.VIEW_INTERVIEWS, "view interviews")
    records.get_or_raise(db, Candidate, candidate_id)
    return records.get_multi(db, Interview, limit=None, candidate_id=candidate_id)
