"""
API endpoints for candidate management and interviews.

The status returned for a candidate is always the derived pipeline status;
interview stages are never stored on the candidate.
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import Actor, get_current_actor
from app.models.candidate import Candidate, CandidateStatus
from app.schemas.candidate import (
    CandidateCreate,
    CandidateResponse,
    CandidateUpdate,
    InterviewCreate,
    InterviewOutcomeRequest,
    InterviewResponse,
    VersionedRequest,
)
from app.services import candidate_service

router = APIRouter(prefix="/candidates", tags=["Candidates"])
interviews_router = APIRouter(prefix="/interviews", tags=["Interviews"])
logger = logging.getLogger(__name__)


def to_response(candidate: Candidate) -> CandidateResponse:
    pipeline = candidate_service.pipeline_status(candidate)
    data = {column.name: getattr(candidate, column.name) for column in Candidate.__table__.columns}
    data.update(pipeline_status=pipeline.status, pipeline_label=pipeline.label)
    return CandidateResponse.model_validate(data)


def _expected_version(body: Optional[VersionedRequest]) -> Optional[int]:
    return body.expected_version if body else None


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=CandidateResponse)
def create_candidate(
    request: CandidateCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Add a candidate in `sourced` status.

    Manual entry and CV-prefilled input post the same payload; parsed CV
    fields are only ever a suggestion confirmed by the user.
    """
    candidate = candidate_service.create_candidate(db, actor, request.model_dump())
    return to_response(candidate)


@router.get("/", response_model=List[CandidateResponse])
def list_candidates(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[CandidateStatus] = Query(None, description="Filter on the derived pipeline status"),
    include_deleted: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    items = candidate_service.list_candidates(
        db, actor, skip=skip, limit=limit, status=status, include_deleted=include_deleted,
    )
    return [to_response(candidate) for candidate, _ in items]


@router.get("/{candidate_id}", response_model=CandidateResponse)
def get_candidate(
    candidate_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return to_response(candidate_service.get_candidate(db, actor, candidate_id))


@router.patch("/{candidate_id}", response_model=CandidateResponse)
def update_candidate(
    candidate_id: int,
    request: CandidateUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    changes = request.model_dump(exclude_unset=True, exclude={"expected_version"})
    candidate = candidate_service.update_candidate(
        db, actor, candidate_id, changes, expected_version=request.expected_version,
    )
    return to_response(candidate)


@router.post("/{candidate_id}/reject", response_model=CandidateResponse)
def reject_candidate(
    candidate_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    candidate = candidate_service.close_candidate(
        db, actor, candidate_id, CandidateStatus.REJECTED, _expected_version(body),
    )
    return to_response(candidate)


@router.post("/{candidate_id}/withdraw", response_model=CandidateResponse)
def withdraw_candidate(
    candidate_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    candidate = candidate_service.close_candidate(
        db, actor, candidate_id, CandidateStatus.WITHDRAWN, _expected_version(body),
    )
    return to_response(candidate)


@router.delete("/{candidate_id}", response_model=CandidateResponse)
def delete_candidate(
    candidate_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Soft delete (recoverable through /restore)."""
    return to_response(candidate_service.soft_delete_candidate(db, actor, candidate_id))


@router.post("/{candidate_id}/restore", response_model=CandidateResponse)
def restore_candidate(
    candidate_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return to_response(candidate_service.restore_candidate(db, actor, candidate_id))


@router.delete("/{candidate_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
def hard_delete_candidate(
    candidate_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Permanently delete a candidate and its interviews and offers.

    **Superadmin only.** Refused once the candidate has become a consultant.
    """
    candidate_service.hard_delete_candidate(db, actor, candidate_id)


@router.post(
    "/{candidate_id}/interviews",
    status_code=status.HTTP_201_CREATED,
    response_model=InterviewResponse,
)
def schedule_interview(
    candidate_id: int,
    request: InterviewCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return candidate_service.schedule_interview(
        db, actor, candidate_id, request.stage, request.scheduled_at, request.interviewer_id,
    )


@router.get("/{candidate_id}/interviews", response_model=List[InterviewResponse])
def list_interviews(
    candidate_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return candidate_service.list_interviews(db, actor, candidate_id)


@interviews_router.post("/{interview_id}/outcome", response_model=InterviewResponse)
def record_interview_outcome(
    interview_id: int,
    request: InterviewOutcomeRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Record pass / fail / reschedule / pending with feedback scores.

    A fail at any stage makes the candidate's derived status `rejected`.
    """
    feedback = request.model_dump(exclude_unset=True, exclude={"outcome"})
    return candidate_service.record_interview_outcome(db, actor, interview_id, request.outcome, feedback)
