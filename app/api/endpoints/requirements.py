"""
API endpoints for requirements, bids, projects and mission creation.
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import Actor, get_current_actor
from app.models.requirement import Requirement, RequirementStatus
from app.schemas.mission import MissionCreate, MissionResponse
from app.schemas.requirement import (
    BidOutcomeRequest,
    GoNoGoRequest,
    MeddpiccUpdate,
    ProjectCreate,
    ProjectResponse,
    ProposalRequest,
    RequirementCreate,
    RequirementResponse,
    RequirementStatusChange,
    WinningCandidateRequest,
)
from app.services import requirement_service
from app.workflow.requirements import compute_meddpicc_score, meddpicc_scores

router = APIRouter(prefix="/requirements", tags=["Requirements"])
projects_router = APIRouter(prefix="/projects", tags=["Projects"])
logger = logging.getLogger(__name__)


def to_response(requirement: Requirement) -> RequirementResponse:
    score = compute_meddpicc_score(meddpicc_scores(requirement))
    data = {column.name: getattr(requirement, column.name) for column in Requirement.__table__.columns}
    data.update(meddpicc_score=score.value, meddpicc_insufficient_data=score.insufficient_data)
    return RequirementResponse.model_validate(data)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=RequirementResponse)
def create_requirement(
    request: RequirementCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Create a requirement.

    Time-and-materials requirements start `active`. Fixed-price requirements
    without a project start as a bid (`opportunity`, bid status `qualifying`).
    """
    fields = request.model_dump(exclude_none=True)
    return to_response(requirement_service.create_requirement(db, actor, fields))


@router.get("/", response_model=List[RequirementResponse])
def list_requirements(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[RequirementStatus] = None,
    is_bid: Optional[bool] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    items = requirement_service.list_requirements(db, actor, skip=skip, limit=limit, status=status, is_bid=is_bid)
    return [to_response(r) for r in items]


@router.get("/{requirement_id}", response_model=RequirementResponse)
def get_requirement(requirement_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return to_response(requirement_service.get_requirement(db, actor, requirement_id))


@router.delete("/{requirement_id}", response_model=RequirementResponse)
def delete_requirement(requirement_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return to_response(requirement_service.delete_requirement(db, actor, requirement_id))


@router.post("/{requirement_id}/status", response_model=RequirementResponse)
def change_status(
    requirement_id: int,
    request: RequirementStatusChange,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Manual status change (hold, resume, cancel, lose)."""
    requirement = requirement_service.change_status(
        db, actor, requirement_id, request.status, request.expected_version,
    )
    return to_response(requirement)


@router.post("/{requirement_id}/winning-candidate", response_model=RequirementResponse)
def set_winning_candidate(
    requirement_id: int,
    request: WinningCandidateRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Mark a time-and-materials requirement won with its candidate, or name the candidate of a won bid."""
    requirement = requirement_service.set_winning_candidate(
        db, actor, requirement_id, request.candidate_id, request.expected_version,
    )
    return to_response(requirement)


@router.put("/{requirement_id}/meddpicc", response_model=RequirementResponse)
def update_meddpicc(
    requirement_id: int,
    request: MeddpiccUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    scores = request.model_dump(exclude_unset=True, exclude={"notes", "expected_version"})
    requirement = requirement_service.update_meddpicc(
        db, actor, requirement_id, scores, request.notes, request.expected_version,
    )
    return to_response(requirement)


@router.post("/{requirement_id}/go-nogo", response_model=RequirementResponse)
def go_nogo(
    requirement_id: int,
    request: GoNoGoRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Record the go/no-go decision for a qualifying bid.

    "go" needs a MEDDPICC score at or above the configured threshold; "nogo"
    closes the bid as lost.
    """
    requirement = requirement_service.go_nogo(db, actor, requirement_id, request.decision, request.expected_version)
    return to_response(requirement)


@router.post("/{requirement_id}/proposal", response_model=RequirementResponse)
def submit_proposal(
    requirement_id: int,
    request: ProposalRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    proposal = request.model_dump(exclude={"expected_version"})
    requirement = requirement_service.submit_proposal(
        db, actor, requirement_id, proposal, request.expected_version,
    )
    return to_response(requirement)


@router.post("/{requirement_id}/outcome", response_model=RequirementResponse)
def record_bid_outcome(
    requirement_id: int,
    request: BidOutcomeRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    requirement = requirement_service.record_bid_outcome(
        db, actor, requirement_id, request.outcome, request.reason, request.lessons_learned,
        request.expected_version,
    )
    return to_response(requirement)


@router.post("/{requirement_id}/project", status_code=status.HTTP_201_CREATED, response_model=ProjectResponse)
def create_project(
    requirement_id: int,
    request: Optional[ProjectCreate] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Create the project of a won requirement.

    Refused with 400 until the owning company (or its parent, for a
    subsidiary) has a financial scoring.
    """
    fields = request.model_dump(exclude_none=True) if request else {}
    return requirement_service.create_project(db, actor, requirement_id, fields)


@router.post("/{requirement_id}/missions", status_code=status.HTTP_201_CREATED, response_model=MissionResponse)
def create_mission(
    requirement_id: int,
    request: MissionCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Create a mission for the requirement's winning candidate.

    Needs the candidate converted to a consultant and a resolvable customer;
    creates and links the project when there is none yet.
    """
    return requirement_service.create_mission(db, actor, requirement_id, request.model_dump())


@projects_router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return requirement_service.get_project(db, actor, project_id)
