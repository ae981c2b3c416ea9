"""
API endpoints for missions and consultants.

Missions are created from their requirement (POST /requirements/{id}/missions).
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import Actor, get_current_actor
from app.models.consultant import ConsultantStatus
from app.models.mission import MissionStatus
from app.schemas.mission import MissionComplete, MissionResponse, MissionUpdate
from app.schemas.offer import ConsultantResponse
from app.services import mission_service

router = APIRouter(prefix="/missions", tags=["Missions"])
consultants_router = APIRouter(prefix="/consultants", tags=["Consultants"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[MissionResponse])
def list_missions(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[MissionStatus] = None,
    consultant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return mission_service.list_missions(db, actor, skip=skip, limit=limit, status=status, consultant_id=consultant_id)


@router.get("/{mission_id}", response_model=MissionResponse)
def get_mission(mission_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return mission_service.get_mission(db, actor, mission_id)


@router.patch("/{mission_id}", response_model=MissionResponse)
def update_mission(
    mission_id: int,
    request: MissionUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Edit a mission.

    Without manage_missions only `end_date`, `notes` and moving the mission
    to `completed` are allowed.
    """
    changes = request.model_dump(exclude_unset=True, exclude={"expected_version"})
    return mission_service.update_mission(db, actor, mission_id, changes, request.expected_version)


@router.post("/{mission_id}/complete", response_model=MissionResponse)
def complete_mission(
    mission_id: int,
    request: MissionComplete,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Complete a mission.

    The consultant goes back to the bench unless another of its missions
    is still active.
    """
    return mission_service.complete_mission(db, actor, mission_id, request.end_date, request.expected_version)


@consultants_router.get("/", response_model=List[ConsultantResponse])
def list_consultants(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[ConsultantStatus] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return mission_service.list_consultants(db, actor, skip=skip, limit=limit, status=status)


@consultants_router.get("/{consultant_id}", response_model=ConsultantResponse)
def get_consultant(consultant_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return mission_service.get_consultant(db, actor, consultant_id)
