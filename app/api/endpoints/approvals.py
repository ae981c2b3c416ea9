"""
API endpoints for the approval chain and the HR ticket queue.

    pending_director -> pending_hr -> approved   (payload applied at HR approval)
    pending_director | pending_hr -> rejected
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import Actor, get_current_actor
from app.models.approval_request import ApprovalStatus
from app.models.hr_ticket import HrTicketStatus
from app.schemas.candidate import VersionedRequest
from app.schemas.mission import ApprovalRejectRequest, ApprovalRequestCreate, ApprovalRequestResponse
from app.schemas.offer import HrTicketAssign, HrTicketCreate, HrTicketResponse
from app.services import approval_service

router = APIRouter(prefix="/approvals", tags=["Approvals"])
tickets_router = APIRouter(prefix="/hr-tickets", tags=["HR Tickets"])
logger = logging.getLogger(__name__)


def _expected_version(body: Optional[VersionedRequest]) -> Optional[int]:
    return body.expected_version if body else None


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=ApprovalRequestResponse)
def submit_request(
    request: ApprovalRequestCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Request a salary increase, bonus payment or exit for a consultant."""
    return approval_service.submit_request(
        db, actor, request.consultant_id, request.request_type, request.request_data,
    )


@router.get("/", response_model=List[ApprovalRequestResponse])
def list_requests(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[ApprovalStatus] = None,
    consultant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return approval_service.list_requests(db, actor, skip=skip, limit=limit, status=status, consultant_id=consultant_id)


@router.get("/{request_id}", response_model=ApprovalRequestResponse)
def get_request(request_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return approval_service.get_request(db, actor, request_id)


@router.post("/{request_id}/director-approve", response_model=ApprovalRequestResponse)
def director_approve(
    request_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return approval_service.director_approve(db, actor, request_id, _expected_version(body))


@router.post("/{request_id}/hr-approve", response_model=ApprovalRequestResponse)
def hr_approve(
    request_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Final approval; the change is applied to the consultant in the same transaction."""
    return approval_service.hr_approve(db, actor, request_id, _expected_version(body))


@router.post("/{request_id}/reject", response_model=ApprovalRequestResponse)
def reject_request(
    request_id: int,
    request: ApprovalRejectRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return approval_service.reject_request(
        db, actor, request_id, request.stage, request.reason, request.expected_version,
    )


@tickets_router.post("/", status_code=status.HTTP_201_CREATED, response_model=HrTicketResponse)
def create_ticket(
    request: HrTicketCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return approval_service.create_ticket(db, actor, request.model_dump())


@tickets_router.get("/", response_model=List[HrTicketResponse])
def list_tickets(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[HrTicketStatus] = None,
    assigned_to: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return approval_service.list_tickets(db, actor, skip=skip, limit=limit, status=status, assigned_to=assigned_to)


@tickets_router.get("/{ticket_id}", response_model=HrTicketResponse)
def get_ticket(ticket_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return approval_service.get_ticket(db, actor, ticket_id)


@tickets_router.post("/{ticket_id}/assign", response_model=HrTicketResponse)
def assign_ticket(
    ticket_id: int,
    request: HrTicketAssign,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return approval_service.assign_ticket(db, actor, ticket_id, request.assignee_id, request.expected_version)


@tickets_router.post("/{ticket_id}/start", response_model=HrTicketResponse)
def start_ticket(
    ticket_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return approval_service.start_ticket(db, actor, ticket_id, _expected_version(body))


@tickets_router.post("/{ticket_id}/complete", response_model=HrTicketResponse)
def complete_ticket(
    ticket_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return approval_service.complete_ticket(db, actor, ticket_id, _expected_version(body))


@tickets_router.post("/{ticket_id}/cancel", response_model=HrTicketResponse)
def cancel_ticket(
    ticket_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return approval_service.cancel_ticket(db, actor, ticket_id, _expected_version(body))
