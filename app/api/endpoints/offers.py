"""
API endpoints for the offer / contract workflow.

    pending_approval -> approved -> contract_sent -> contract_signed -> convert
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import Actor, get_current_actor
from app.models.offer import OfferStatus
from app.schemas.candidate import ReasonRequest, VersionedRequest
from app.schemas.offer import ConsultantResponse, OfferCreate, OfferResponse
from app.services import offer_service

router = APIRouter(prefix="/offers", tags=["Offers"])
logger = logging.getLogger(__name__)


def _expected_version(body: Optional[VersionedRequest]) -> Optional[int]:
    return body.expected_version if body else None


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=OfferResponse)
def create_offer(
    request: OfferCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Propose terms to a candidate; the candidate moves to `offer_pending`."""
    return offer_service.create_offer(db, actor, request.model_dump())


@router.get("/", response_model=List[OfferResponse])
def list_offers(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[OfferStatus] = None,
    candidate_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return offer_service.list_offers(db, actor, skip=skip, limit=limit, status=status, candidate_id=candidate_id)


@router.get("/{offer_id}", response_model=OfferResponse)
def get_offer(offer_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return offer_service.get_offer(db, actor, offer_id)


@router.post("/{offer_id}/approve", response_model=OfferResponse)
def approve_offer(
    offer_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Approve a pending offer.

    Only the designated approver or an admin may approve. Opens the
    contract HR ticket.
    """
    return offer_service.approve_offer(db, actor, offer_id, _expected_version(body))


@router.post("/{offer_id}/reject", response_model=OfferResponse)
def reject_offer(
    offer_id: int,
    request: ReasonRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return offer_service.reject_offer(db, actor, offer_id, request.reason, request.expected_version)


@router.post("/{offer_id}/withdraw", response_model=OfferResponse)
def withdraw_offer(
    offer_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return offer_service.withdraw_offer(db, actor, offer_id, _expected_version(body))


@router.post("/{offer_id}/contract-sent", response_model=OfferResponse)
def mark_contract_sent(
    offer_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return offer_service.mark_contract_sent(db, actor, offer_id, _expected_version(body))


@router.post("/{offer_id}/contract-signed", response_model=OfferResponse)
def mark_contract_signed(
    offer_id: int,
    body: Optional[VersionedRequest] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return offer_service.mark_contract_signed(db, actor, offer_id, _expected_version(body))


@router.post("/{offer_id}/convert", status_code=status.HTTP_201_CREATED, response_model=ConsultantResponse)
def convert_to_consultant(
    offer_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Convert the candidate of a signed offer into a consultant (on the bench).

    A second conversion for the same candidate returns 409.
    """
    consultant = offer_service.convert_to_consultant(db, actor, offer_id)
    logger.info(f"Consultant {consultant.id} created from offer {offer_id}")
    return consultant
