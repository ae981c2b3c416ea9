"""
Offer / contract operations and conversion into a consultant.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.deps import Actor
from app.crud import records
from app.models.candidate import Candidate
from app.models.consultant import Consultant
from app.models.hr_ticket import HrTicket, HrTicketType
from app.models.offer import Offer, OfferStatus
from app.services.committer import commit, decide
from app.workflow import offers as workflow
from app.workflow.guards import require_capability
from app.workflow.permissions import Capability

logger = logging.getLogger(__name__)


def _contract_ticket(db: Session, offer_id: int) -> Optional[HrTicket]:
    return (
        db.query(HrTicket)
        .filter(HrTicket.offer_id == offer_id, HrTicket.ticket_type == HrTicketType.CONTRACT_SEND)
        .order_by(HrTicket.id.desc())
        .first()
    )


def _load(db: Session, offer_id: int):
    offer = records.get_or_raise(db, Offer, offer_id)
    candidate = records.get_or_raise(db, Candidate, offer.candidate_id, include_deleted=True)
    return offer, candidate


def get_offer(db: Session, actor: Actor, offer_id: int) -> Offer:
    require_capability(actor.permissions, Capability.VIEW_CONTRACTS, "view offers")
    return records.get_or_raise(db, Offer, offer_id)


def list_offers(
    db: Session,
    actor: Actor,
    skip: int = 0,
    limit: int = 100,
    status: Optional[OfferStatus] = None,
    candidate_id: Optional[int] = None,
) -> List[Offer]:
    require_capability(actor.permissions, Capability.VIEW_CONTRACTS, "view offers")
    return records.get_multi(db, Offer, skip=skip, limit=limit, status=status, candidate_id=candidate_id)


def create_offer(db: Session, actor: Actor, terms: Dict[str, Any]) -> Offer:
    terms = dict(terms)
    candidate = records.get_or_raise(db, Candidate, terms.pop("candidate_id"))
    existing = records.get_multi(db, Offer, limit=None, candidate_id=candidate.id)
    result = decide(workflow.decide_create_offer, candidate, existing, terms, actor.id, actor.permissions)
    return commit(db, result, actor.id)["offer"]


def approve_offer(db: Session, actor: Actor, offer_id: int, expected_version: Optional[int] = None) -> Offer:
    offer, candidate = _load(db, offer_id)
    result = decide(
        workflow.decide_approve_offer,
        offer, candidate, actor.id, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return offer


def reject_offer(
    db: Session,
    actor: Actor,
    offer_id: int,
    reason: Optional[str],
    expected_version: Optional[int] = None,
) -> Offer:
    offer, candidate = _load(db, offer_id)
    result = decide(
        workflow.decide_reject_offer,
        offer, candidate, actor.id, reason, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return offer


def withdraw_offer(db: Session, actor: Actor, offer_id: int, expected_version: Optional[int] = None) -> Offer:
    offer, candidate = _load(db, offer_id)
    result = decide(
        workflow.decide_withdraw_offer,
        offer, candidate, _contract_ticket(db, offer_id), actor.id, actor.permissions,
        expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return offer


def mark_contract_sent(db: Session, actor: Actor, offer_id: int, expected_version: Optional[int] = None) -> Offer:
    offer, candidate = _load(db, offer_id)
    result = decide(
        workflow.decide_mark_contract_sent,
        offer, candidate, _contract_ticket(db, offer_id), actor.id, actor.permissions,
        expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return offer


def mark_contract_signed(db: Session, actor: Actor, offer_id: int, expected_version: Optional[int] = None) -> Offer:
    offer, candidate = _load(db, offer_id)
    result = decide(
        workflow.decide_mark_contract_signed,
        offer, candidate, _contract_ticket(db, offer_id), actor.id, actor.permissions,
        expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return offer


def convert_to_consultant(db: Session, actor: Actor, offer_id: int) -> Consultant:
    """
    Create the consultant for a signed offer.

    The unique constraint on Consultant.candidate_id backs the in-memory
    check, so two racing conversions still yield a single consultant.
    """
    offer, candidate = _load(db, offer_id)
    existing = db.query(Consultant).filter(Consultant.candidate_id == candidate.id).first()
    result = decide(
        workflow.decide_convert_to_consultant,
        offer, candidate, existing, _contract_ticket(db, offer_id), actor.id, actor.permissions,
    )
    return commit(db, result, actor.id)["consultant"]
