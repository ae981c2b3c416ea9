"""
Offer / contract state machine.

    pending_approval -> approved -> contract_sent -> contract_signed -> (conversion)
            |
            +-> rejected

pending_approval, approved and contract_sent may also be withdrawn. Every
transition mirrors its state onto the candidate's override status.
A candidate who was rejected or withdrew blocks every transition except
withdrawal, which cancels the offer and leaves the candidate as it is.
Conversion into a Consultant is a separate, explicit step that only a
signed offer allows, at most once per candidate.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from app.core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from app.models.candidate import CandidateStatus
from app.models.consultant import ConsultantStatus
from app.models.hr_ticket import HrTicketStatus, HrTicketType
from app.models.offer import OfferStatus
from app.workflow.effects import CreateEffect, EntityType, Ref, TransitionResult, UpdateEffect, guard
from app.workflow.guards import require_capability, require_reason, require_status, utcnow
from app.workflow.permissions import Capability, Permissions

ACTIVE_OFFER_STATUSES = frozenset({
    OfferStatus.PENDING_APPROVAL,
    OfferStatus.APPROVED,
    OfferStatus.CONTRACT_SENT,
    OfferStatus.CONTRACT_SIGNED,
})
WITHDRAWABLE_STATUSES = (
    OfferStatus.PENDING_APPROVAL,
    OfferStatus.APPROVED,
    OfferStatus.CONTRACT_SENT,
)
# Candidate overrides owned by the offer workflow
OFFER_CANDIDATE_STATUSES = frozenset({
    CandidateStatus.OFFER_PENDING,
    CandidateStatus.OFFER_APPROVED,
    CandidateStatus.OFFER_REJECTED,
    CandidateStatus.CONTRACT_SENT,
    CandidateStatus.CONTRACT_SIGNED,
})
_OPEN_TICKET_STATUSES = frozenset({
    HrTicketStatus.PENDING,
    HrTicketStatus.IN_PROGRESS,
    HrTicketStatus.CONTRACT_SENT,
    HrTicketStatus.CONTRACT_SIGNED,
})


def _candidate_update(candidate, status: CandidateStatus) -> UpdateEffect:
    return UpdateEffect(
        EntityType.CANDIDATE,
        candidate.id,
        {"status": status},
        expected=guard(candidate, with_version=False),
    )


def _ticket_update(ticket, changes: Dict[str, Any]) -> Optional[UpdateEffect]:
    if ticket is None or ticket.status not in _OPEN_TICKET_STATUSES:
        return None
    return UpdateEffect(EntityType.HR_TICKET, ticket.id, changes, expected=guard(ticket, with_version=False))


def _require_decider(offer, actor_id: str, permissions: Permissions, action: str) -> None:
    if actor_id != offer.approver_id and not permissions.is_admin:
        raise PermissionDeniedError(
            f"Only the designated approver ({offer.approver_id}) or an admin can {action} offer {offer.id}",
            entity=EntityType.OFFER.value,
            entity_id=offer.id,
            field="approver_id",
        )


def _require_candidate_open(candidate, offer, action: str) -> None:
    if candidate.status in (CandidateStatus.REJECTED, CandidateStatus.WITHDRAWN):
        raise ConflictError(
            f"Cannot {action} offer {offer.id}: candidate {candidate.id} is '{candidate.status.value}'",
            entity=EntityType.CANDIDATE.value,
            entity_id=candidate.id,
            actual=candidate.status,
        )


def decide_create_offer(
    candidate,
    existing_offers: Iterable,
    terms: Dict[str, Any],
    actor_id: str,
    permissions: Permissions,
) -> TransitionResult:
    require_capability(permissions, Capability.CREATE_CONTRACTS, "create an offer")

    if candidate.status in (
        CandidateStatus.CONVERTED_TO_CONSULTANT,
        CandidateStatus.REJECTED,
        CandidateStatus.WITHDRAWN,
    ):
        raise ConflictError(
            f"Cannot create an offer for candidate {candidate.id} in status '{candidate.status.value}'",
            entity=EntityType.CANDIDATE.value,
            entity_id=candidate.id,
            actual=candidate.status,
        )

    for offer in existing_offers:
        if offer.status in ACTIVE_OFFER_STATUSES:
            raise ConflictError(
                f"Candidate {candidate.id} already has offer {offer.id} in status '{offer.status.value}'",
                entity=EntityType.OFFER.value,
                entity_id=offer.id,
                actual=offer.status,
            )

    if terms.get("salary") is None and terms.get("day_rate") is None:
        raise ValidationError(
            "An offer needs a salary or a day rate",
            entity=EntityType.OFFER.value,
            field="salary",
        )

    fields = dict(terms)
    fields.update({
        "candidate_id": candidate.id,
        "status": OfferStatus.PENDING_APPROVAL,
        "requested_by": actor_id,
        "created_by": actor_id,
    })
    return TransitionResult(
        effects=[
            CreateEffect(EntityType.OFFER, fields, ref="offer"),
            _candidate_update(candidate, CandidateStatus.OFFER_PENDING),
        ],
        summary=f"Offer created for candidate {candidate.id}, awaiting approval by {terms.get('approver_id')}",
    )


def decide_approve_offer(
    offer,
    candidate,
    actor_id: str,
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_status(EntityType.OFFER, offer, [OfferStatus.PENDING_APPROVAL], "approve offer")
    _require_decider(offer, actor_id, permissions, "approve")
    _require_candidate_open(candidate, offer, "approve")
    now = now or utcnow()

    return TransitionResult(
        effects=[
            UpdateEffect(
                EntityType.OFFER,
                offer.id,
                {"status": OfferStatus.APPROVED, "approved_at": now, "approved_by": actor_id},
                expected=guard(offer, expected_version=expected_version),
            ),
            _candidate_update(candidate, CandidateStatus.OFFER_APPROVED),
            CreateEffect(
                EntityType.HR_TICKET,
                {
                    "ticket_type": HrTicketType.CONTRACT_SEND,
                    "status": HrTicketStatus.PENDING,
                    "title": f"Send contract: {candidate.first_name} {candidate.last_name}",
                    "candidate_id": candidate.id,
                    "offer_id": offer.id,
                    "created_by": actor_id,
                },
                ref="ticket",
            ),
        ],
        summary=f"Offer {offer.id} approved by {actor_id}",
    )


def decide_reject_offer(
    offer,
    candidate,
    actor_id: str,
    reason: Optional[str],
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    reason = require_reason(reason, EntityType.OFFER, offer.id)
    require_status(EntityType.OFFER, offer, [OfferStatus.PENDING_APPROVAL], "reject offer")
    _require_decider(offer, actor_id, permissions, "reject")
    _require_candidate_open(candidate, offer, "reject")
    now = now or utcnow()

    return TransitionResult(
        effects=[
            UpdateEffect(
                EntityType.OFFER,
                offer.id,
                {
                    "status": OfferStatus.REJECTED,
                    "rejected_at": now,
                    "rejected_by": actor_id,
                    "rejection_reason": reason,
                },
                expected=guard(offer, expected_version=expected_version),
            ),
            _candidate_update(candidate, CandidateStatus.OFFER_REJECTED),
        ],
        summary=f"Offer {offer.id} rejected by {actor_id}: {reason}",
    )


def decide_withdraw_offer(
    offer,
    candidate,
    ticket,
    actor_id: str,
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_status(EntityType.OFFER, offer, WITHDRAWABLE_STATUSES, "withdraw offer")
    if actor_id != offer.requested_by and not permissions.is_admin and not permissions.can_create_contracts:
        raise PermissionDeniedError(
            f"Only the requester or a user who can create contracts may withdraw offer {offer.id}",
            entity=EntityType.OFFER.value,
            entity_id=offer.id,
            field="requested_by",
        )
    now = now or utcnow()

    effects = [
        UpdateEffect(
            EntityType.OFFER,
            offer.id,
            {"status": OfferStatus.WITHDRAWN, "withdrawn_at": now, "withdrawn_by": actor_id},
            expected=guard(offer, expected_version=expected_version),
        ),
    ]
    # Hand the candidate back to interview-derived status
    if candidate.status in OFFER_CANDIDATE_STATUSES:
        effects.append(_candidate_update(candidate, CandidateStatus.SOURCED))
    ticket_effect = _ticket_update(ticket, {"status": HrTicketStatus.CANCELLED})
    if ticket_effect:
        effects.append(ticket_effect)

    return TransitionResult(effects=effects, summary=f"Offer {offer.id} withdrawn by {actor_id}")


def decide_mark_contract_sent(
    offer,
    candidate,
    ticket,
    actor_id: str,
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_HR_TICKETS, "mark a contract as sent")
    require_status(EntityType.OFFER, offer, [OfferStatus.APPROVED], "mark contract sent")
    _require_candidate_open(candidate, offer, "send the contract for")
    now = now or utcnow()

    effects = [
        UpdateEffect(
            EntityType.OFFER,
            offer.id,
            {"status": OfferStatus.CONTRACT_SENT, "contract_sent_at": now},
            expected=guard(offer, expected_version=expected_version),
        ),
        _candidate_update(candidate, CandidateStatus.CONTRACT_SENT),
    ]
    ticket_effect = _ticket_update(ticket, {"status": HrTicketStatus.CONTRACT_SENT, "assigned_to": actor_id})
    if ticket_effect:
        effects.append(ticket_effect)

    return TransitionResult(effects=effects, summary=f"Contract for offer {offer.id} sent by {actor_id}")


def decide_mark_contract_signed(
    offer,
    candidate,
    ticket,
    actor_id: str,
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_HR_TICKETS, "mark a contract as signed")
    require_status(EntityType.OFFER, offer, [OfferStatus.CONTRACT_SENT], "mark contract signed")
    _require_candidate_open(candidate, offer, "sign the contract for")
    now = now or utcnow()

    effects = [
        UpdateEffect(
            EntityType.OFFER,
            offer.id,
            {"status": OfferStatus.CONTRACT_SIGNED, "contract_signed_at": now},
            expected=guard(offer, expected_version=expected_version),
        ),
        _candidate_update(candidate, CandidateStatus.CONTRACT_SIGNED),
    ]
    ticket_effect = _ticket_update(ticket, {"status": HrTicketStatus.CONTRACT_SIGNED})
    if ticket_effect:
        effects.append(ticket_effect)

    return TransitionResult(effects=effects, summary=f"Contract for offer {offer.id} signed")


def decide_convert_to_consultant(
    offer,
    candidate,
    existing_consultant,
    ticket,
    actor_id: str,
    permissions: Permissions,
    now: Optional[datetime] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.CONVERT_CANDIDATES, "convert a candidate to a consultant")
    require_status(EntityType.OFFER, offer, [OfferStatus.CONTRACT_SIGNED], "convert to consultant")

    if existing_consultant is not None or candidate.status == CandidateStatus.CONVERTED_TO_CONSULTANT:
        raise ConflictError(
            f"Candidate {candidate.id} has already been converted to a consultant",
            entity=EntityType.CONSULTANT.value,
            entity_id=getattr(existing_consultant, "id", None),
            field="candidate_id",
            expected=None,
            actual=CandidateStatus.CONVERTED_TO_CONSULTANT,
        )
    _require_candidate_open(candidate, offer, "convert")
    now = now or utcnow()

    effects = [
        CreateEffect(
            EntityType.CONSULTANT,
            {
                "candidate_id": candidate.id,
                "first_name": candidate.first_name,
                "last_name": candidate.last_name,
                "email": candidate.email,
                "job_title": offer.job_title,
                "status": ConsultantStatus.BENCH,
                "salary": offer.salary,
                "day_rate": offer.day_rate,
                "total_bonus_paid": 0.0,
                "start_date": offer.start_date,
                "created_by": actor_id,
            },
            ref="consultant",
        ),
        _candidate_update(candidate, CandidateStatus.CONVERTED_TO_CONSULTANT),
    ]
    ticket_effect = _ticket_update(
        ticket,
        {"status": HrTicketStatus.COMPLETED, "completed_at": now, "consultant_id": Ref("consultant")},
    )
    if ticket_effect:
        effects.append(ticket_effect)

    return TransitionResult(effects=effects, summary=f"Candidate {candidate.id} converted to consultant")
