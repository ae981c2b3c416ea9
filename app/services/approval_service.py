"""
Approval chain and HR ticket operations.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.deps import Actor
from app.core.exceptions import PermissionDeniedError
from app.crud import records
from app.models.approval_request import ApprovalRequest, ApprovalRequestType, ApprovalStage, ApprovalStatus
from app.models.consultant import Consultant
from app.models.hr_ticket import HrTicket, HrTicketStatus
from app.services.committer import commit, decide
from app.workflow import approvals, hr_tickets
from app.workflow.effects import EntityType
from app.workflow.guards import require_capability
from app.workflow.permissions import Capability, Permissions

logger = logging.getLogger(__name__)


def _require_approval_viewer(permissions: Permissions) -> None:
    if not (permissions.can_request_hr_changes or permissions.can_director_approve or permissions.can_hr_approve):
        raise PermissionDeniedError(
            "Requesting or approving HR changes is required to view approval requests",
            entity=EntityType.APPROVAL_REQUEST.value,
            field=Capability.REQUEST_HR_CHANGES.value,
        )


def get_request(db: Session, actor: Actor, request_id: int) -> ApprovalRequest:
    _require_approval_viewer(actor.permissions)
    return records.get_or_raise(db, ApprovalRequest, request_id)


def list_requests(
    db: Session,
    actor: Actor,
    skip: int = 0,
    limit: int = 100,
    status: Optional[ApprovalStatus] = None,
    consultant_id: Optional[int] = None,
) -> List[ApprovalRequest]:
    _require_approval_viewer(actor.permissions)
    return records.get_multi(
        db, ApprovalRequest, skip=skip, limit=limit, status=status, consultant_id=consultant_id,
    )


def submit_request(
    db: Session,
    actor: Actor,
    consultant_id: int,
    request_type: ApprovalRequestType,
    request_data: Dict[str, Any],
) -> ApprovalRequest:
    consultant = records.get_or_raise(db, Consultant, consultant_id)
    result = decide(
        approvals.decide_submit_request,
        consultant, request_type, request_data, actor.id, actor.permissions,
    )
    return commit(db, result, actor.id)["approval_request"]


def director_approve(
    db: Session,
    actor: Actor,
    request_id: int,
    expected_version: Optional[int] = None,
) -> ApprovalRequest:
    request = records.get_or_raise(db, ApprovalRequest, request_id)
    result = decide(
        approvals.decide_director_approve,
        request, actor.id, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return request


def hr_approve(
    db: Session,
    actor: Actor,
    request_id: int,
    expected_version: Optional[int] = None,
) -> ApprovalRequest:
    """Approve at HR level and apply the payload to the consultant in the same commit."""
    request = records.get_or_raise(db, ApprovalRequest, request_id)
    consultant = records.get_or_raise(db, Consultant, request.consultant_id)
    result = decide(
        approvals.decide_hr_approve,
        request, consultant, actor.id, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return request


def reject_request(
    db: Session,
    actor: Actor,
    request_id: int,
    stage: ApprovalStage,
    reason: Optional[str],
    expected_version: Optional[int] = None,
) -> ApprovalRequest:
    request = records.get_or_raise(db, ApprovalRequest, request_id)
    result = decide(
        approvals.decide_reject_request,
        request, stage, reason, actor.id, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return request


# ---------------------------------------------------------------------------
# HR tickets
# ---------------------------------------------------------------------------

def get_ticket(db: Session, actor: Actor, ticket_id: int) -> HrTicket:
    require_capability(actor.permissions, Capability.MANAGE_HR_TICKETS, "view HR tickets")
    return records.get_or_raise(db, HrTicket, ticket_id)


def list_tickets(
    db: Session,
    actor: Actor,
    skip: int = 0,
    limit: int = 100,
    status: Optional[HrTicketStatus] = None,
    assigned_to: Optional[str] = None,
) -> List[HrTicket]:
    require_capability(actor.permissions, Capability.MANAGE_HR_TICKETS, "view HR tickets")
    return records.get_multi(db, HrTicket, skip=skip, limit=limit, status=status, assigned_to=assigned_to)


def create_ticket(db: Session, actor: Actor, fields: Dict[str, Any]) -> HrTicket:
    result = decide(hr_tickets.decide_create_ticket, fields, actor.id, actor.permissions)
    return commit(db, result, actor.id)["ticket"]


def assign_ticket(
    db: Session,
    actor: Actor,
    ticket_id: int,
    assignee_id: str,
    expected_version: Optional[int] = None,
) -> HrTicket:
    ticket = records.get_or_raise(db, HrTicket, ticket_id)
    result = decide(
        hr_tickets.decide_assign_ticket, ticket, assignee_id, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return ticket


def start_ticket(db: Session, actor: Actor, ticket_id: int, expected_version: Optional[int] = None) -> HrTicket:
    ticket = records.get_or_raise(db, HrTicket, ticket_id)
    result = decide(
        hr_tickets.decide_start_ticket, ticket, actor.id, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return ticket


def complete_ticket(db: Session, actor: Actor, ticket_id: int, expected_version: Optional[int] = None) -> HrTicket:
    ticket = records.get_or_raise(db, HrTicket, ticket_id)
    result = decide(
        hr_tickets.decide_complete_ticket, ticket, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return ticket


def cancel_ticket(db: Session, actor: Actor, ticket_id: int, expected_version: Optional[int] = None) -> HrTicket:
    ticket = records.get_or_raise(db, HrTicket, ticket_id)
    result = decide(
        hr_tickets.decide_cancel_ticket, ticket, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return ticket
