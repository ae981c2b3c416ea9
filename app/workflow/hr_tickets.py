"""
HR ticket queue transitions.

General tickets are worked by hand: pending -> in_progress -> completed,
or cancelled while open. Contract tickets follow their offer and only
accept assignment here.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from app.core.exceptions import ConflictError, ValidationError
from app.models.hr_ticket import HrTicketPriority, HrTicketStatus, HrTicketType
from app.workflow.effects import CreateEffect, EntityType, TransitionResult, UpdateEffect, guard
from app.workflow.guards import require_capability, require_status, utcnow
from app.workflow.permissions import Capability, Permissions

OPEN_STATUSES = (
    HrTicketStatus.PENDING,
    HrTicketStatus.IN_PROGRESS,
    HrTicketStatus.CONTRACT_SENT,
    HrTicketStatus.CONTRACT_SIGNED,
)


def _require_general(ticket, action: str) -> None:
    if ticket.ticket_type != HrTicketType.GENERAL:
        raise ConflictError(
            f"Cannot {action} ticket {ticket.id}: contract tickets follow their offer",
            entity=EntityType.HR_TICKET.value,
            entity_id=ticket.id,
            field="ticket_type",
            expected=HrTicketType.GENERAL,
            actual=ticket.ticket_type,
        )


def decide_create_ticket(fields: Dict[str, Any], actor_id: str, permissions: Permissions) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_HR_TICKETS, "open an HR ticket")
    title = (fields.get("title") or "").strip()
    if not title:
        raise ValidationError("A ticket title is required", entity=EntityType.HR_TICKET.value, field="title")

    data = dict(fields)
    data.update({
        "title": title,
        "ticket_type": HrTicketType.GENERAL,
        "status": HrTicketStatus.PENDING,
        "priority": data.get("priority") or HrTicketPriority.NORMAL,
        "created_by": actor_id,
    })
    return TransitionResult(
        effects=[CreateEffect(EntityType.HR_TICKET, data, ref="ticket")],
        summary=f"HR ticket '{title}' opened",
    )


def decide_assign_ticket(
    ticket,
    assignee_id: str,
    permissions: Permissions,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_HR_TICKETS, "assign an HR ticket")
    require_status(EntityType.HR_TICKET, ticket, OPEN_STATUSES, "assign ticket")
    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.HR_TICKET,
            ticket.id,
            {"assigned_to": assignee_id},
            expected=guard(ticket, expected_version=expected_version),
        )],
        summary=f"HR ticket {ticket.id} assigned to {assignee_id}",
    )


def decide_start_ticket(
    ticket,
    actor_id: str,
    permissions: Permissions,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_HR_TICKETS, "start an HR ticket")
    _require_general(ticket, "start")
    require_status(EntityType.HR_TICKET, ticket, [HrTicketStatus.PENDING], "start ticket")
    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.HR_TICKET,
            ticket.id,
            {"status": HrTicketStatus.IN_PROGRESS, "assigned_to": ticket.assigned_to or actor_id},
            expected=guard(ticket, expected_version=expected_version),
        )],
        summary=f"HR ticket {ticket.id} in progress",
    )


def decide_complete_ticket(
    ticket,
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_HR_TICKETS, "complete an HR ticket")
    _require_general(ticket, "complete")
    require_status(
        EntityType.HR_TICKET, ticket, [HrTicketStatus.PENDING, HrTicketStatus.IN_PROGRESS], "complete ticket",
    )
    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.HR_TICKET,
            ticket.id,
            {"status": HrTicketStatus.COMPLETED, "completed_at": now or utcnow()},
            expected=guard(ticket, expected_version=expected_version),
        )],
        summary=f"HR ticket {ticket.id} completed",
    )


def decide_cancel_ticket(
    ticket,
    permissions: Permissions,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_HR_TICKETS, "cancel an HR ticket")
    _require_general(ticket, "cancel")
    require_status(
        EntityType.HR_TICKET, ticket, [HrTicketStatus.PENDING, HrTicketStatus.IN_PROGRESS], "cancel ticket",
    )
    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.HR_TICKET,
            ticket.id,
            {"status": HrTicketStatus.CANCELLED},
            expected=guard(ticket, expected_version=expected_version),
        )],
        summary=f"HR ticket {ticket.id} cancelled",
    )
