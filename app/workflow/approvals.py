"""
Two-stage approval chain for HR-sensitive consultant changes.

    pending_director --director_approve--> pending_hr --hr_approve--> approved
           |                                   |
           +--reject (director)                +--reject (hr)  --> rejected

The request's payload is applied to the consultant only at HR approval,
in the same commit as the status change.
"""

from datetime import date, datetime
from typing import Any, Dict, Optional

from app.core.exceptions import ConflictError, ValidationError
from app.models.approval_request import ApprovalRequestType, ApprovalStage, ApprovalStatus
from app.models.consultant import ConsultantStatus
from app.workflow.effects import CreateEffect, EntityType, TransitionResult, UpdateEffect, guard
from app.workflow.guards import require_capability, require_positive, require_reason, require_status, utcnow
from app.workflow.permissions import Capability, Permissions

_STAGE_STATUS = {
    ApprovalStage.DIRECTOR: ApprovalStatus.PENDING_DIRECTOR,
    ApprovalStage.HR: ApprovalStatus.PENDING_HR,
}
_STAGE_CAPABILITY = {
    ApprovalStage.DIRECTOR: Capability.DIRECTOR_APPROVE,
    ApprovalStage.HR: Capability.HR_APPROVE,
}


def _require_active_consultant(consultant) -> None:
    if consultant.status == ConsultantStatus.TERMINATED:
        raise ConflictError(
            f"Consultant {consultant.id} is terminated",
            entity=EntityType.CONSULTANT.value,
            entity_id=consultant.id,
            actual=consultant.status,
        )


def _parse_date(value: Any, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (TypeError, ValueError):
        raise ValidationError(
            f"'{field}' must be an ISO date",
            entity=EntityType.APPROVAL_REQUEST.value,
            field=field,
        )


def validate_request_data(request_type: ApprovalRequestType, data: Dict[str, Any]) -> Dict[str, Any]:
    """Check the type-specific payload and return its normalised form."""
    data = dict(data or {})

    if request_type == ApprovalRequestType.SALARY_INCREASE:
        data["new_salary"] = require_positive(
            data.get("new_salary"), EntityType.APPROVAL_REQUEST, None, "new_salary",
        )
    elif request_type == ApprovalRequestType.BONUS_PAYMENT:
        data["amount"] = require_positive(data.get("amount"), EntityType.APPROVAL_REQUEST, None, "amount")
    elif request_type == ApprovalRequestType.EMPLOYEE_EXIT:
        if not (data.get("exit_reason") or "").strip():
            raise ValidationError(
                "An exit reason is required",
                entity=EntityType.APPROVAL_REQUEST.value,
                field="exit_reason",
            )
        if not data.get("exit_date"):
            raise ValidationError(
                "An exit date is required",
                entity=EntityType.APPROVAL_REQUEST.value,
                field="exit_date",
            )
        data["exit_reason"] = data["exit_reason"].strip()
        data["exit_date"] = _parse_date(data["exit_date"], "exit_date").isoformat()
    return data


def payload_changes(request_type: ApprovalRequestType, data: Dict[str, Any], consultant) -> Dict[str, Any]:
    """Consultant field changes that carry out an approved request."""
    if request_type == ApprovalRequestType.SALARY_INCREASE:
        return {"salary": data["new_salary"]}
    if request_type == ApprovalRequestType.BONUS_PAYMENT:
        return {"total_bonus_paid": (consultant.total_bonus_paid or 0.0) + data["amount"]}
    return {
        "status": ConsultantStatus.TERMINATED,
        "exit_date": _parse_date(data["exit_date"], "exit_date"),
        "exit_reason": data["exit_reason"],
    }


def decide_submit_request(
    consultant,
    request_type: ApprovalRequestType,
    request_data: Dict[str, Any],
    actor_id: str,
    permissions: Permissions,
) -> TransitionResult:
    require_capability(permissions, Capability.REQUEST_HR_CHANGES, "request an HR change")
    _require_active_consultant(consultant)
    data = validate_request_data(request_type, request_data)

    return TransitionResult(
        effects=[CreateEffect(
            EntityType.APPROVAL_REQUEST,
            {
                "consultant_id": consultant.id,
                "request_type": request_type,
                "status": ApprovalStatus.PENDING_DIRECTOR,
                "request_data": data,
                "requested_by": actor_id,
                "created_by": actor_id,
            },
            ref="approval_request",
        )],
        summary=f"{request_type.value} requested for consultant {consultant.id}",
    )


def decide_director_approve(
    request,
    actor_id: str,
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.DIRECTOR_APPROVE, "give director approval")
    require_status(EntityType.APPROVAL_REQUEST, request, [ApprovalStatus.PENDING_DIRECTOR], "director approve")

    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.APPROVAL_REQUEST,
            request.id,
            {
                "status": ApprovalStatus.PENDING_HR,
                "director_approved_by": actor_id,
                "director_approved_at": now or utcnow(),
            },
            expected=guard(request, expected_version=expected_version),
        )],
        summary=f"Approval request {request.id} approved by director {actor_id}, awaiting HR",
    )


def decide_hr_approve(
    request,
    consultant,
    actor_id: str,
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.HR_APPROVE, "give HR approval")
    require_status(EntityType.APPROVAL_REQUEST, request, [ApprovalStatus.PENDING_HR], "HR approve")
    _require_active_consultant(consultant)
    data = validate_request_data(request.request_type, request.request_data)

    return TransitionResult(
        effects=[
            UpdateEffect(
                EntityType.APPROVAL_REQUEST,
                request.id,
                {
                    "status": ApprovalStatus.APPROVED,
                    "hr_approved_by": actor_id,
                    "hr_approved_at": now or utcnow(),
                },
                expected=guard(request, expected_version=expected_version),
            ),
            UpdateEffect(
                EntityType.CONSULTANT,
                consultant.id,
                payload_changes(request.request_type, data, consultant),
                expected=guard(consultant),
            ),
        ],
        summary=f"Approval request {request.id} approved by HR {actor_id} and applied to consultant {consultant.id}",
    )


def decide_reject_request(
    request,
    stage: ApprovalStage,
    reason: Optional[str],
    actor_id: str,
    permissions: Permissions,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    reason = require_reason(reason, EntityType.APPROVAL_REQUEST, request.id)
    require_capability(permissions, _STAGE_CAPABILITY[stage], f"reject at the {stage.value} stage")
    require_status(EntityType.APPROVAL_REQUEST, request, [_STAGE_STATUS[stage]], f"reject as {stage.value}")

    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.APPROVAL_REQUEST,
            request.id,
            {
                "status": ApprovalStatus.REJECTED,
                "rejected_stage": stage,
                "rejected_by": actor_id,
                "rejected_at": now or utcnow(),
                "rejection_reason": reason,
            },
            expected=guard(request, expected_version=expected_version),
        )],
        summary=f"Approval request {request.id} rejected at {stage.value} stage: {reason}",
    )
