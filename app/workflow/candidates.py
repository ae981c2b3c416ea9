"""
Candidate and interview decisions.

Interview stages are never written to the candidate row; only the
explicit overrides below (rejected / withdrawn) and the offer workflow
touch Candidate.status.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from app.core.exceptions import ConflictError, ValidationError
from app.models.candidate import CandidateStatus
from app.models.interview import InterviewOutcome, InterviewStage
from app.workflow.effects import CreateEffect, EntityType, TransitionResult, UpdateEffect, guard
from app.workflow.guards import require_capability, utcnow
from app.workflow.permissions import Capability, Permissions

# Overrides after which the candidate leaves the recruitment pipeline
CLOSED_STATUSES = frozenset({
    CandidateStatus.CONVERTED_TO_CONSULTANT,
    CandidateStatus.REJECTED,
    CandidateStatus.WITHDRAWN,
})
SCORE_FIELDS = (
    "communication_score",
    "professionalism_score",
    "enthusiasm_score",
    "cultural_fit_score",
    "technical_depth_score",
    "problem_solving_score",
)


def _require_open(candidate, action: str) -> None:
    if candidate.status in CLOSED_STATUSES:
        raise ConflictError(
            f"Cannot {action}: candidate {candidate.id} is '{candidate.status.value}'",
            entity=EntityType.CANDIDATE.value,
            entity_id=candidate.id,
            expected=[s for s in CandidateStatus if s not in CLOSED_STATUSES],
            actual=candidate.status,
        )


def decide_create_candidate(fields: Dict[str, Any], actor_id: str, permissions: Permissions) -> TransitionResult:
    """Manual entry and CV-prefilled input share this path."""
    require_capability(permissions, Capability.ADD_CANDIDATES, "add a candidate")
    for name in ("first_name", "last_name"):
        if not (fields.get(name) or "").strip():
            raise ValidationError(f"'{name}' is required", entity=EntityType.CANDIDATE.value, field=name)

    data = dict(fields)
    data.pop("status", None)
    data.update({
        "first_name": data["first_name"].strip(),
        "last_name": data["last_name"].strip(),
        "skills": sorted({s.strip() for s in data.get("skills") or [] if s and s.strip()}),
        "previous_companies": list(data.get("previous_companies") or []),
        "status": CandidateStatus.SOURCED,
        "created_by": actor_id,
    })
    return TransitionResult(
        effects=[CreateEffect(EntityType.CANDIDATE, data, ref="candidate")],
        summary=f"Candidate {data['first_name']} {data['last_name']} added",
    )


def decide_update_candidate(
    candidate,
    changes: Dict[str, Any],
    permissions: Permissions,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.EDIT_CANDIDATES, "edit a candidate")
    if "status" in changes:
        raise ValidationError(
            "Candidate status is derived from interviews and offers and cannot be edited directly",
            entity=EntityType.CANDIDATE.value,
            entity_id=candidate.id,
            field="status",
        )
    data = dict(changes)
    if "skills" in data:
        data["skills"] = sorted({s.strip() for s in data["skills"] or [] if s and s.strip()})
    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.CANDIDATE, candidate.id, data, expected=guard(candidate, expected_version=expected_version),
        )],
        summary=f"Candidate {candidate.id} updated",
    )


def decide_close_candidate(
    candidate,
    status: CandidateStatus,
    permissions: Permissions,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    """Reject or withdraw a candidate explicitly."""
    if status not in (CandidateStatus.REJECTED, CandidateStatus.WITHDRAWN):
        raise ValidationError(
            f"'{status.value}' is not a closing status",
            entity=EntityType.CANDIDATE.value,
            entity_id=candidate.id,
            field="status",
        )
    require_capability(permissions, Capability.EDIT_CANDIDATES, f"mark a candidate {status.value}")
    _require_open(candidate, f"mark candidate {status.value}")

    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.CANDIDATE,
            candidate.id,
            {"status": status},
            expected=guard(candidate, expected_version=expected_version),
        )],
        summary=f"Candidate {candidate.id} marked {status.value}",
    )


def decide_schedule_interview(
    candidate,
    stage: InterviewStage,
    scheduled_at: Optional[datetime],
    interviewer_id: Optional[str],
    actor_id: str,
    permissions: Permissions,
) -> TransitionResult:
    require_capability(permissions, Capability.SCHEDULE_INTERVIEWS, "schedule an interview")
    _require_open(candidate, "schedule an interview")

    return TransitionResult(
        effects=[CreateEffect(
            EntityType.INTERVIEW,
            {
                "candidate_id": candidate.id,
                "stage": stage,
                "outcome": InterviewOutcome.PENDING,
                "scheduled_at": scheduled_at,
                "interviewer_id": interviewer_id or actor_id,
                "created_by": actor_id,
            },
            ref="interview",
        )],
        summary=f"{stage.value} scheduled for candidate {candidate.id}",
    )


def decide_record_outcome(
    interview,
    candidate,
    outcome: InterviewOutcome,
    feedback: Dict[str, Any],
    permissions: Permissions,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Record an interview's outcome and feedback scores.

    `reschedule` keeps the interview open; a new `scheduled_at` may be
    given in the feedback.
    """
    require_capability(permissions, Capability.CONDUCT_INTERVIEWS, "record an interview outcome")
    _require_open(candidate, "record an interview outcome")

    changes: Dict[str, Any] = {"outcome": outcome}
    for name in SCORE_FIELDS:
        if name not in feedback:
            continue
        score = feedback[name]
        if score is not None and not 1 <= score <= 5:
            raise ValidationError(
                f"'{name}' must be between 1 and 5",
                entity=EntityType.INTERVIEW.value,
                entity_id=interview.id,
                field=name,
            )
        changes[name] = score
    for name in ("general_comments", "recommendation"):
        if name in feedback:
            changes[name] = feedback[name]

    if outcome in (InterviewOutcome.PASS, InterviewOutcome.FAIL):
        changes["completed_at"] = now or utcnow()
    else:
        changes["completed_at"] = None
        if feedback.get("scheduled_at") is not None:
            changes["scheduled_at"] = feedback["scheduled_at"]

    return TransitionResult(
        effects=[UpdateEffect(EntityType.INTERVIEW, interview.id, changes)],
        summary=f"Interview {interview.id} ({interview.stage.value}) recorded as {outcome.value}",
    )
