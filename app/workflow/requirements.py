"""
Requirement / bid state machine and the project and mission gates.

Requirement status:
    active <-> on_hold
    active | on_hold | opportunity -> cancelled
    active | on_hold -> lost
    active | on_hold -> won            (together with a winning candidate)
    opportunity -> won | lost          (driven by the bid outcome)

Bid sub-workflow (fixed-price requirements without a project):
    qualifying -> proposal -> submitted -> won | lost

Downstream, a won requirement gets a Project (gated on the financial
scoring of the owning company, or its parent for a subsidiary) and then
Missions for its winning candidate once converted to a consultant.
"""

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.candidate import CandidateStatus
from app.models.company import CompanyStatus
from app.models.consultant import ConsultantStatus
from app.models.mission import MissionStatus
from app.models.project import ProjectStatus
from app.models.requirement import BidStatus, GoNoGoDecision, ProjectType, RequirementStatus
from app.workflow.effects import CreateEffect, EntityType, Ref, TransitionResult, UpdateEffect, guard
from app.workflow.guards import (
    require_capability,
    require_date_order,
    require_positive,
    require_status,
    utcnow,
)
from app.workflow.permissions import Capability, Permissions

MEDDPICC_CRITERIA = (
    "metrics",
    "economic_buyer",
    "decision_criteria",
    "decision_process",
    "identify_pain",
    "paper_process",
    "champion",
    "competition",
)

# Manual status changes; won and bid-driven transitions have dedicated operations
STATUS_TRANSITIONS = {
    RequirementStatus.ACTIVE: {RequirementStatus.ON_HOLD, RequirementStatus.CANCELLED, RequirementStatus.LOST},
    RequirementStatus.ON_HOLD: {RequirementStatus.ACTIVE, RequirementStatus.CANCELLED, RequirementStatus.LOST},
    RequirementStatus.OPPORTUNITY: {RequirementStatus.CANCELLED},
    RequirementStatus.WON: set(),
    RequirementStatus.LOST: set(),
    RequirementStatus.CANCELLED: set(),
}


class BidOutcome(str, enum.Enum):
    WON = "won"
    LOST = "lost"
    WITHDRAWN = "withdrawn"


# ---------------------------------------------------------------------------
# MEDDPICC scoring
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MeddpiccScore:
    """
    Average of the assessed MEDDPICC criteria.

    `insufficient_data` is True when no criterion has been scored; `value`
    is then None rather than a guessed default.
    """
    value: Optional[float]
    scored_criteria: int
    total_criteria: int

    @property
    def insufficient_data(self) -> bool:
        return self.value is None

    @property
    def is_complete(self) -> bool:
        return self.scored_criteria == self.total_criteria


def meddpicc_scores(requirement) -> Dict[str, Optional[int]]:
    return {name: getattr(requirement, f"meddpicc_{name}") for name in MEDDPICC_CRITERIA}


def compute_meddpicc_score(scores: Mapping[str, Optional[int]]) -> MeddpiccScore:
    present = [scores.get(name) for name in MEDDPICC_CRITERIA if scores.get(name) is not None]
    if not present:
        return MeddpiccScore(value=None, scored_criteria=0, total_criteria=len(MEDDPICC_CRITERIA))
    value = round(sum(present) / len(present), 1)
    return MeddpiccScore(value=value, scored_criteria=len(present), total_criteria=len(MEDDPICC_CRITERIA))


# ---------------------------------------------------------------------------
# Creation and manual status changes
# ---------------------------------------------------------------------------

def decide_create_requirement(fields: Dict[str, Any], actor_id: str, permissions: Permissions) -> TransitionResult:
    require_capability(permissions, Capability.CREATE_REQUIREMENTS, "create a requirement")

    data = dict(fields)
    project_type = data.get("project_type") or ProjectType.TIME_AND_MATERIALS
    has_project = data.get("project_id") is not None

    if not data.get("company_id") and not (data.get("customer_name") or "").strip():
        raise ValidationError(
            "A requirement needs a company or a customer name",
            entity=EntityType.REQUIREMENT.value,
            field="customer_name",
        )

    if project_type == ProjectType.FIXED_PRICE and not has_project:
        data.update({
            "status": RequirementStatus.OPPORTUNITY,
            "is_bid": True,
            "bid_status": BidStatus.QUALIFYING,
        })
    else:
        requested = data.get("status") or RequirementStatus.ACTIVE
        if requested not in (RequirementStatus.ACTIVE, RequirementStatus.ON_HOLD):
            raise ValidationError(
                f"A new requirement cannot start in status '{requested.value}'",
                entity=EntityType.REQUIREMENT.value,
                field="status",
            )
        data.update({"status": requested, "is_bid": False, "bid_status": None})

    data.update({"project_type": project_type, "created_by": actor_id})
    data.setdefault("owner_id", actor_id)

    kind = "bid" if data["is_bid"] else "requirement"
    return TransitionResult(
        effects=[CreateEffect(EntityType.REQUIREMENT, data, ref="requirement")],
        summary=f"Created {kind} '{data.get('title')}' ({data['status'].value})",
    )


def decide_change_requirement_status(
    requirement,
    new_status: RequirementStatus,
    permissions: Permissions,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.EDIT_REQUIREMENTS, "change a requirement's status")

    allowed = STATUS_TRANSITIONS.get(requirement.status, set())
    if new_status not in allowed:
        raise ConflictError(
            f"Requirement {requirement.id} cannot move from '{requirement.status.value}' to '{new_status.value}'",
            entity=EntityType.REQUIREMENT.value,
            entity_id=requirement.id,
            expected=sorted(allowed, key=lambda s: s.value),
            actual=requirement.status,
        )

    changes: Dict[str, Any] = {"status": new_status}
    if requirement.is_bid and new_status == RequirementStatus.CANCELLED:
        changes["bid_outcome"] = "cancelled"
    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.REQUIREMENT,
            requirement.id,
            changes,
            expected=guard(requirement, expected_version=expected_version),
        )],
        summary=f"Requirement {requirement.id} moved to {new_status.value}",
    )


def decide_set_winning_candidate(
    requirement,
    candidate,
    actor_id: str,
    permissions: Permissions,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    """
    Record the winning candidate.

    A time-and-materials requirement becomes `won` in the same write; a bid
    must already have been won through its outcome.
    """
    require_capability(permissions, Capability.EDIT_REQUIREMENTS, "set a winning candidate")

    if requirement.is_bid:
        require_status(EntityType.REQUIREMENT, requirement, [RequirementStatus.WON], "set winning candidate")
    else:
        require_status(
            EntityType.REQUIREMENT,
            requirement,
            [RequirementStatus.ACTIVE, RequirementStatus.ON_HOLD, RequirementStatus.WON],
            "set winning candidate",
        )

    if candidate.status in (CandidateStatus.REJECTED, CandidateStatus.WITHDRAWN, CandidateStatus.OFFER_REJECTED):
        raise ConflictError(
            f"Candidate {candidate.id} is '{candidate.status.value}' and cannot win requirement {requirement.id}",
            entity=EntityType.CANDIDATE.value,
            entity_id=candidate.id,
            actual=candidate.status,
        )

    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.REQUIREMENT,
            requirement.id,
            {"winning_candidate_id": candidate.id, "status": RequirementStatus.WON},
            expected=guard(requirement, expected_version=expected_version),
        )],
        summary=f"Requirement {requirement.id} won with candidate {candidate.id} (set by {actor_id})",
    )


# ---------------------------------------------------------------------------
# Bid sub-workflow
# ---------------------------------------------------------------------------

def _require_bid(requirement) -> None:
    if not requirement.is_bid:
        raise ConflictError(
            f"Requirement {requirement.id} is not a bid",
            entity=EntityType.REQUIREMENT.value,
            entity_id=requirement.id,
            field="is_bid",
            expected=True,
            actual=False,
        )


def _require_bid_status(requirement, allowed, action: str) -> None:
    _require_bid(requirement)
    allowed = tuple(allowed)
    if requirement.bid_status not in allowed:
        expected = " or ".join(f"'{s.value}'" for s in allowed)
        actual = requirement.bid_status.value if requirement.bid_status else None
        raise ConflictError(
            f"Cannot {action}: bid {requirement.id} must be {expected} but is '{actual}'",
            entity=EntityType.REQUIREMENT.value,
            entity_id=requirement.id,
            field="bid_status",
            expected=list(allowed) if len(allowed) > 1 else allowed[0],
            actual=requirement.bid_status,
        )


def _bid_guard(requirement, expected_version: Optional[int]) -> Dict[str, Any]:
    expected = guard(requirement, expected_version=expected_version)
    expected["bid_status"] = requirement.bid_status
    return expected


def decide_update_meddpicc(
    requirement,
    scores: Mapping[str, Optional[int]],
    notes: Optional[Dict[str, str]],
    permissions: Permissions,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_BIDS, "assess a bid")
    _require_bid_status(requirement, [BidStatus.QUALIFYING], "update MEDDPICC scores")
    if requirement.go_nogo_decision is not None:
        raise ConflictError(
            f"MEDDPICC scores of bid {requirement.id} are locked after the go/no-go decision",
            entity=EntityType.REQUIREMENT.value,
            entity_id=requirement.id,
            field="go_nogo_decision",
            expected=None,
            actual=requirement.go_nogo_decision,
        )

    changes: Dict[str, Any] = {}
    for name, value in scores.items():
        if name not in MEDDPICC_CRITERIA:
            raise ValidationError(
                f"Unknown MEDDPICC criterion '{name}'",
                entity=EntityType.REQUIREMENT.value,
                entity_id=requirement.id,
                field=name,
            )
        if value is not None and not 1 <= value <= 5:
            raise ValidationError(
                f"MEDDPICC score for '{name}' must be between 1 and 5",
                entity=EntityType.REQUIREMENT.value,
                entity_id=requirement.id,
                field=f"meddpicc_{name}",
            )
        changes[f"meddpicc_{name}"] = value
    if notes is not None:
        changes["meddpicc_notes"] = notes

    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.REQUIREMENT, requirement.id, changes, expected=_bid_guard(requirement, expected_version),
        )],
        summary=f"MEDDPICC assessment saved for bid {requirement.id}",
    )


def decide_go_nogo(
    requirement,
    decision: GoNoGoDecision,
    actor_id: str,
    permissions: Permissions,
    go_threshold: float,
    now: Optional[datetime] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_BIDS, "record a go/no-go decision")
    _require_bid_status(requirement, [BidStatus.QUALIFYING], "record go/no-go")
    if requirement.go_nogo_decision is not None:
        raise ConflictError(
            f"Bid {requirement.id} already has a '{requirement.go_nogo_decision.value}' decision",
            entity=EntityType.REQUIREMENT.value,
            entity_id=requirement.id,
            field="go_nogo_decision",
            expected=None,
            actual=requirement.go_nogo_decision,
        )
    now = now or utcnow()
    changes: Dict[str, Any] = {
        "go_nogo_decision": decision,
        "go_nogo_date": now,
        "go_nogo_decided_by": actor_id,
    }

    if decision == GoNoGoDecision.GO:
        score = compute_meddpicc_score(meddpicc_scores(requirement))
        if score.insufficient_data:
            raise ValidationError(
                f"Bid {requirement.id} has insufficient MEDDPICC data for a go decision: no criterion scored",
                entity=EntityType.REQUIREMENT.value,
                entity_id=requirement.id,
                field="meddpicc",
            )
        if score.value < go_threshold:
            raise ValidationError(
                f"Bid {requirement.id} MEDDPICC score {score.value} is below the go threshold {go_threshold}",
                entity=EntityType.REQUIREMENT.value,
                entity_id=requirement.id,
                field="meddpicc",
            )
        changes["bid_status"] = BidStatus.PROPOSAL
        summary = f"Bid {requirement.id}: GO (MEDDPICC {score.value}), moving to proposal"
    else:
        changes.update({
            "bid_status": BidStatus.LOST,
            "status": RequirementStatus.LOST,
            "bid_outcome": "no_go",
            "bid_outcome_date": now.date(),
        })
        summary = f"Bid {requirement.id}: NO-GO, closed as lost"

    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.REQUIREMENT, requirement.id, changes, expected=_bid_guard(requirement, expected_version),
        )],
        summary=summary,
    )


def decide_submit_proposal(
    requirement,
    proposal: Dict[str, Any],
    permissions: Permissions,
    today: Optional[date] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_BIDS, "submit a proposal")
    _require_bid_status(requirement, [BidStatus.PROPOSAL], "submit proposal")
    value = require_positive(proposal.get("proposal_value"), EntityType.REQUIREMENT, requirement.id, "proposal_value")

    changes = {
        "bid_status": BidStatus.SUBMITTED,
        "proposal_value": value,
        "proposal_cost": proposal.get("proposal_cost"),
        "proposal_margin_percent": proposal.get("proposal_margin_percent"),
        "proposal_notes": proposal.get("proposal_notes"),
        "proposal_submitted_date": today or utcnow().date(),
    }
    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.REQUIREMENT, requirement.id, changes, expected=_bid_guard(requirement, expected_version),
        )],
        summary=f"Proposal for bid {requirement.id} submitted ({value})",
    )


def decide_record_bid_outcome(
    requirement,
    outcome: BidOutcome,
    reason: Optional[str],
    lessons_learned: Optional[str],
    permissions: Permissions,
    today: Optional[date] = None,
    expected_version: Optional[int] = None,
) -> TransitionResult:
    require_capability(permissions, Capability.MANAGE_BIDS, "record a bid outcome")

    if outcome == BidOutcome.WON:
        _require_bid_status(requirement, [BidStatus.SUBMITTED], "record a won outcome")
    else:
        _require_bid_status(
            requirement,
            [BidStatus.QUALIFYING, BidStatus.PROPOSAL, BidStatus.SUBMITTED],
            f"record a {outcome.value} outcome",
        )
    if outcome == BidOutcome.LOST and not (reason or "").strip():
        raise ValidationError(
            f"A reason is required to record bid {requirement.id} as lost",
            entity=EntityType.REQUIREMENT.value,
            entity_id=requirement.id,
            field="reason",
        )

    won = outcome == BidOutcome.WON
    changes = {
        "bid_status": BidStatus.WON if won else BidStatus.LOST,
        "status": RequirementStatus.WON if won else RequirementStatus.LOST,
        "bid_outcome": outcome.value,
        "bid_outcome_date": today or utcnow().date(),
        "bid_outcome_reason": (reason or "").strip() or None,
        "bid_lessons_learned": lessons_learned,
    }
    return TransitionResult(
        effects=[UpdateEffect(
            EntityType.REQUIREMENT, requirement.id, changes, expected=_bid_guard(requirement, expected_version),
        )],
        summary=f"Bid {requirement.id} outcome recorded: {outcome.value}",
    )


# ---------------------------------------------------------------------------
# Customer resolution and the financial scoring gate
# ---------------------------------------------------------------------------

def normalise_company_name(name: Optional[str]) -> str:
    return " ".join((name or "").split()).casefold()


def match_customer(customer_name: Optional[str], companies: Iterable):
    """Find the company whose name matches the requirement's free-text customer."""
    wanted = normalise_company_name(customer_name)
    if not wanted:
        return None
    for company in companies:
        if getattr(company, "deleted_at", None) is None and normalise_company_name(company.name) == wanted:
            return company
    return None


class FinancialScoringState(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    # Parent not available in the snapshot: never treated as absent
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FinancialScoringAssessment:
    state: FinancialScoringState
    responsible_company_id: Optional[int]
    responsible_company_name: Optional[str]
    is_subsidiary: bool


def assess_financial_scoring(company, parent_company=None) -> FinancialScoringAssessment:
    """
    Decide which company must carry the financial scoring and whether it does.

    Subsidiaries never carry their own scoring: the parent's value is the
    only one that counts, whatever the subsidiary row holds.
    """
    if company.parent_company_id is not None:
        if parent_company is None or parent_company.id != company.parent_company_id:
            return FinancialScoringAssessment(
                state=FinancialScoringState.UNKNOWN,
                responsible_company_id=company.parent_company_id,
                responsible_company_name=None,
                is_subsidiary=True,
            )
        responsible, is_subsidiary = parent_company, True
    else:
        responsible, is_subsidiary = company, False

    scoring = (getattr(responsible, "financial_scoring", None) or "").strip()
    return FinancialScoringAssessment(
        state=FinancialScoringState.PRESENT if scoring else FinancialScoringState.ABSENT,
        responsible_company_id=responsible.id,
        responsible_company_name=responsible.name,
        is_subsidiary=is_subsidiary,
    )


def require_financial_scoring(company, parent_company=None) -> FinancialScoringAssessment:
    assessment = assess_financial_scoring(company, parent_company)

    if assessment.state == FinancialScoringState.UNKNOWN:
        raise NotFoundError(
            f"Parent company {assessment.responsible_company_id} of '{company.name}' could not be resolved; "
            f"its financial scoring is unknown",
            entity=EntityType.COMPANY.value,
            entity_id=assessment.responsible_company_id,
            field="parent_company_id",
        )
    if assessment.state == FinancialScoringState.ABSENT:
        if assessment.is_subsidiary:
            message = (
                f"Add a financial scoring to the parent company '{assessment.responsible_company_name}' "
                f"({assessment.responsible_company_id}) before creating a project for its subsidiary "
                f"'{company.name}' ({company.id})"
            )
        else:
            message = (
                f"Add a financial scoring to company '{company.name}' ({company.id}) "
                f"before creating a project"
            )
        raise ValidationError(
            message,
            entity=EntityType.COMPANY.value,
            entity_id=assessment.responsible_company_id,
            field="financial_scoring",
        )
    return assessment


def _project_effects(
    requirement,
    company,
    parent_company,
    fields: Dict[str, Any],
    actor_id: str,
) -> list:
    require_financial_scoring(company, parent_company)
    require_date_order(fields.get("start_date"), fields.get("end_date"), EntityType.PROJECT)

    project_fields = {
        "name": fields.get("name") or f"{company.name} - {requirement.title}",
        "description": fields.get("description", requirement.description),
        "company_id": company.id,
        "requirement_id": requirement.id,
        "project_type": requirement.project_type,
        "status": ProjectStatus.ACTIVE,
        "account_manager_id": fields.get("account_manager_id") or actor_id,
        "start_date": fields.get("start_date"),
        "end_date": fields.get("end_date"),
        "notes": fields.get("notes"),
        "created_by": actor_id,
    }
    effects = [
        CreateEffect(EntityType.PROJECT, project_fields, ref="project"),
        UpdateEffect(
            EntityType.REQUIREMENT,
            requirement.id,
            {"project_id": Ref("project"), "company_id": company.id},
            expected={"status": requirement.status, "project_id": None},
        ),
    ]
    if company.status == CompanyStatus.PROSPECT:
        effects.append(UpdateEffect(EntityType.COMPANY, company.id, {"status": CompanyStatus.ACTIVE}))
    return effects


def decide_create_project(
    requirement,
    company,
    parent_company,
    fields: Dict[str, Any],
    actor_id: str,
    permissions: Permissions,
) -> TransitionResult:
    require_capability(permissions, Capability.CREATE_PROJECTS, "create a project")
    require_status(EntityType.REQUIREMENT, requirement, [RequirementStatus.WON], "create project")
    if requirement.project_id is not None:
        raise ConflictError(
            f"Requirement {requirement.id} already has project {requirement.project_id}",
            entity=EntityType.REQUIREMENT.value,
            entity_id=requirement.id,
            field="project_id",
            expected=None,
            actual=requirement.project_id,
        )
    if company is None:
        raise NotFoundError(
            f"No customer found for requirement {requirement.id} ('{requirement.customer_name}')",
            entity=EntityType.COMPANY.value,
            field="customer_name",
        )

    return TransitionResult(
        effects=_project_effects(requirement, company, parent_company, fields, actor_id),
        summary=f"Project created for requirement {requirement.id} ({company.name})",
    )


# ---------------------------------------------------------------------------
# Mission creation gate
# ---------------------------------------------------------------------------

def decide_create_mission(
    requirement,
    consultant,
    company,
    parent_company,
    project,
    fields: Dict[str, Any],
    actor_id: str,
    permissions: Permissions,
) -> TransitionResult:
    """
    Create a mission for the requirement's winning candidate.

    Prerequisites are checked in order: a converted consultant, a resolved
    customer, then a project (created here, through the financial scoring
    gate, when the requirement has none yet).
    """
    require_capability(permissions, Capability.CREATE_MISSIONS, "create a mission")
    require_status(EntityType.REQUIREMENT, requirement, [RequirementStatus.WON], "create mission")

    # (a) a converted consultant
    if requirement.winning_candidate_id is None:
        raise ValidationError(
            f"No candidate or consultant is associated with requirement {requirement.id}",
            entity=EntityType.REQUIREMENT.value,
            entity_id=requirement.id,
            field="winning_candidate_id",
        )
    if consultant is None:
        raise ValidationError(
            f"Candidate {requirement.winning_candidate_id} has not been converted to a consultant; "
            f"a mission cannot be created for a candidate",
            entity=EntityType.CANDIDATE.value,
            entity_id=requirement.winning_candidate_id,
            field="winning_candidate_id",
        )
    if consultant.status == ConsultantStatus.TERMINATED:
        raise ConflictError(
            f"Consultant {consultant.id} is terminated",
            entity=EntityType.CONSULTANT.value,
            entity_id=consultant.id,
            actual=consultant.status,
        )

    # (b) a resolved customer
    if company is None:
        raise NotFoundError(
            f"No customer found for requirement {requirement.id}: no company matches "
            f"'{requirement.customer_name}'",
            entity=EntityType.COMPANY.value,
            field="customer_name",
        )

    start_date = fields.get("start_date")
    end_date = fields.get("end_date")
    if start_date is None or end_date is None:
        raise ValidationError(
            "Mission start and end dates are required",
            entity=EntityType.MISSION.value,
            field="start_date" if start_date is None else "end_date",
        )
    require_date_order(start_date, end_date, EntityType.MISSION)
    rate = require_positive(fields.get("sold_daily_rate"), EntityType.MISSION, None, "sold_daily_rate")

    effects = []
    # (c) a project, created transparently when missing
    if project is None:
        if requirement.project_id is not None:
            raise NotFoundError(
                f"Project {requirement.project_id} of requirement {requirement.id} not found",
                entity=EntityType.PROJECT.value,
                entity_id=requirement.project_id,
            )
        effects.extend(_project_effects(
            requirement,
            company,
            parent_company,
            {"start_date": start_date, "end_date": end_date},
            actor_id,
        ))
        project_id = Ref("project")
        project_name = f"{company.name} - {requirement.title}"
    else:
        _require_within_project(project, start_date, end_date)
        project_id = project.id
        project_name = project.name

    effects.append(CreateEffect(
        EntityType.MISSION,
        {
            "name": fields.get("name") or f"{company.name} - {project_name} - {consultant.first_name} {consultant.last_name}",
            "consultant_id": consultant.id,
            "company_id": company.id,
            "project_id": project_id,
            "requirement_id": requirement.id,
            "status": MissionStatus.ACTIVE,
            "start_date": start_date,
            "end_date": end_date,
            "sold_daily_rate": rate,
            "location": fields.get("location") or company.city,
            "work_mode": fields.get("work_mode"),
            "notes": fields.get("notes"),
            "created_by": actor_id,
        },
        ref="mission",
    ))
    if consultant.status == ConsultantStatus.BENCH:
        effects.append(UpdateEffect(
            EntityType.CONSULTANT,
            consultant.id,
            {"status": ConsultantStatus.IN_MISSION},
            expected=guard(consultant, with_version=False),
        ))

    return TransitionResult(
        effects=effects,
        summary=f"Mission created for consultant {consultant.id} on requirement {requirement.id}",
    )


def _require_within_project(project, start_date: date, end_date: date) -> None:
    if project.start_date and start_date < project.start_date:
        raise ValidationError(
            f"Mission start date cannot be before project start date ({project.start_date})",
            entity=EntityType.MISSION.value,
            field="start_date",
        )
    if project.end_date and end_date > project.end_date:
        raise ValidationError(
            f"Mission end date cannot be after project end date ({project.end_date})",
            entity=EntityType.MISSION.value,
            field="end_date",
        )
