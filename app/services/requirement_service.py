"""
Requirement, bid, customer registry, project and mission-creation operations.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import Actor
from app.core.exceptions import ValidationError
from app.crud import records
from app.models.candidate import Candidate
from app.models.company import Company
from app.models.consultant import Consultant
from app.models.mission import Mission
from app.models.project import Project
from app.models.requirement import GoNoGoDecision, Requirement, RequirementStatus
from app.services.committer import atomic, commit, decide
from app.workflow import requirements as workflow
from app.workflow.effects import EntityType
from app.workflow.guards import require_capability
from app.workflow.permissions import Capability

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Customer registry
# ---------------------------------------------------------------------------

def get_company(db: Session, actor: Actor, company_id: int) -> Company:
    require_capability(actor.permissions, Capability.VIEW_REQUIREMENTS, "view companies")
    return records.get_or_raise(db, Company, company_id)


def list_companies(db: Session, actor: Actor, skip: int = 0, limit: int = 100) -> List[Company]:
    require_capability(actor.permissions, Capability.VIEW_REQUIREMENTS, "view companies")
    return records.get_multi(db, Company, skip=skip, limit=limit)


def _check_company_fields(db: Session, fields: Dict[str, Any], company_id: Optional[int] = None) -> None:
    parent_id = fields.get("parent_company_id")
    if parent_id is None:
        return
    if parent_id == company_id:
        raise ValidationError(
            "A company cannot be its own parent",
            entity=EntityType.COMPANY.value,
            entity_id=company_id,
            field="parent_company_id",
        )
    records.get_or_raise(db, Company, parent_id)
    if (fields.get("financial_scoring") or "").strip():
        raise ValidationError(
            "Subsidiaries do not carry a financial scoring; set it on the parent company",
            entity=EntityType.COMPANY.value,
            entity_id=company_id,
            field="financial_scoring",
        )


def create_company(db: Session, actor: Actor, fields: Dict[str, Any]) -> Company:
    require_capability(actor.permissions, Capability.CREATE_REQUIREMENTS, "add a company")
    _check_company_fields(db, fields)
    with atomic(db, "create company"):
        company = records.create(db, Company, {**fields, "created_by": actor.id})
    logger.info(f"Company {company.id} '{company.name}' created", extra={"actor_id": actor.id})
    return company


def update_company(db: Session, actor: Actor, company_id: int, changes: Dict[str, Any]) -> Company:
    require_capability(actor.permissions, Capability.EDIT_REQUIREMENTS, "edit a company")
    company = records.get_or_raise(db, Company, company_id)
    merged = {
        "parent_company_id": changes.get("parent_company_id", company.parent_company_id),
        "financial_scoring": changes.get("financial_scoring", company.financial_scoring),
    }
    _check_company_fields(db, merged, company_id)
    with atomic(db, f"update company {company_id}"):
        records.update(db, company, {**changes, "updated_by": actor.id})
    logger.info(f"Company {company_id} updated", extra={"actor_id": actor.id})
    return company


def _parent_of(db: Session, company: Optional[Company]) -> Optional[Company]:
    if company is None or company.parent_company_id is None:
        return None
    return records.get(db, Company, company.parent_company_id)


def financial_scoring(db: Session, actor: Actor, company_id: int) -> workflow.FinancialScoringAssessment:
    company = get_company(db, actor, company_id)
    return workflow.assess_financial_scoring(company, _parent_of(db, company))


def resolve_customer(db: Session, requirement: Requirement) -> Optional[Company]:
    """Linked company first, then the free-text customer name against the registry."""
    if requirement.company_id is not None:
        company = records.get(db, Company, requirement.company_id)
        if company is not None:
            return company
    return workflow.match_customer(requirement.customer_name, records.get_multi(db, Company, limit=None))


# ---------------------------------------------------------------------------
# Requirements and bids
# ---------------------------------------------------------------------------

def get_requirement(db: Session, actor: Actor, requirement_id: int) -> Requirement:
    require_capability(actor.permissions, Capability.VIEW_REQUIREMENTS, "view requirements")
    return records.get_or_raise(db, Requirement, requirement_id)


def list_requirements(
    db: Session,
    actor: Actor,
    skip: int = 0,
    limit: int = 100,
    status: Optional[RequirementStatus] = None,
    is_bid: Optional[bool] = None,
) -> List[Requirement]:
    require_capability(actor.permissions, Capability.VIEW_REQUIREMENTS, "view requirements")
    return records.get_multi(db, Requirement, skip=skip, limit=limit, status=status, is_bid=is_bid)


def create_requirement(db: Session, actor: Actor, fields: Dict[str, Any]) -> Requirement:
    if fields.get("company_id") is not None:
        records.get_or_raise(db, Company, fields["company_id"])
    if fields.get("project_id") is not None:
        records.get_or_raise(db, Project, fields["project_id"])
    result = decide(workflow.decide_create_requirement, fields, actor.id, actor.permissions)
    return commit(db, result, actor.id)["requirement"]


def delete_requirement(db: Session, actor: Actor, requirement_id: int) -> Requirement:
    require_capability(actor.permissions, Capability.DELETE_REQUIREMENTS, "delete a requirement")
    requirement = records.get_or_raise(db, Requirement, requirement_id)
    with atomic(db, f"soft delete requirement {requirement_id}"):
        records.soft_delete(db, requirement, actor.id)
    logger.info(f"Requirement {requirement_id} soft-deleted", extra={"actor_id": actor.id})
    return requirement


def change_status(
    db: Session,
    actor: Actor,
    requirement_id: int,
    status: RequirementStatus,
    expected_version: Optional[int] = None,
) -> Requirement:
    requirement = records.get_or_raise(db, Requirement, requirement_id)
    result = decide(
        workflow.decide_change_requirement_status,
        requirement, status, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return requirement


def set_winning_candidate(
    db: Session,
    actor: Actor,
    requirement_id: int,
    candidate_id: int,
    expected_version: Optional[int] = None,
) -> Requirement:
    requirement = records.get_or_raise(db, Requirement, requirement_id)
    candidate = records.get_or_raise(db, Candidate, candidate_id)
    result = decide(
        workflow.decide_set_winning_candidate,
        requirement, candidate, actor.id, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return requirement


def update_meddpicc(
    db: Session,
    actor: Actor,
    requirement_id: int,
    scores: Dict[str, Optional[int]],
    notes: Optional[Dict[str, str]] = None,
    expected_version: Optional[int] = None,
) -> Requirement:
    requirement = records.get_or_raise(db, Requirement, requirement_id)
    result = decide(
        workflow.decide_update_meddpicc,
        requirement, scores, notes, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return requirement


def go_nogo(
    db: Session,
    actor: Actor,
    requirement_id: int,
    decision: GoNoGoDecision,
    expected_version: Optional[int] = None,
) -> Requirement:
    requirement = records.get_or_raise(db, Requirement, requirement_id)
    result = decide(
        workflow.decide_go_nogo,
        requirement, decision, actor.id, actor.permissions, settings.MEDDPICC_GO_THRESHOLD,
        expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return requirement


def submit_proposal(
    db: Session,
    actor: Actor,
    requirement_id: int,
    proposal: Dict[str, Any],
    expected_version: Optional[int] = None,
) -> Requirement:
    requirement = records.get_or_raise(db, Requirement, requirement_id)
    result = decide(
        workflow.decide_submit_proposal,
        requirement, proposal, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return requirement


def record_bid_outcome(
    db: Session,
    actor: Actor,
    requirement_id: int,
    outcome: workflow.BidOutcome,
    reason: Optional[str] = None,
    lessons_learned: Optional[str] = None,
    expected_version: Optional[int] = None,
) -> Requirement:
    requirement = records.get_or_raise(db, Requirement, requirement_id)
    result = decide(
        workflow.decide_record_bid_outcome,
        requirement, outcome, reason, lessons_learned, actor.permissions, expected_version=expected_version,
    )
    commit(db, result, actor.id)
    return requirement


# ---------------------------------------------------------------------------
# Projects and missions
# ---------------------------------------------------------------------------

def create_project(db: Session, actor: Actor, requirement_id: int, fields: Dict[str, Any]) -> Project:
    requirement = records.get_or_raise(db, Requirement, requirement_id)
    company = resolve_customer(db, requirement)
    result = decide(
        workflow.decide_create_project,
        requirement, company, _parent_of(db, company), fields, actor.id, actor.permissions,
    )
    return commit(db, result, actor.id)["project"]


def get_project(db: Session, actor: Actor, project_id: int) -> Project:
    require_capability(actor.permissions, Capability.VIEW_REQUIREMENTS, "view projects")
    return records.get_or_raise(db, Project, project_id)


def create_mission(db: Session, actor: Actor, requirement_id: int, fields: Dict[str, Any]) -> Mission:
    """
    Create a mission for the requirement's winning candidate.

    Creates and links the project on the way when the requirement has none.
    """
    requirement = records.get_or_raise(db, Requirement, requirement_id)

    consultant = None
    if requirement.winning_candidate_id is not None:
        consultant = (
            db.query(Consultant)
            .filter(Consultant.candidate_id == requirement.winning_candidate_id)
            .first()
        )
    company = resolve_customer(db, requirement)
    project = records.get(db, Project, requirement.project_id) if requirement.project_id else None

    result = decide(
        workflow.decide_create_mission,
        requirement, consultant, company, _parent_of(db, company), project, fields, actor.id, actor.permissions,
    )
    return commit(db, result, actor.id)["mission"]
