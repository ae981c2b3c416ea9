"""
Pydantic schemas for Requirement/bid, Company and Project API requests/responses.
"""

from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from app.models.company import CompanyStatus
from app.models.project import ProjectStatus
from app.models.requirement import BidStatus, GoNoGoDecision, ProjectType, RequirementStatus
from app.workflow.requirements import BidOutcome


class RequirementCreate(BaseModel):
    """Schema for creating a requirement (fixed-price without a project becomes a bid)"""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    skills_required: List[str] = Field(default_factory=list)
    customer_name: Optional[str] = None
    company_id: Optional[int] = None
    project_id: Optional[int] = None
    project_type: ProjectType = ProjectType.TIME_AND_MATERIALS
    status: Optional[RequirementStatus] = None
    owner_id: Optional[str] = None
    day_rate_min: Optional[float] = Field(None, gt=0)
    day_rate_max: Optional[float] = Field(None, gt=0)


class RequirementResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    skills_required: List[str] = Field(default_factory=list)
    customer_name: Optional[str] = None
    company_id: Optional[int] = None
    project_type: ProjectType
    status: RequirementStatus
    owner_id: Optional[str] = None
    day_rate_min: Optional[float] = None
    day_rate_max: Optional[float] = None

    is_bid: bool
    bid_status: Optional[BidStatus] = None
    go_nogo_decision: Optional[GoNoGoDecision] = None
    go_nogo_date: Optional[datetime] = None
    meddpicc_metrics: Optional[int] = None
    meddpicc_economic_buyer: Optional[int] = None
    meddpicc_decision_criteria: Optional[int] = None
    meddpicc_decision_process: Optional[int] = None
    meddpicc_identify_pain: Optional[int] = None
    meddpicc_paper_process: Optional[int] = None
    meddpicc_champion: Optional[int] = None
    meddpicc_competition: Optional[int] = None
    meddpicc_notes: Optional[Dict[str, str]] = None
    meddpicc_score: Optional[float] = Field(None, description="Mean of scored criteria, None when nothing is scored")
    meddpicc_insufficient_data: bool = True

    proposal_value: Optional[float] = None
    proposal_cost: Optional[float] = None
    proposal_margin_percent: Optional[float] = None
    proposal_submitted_date: Optional[date] = None
    proposal_notes: Optional[str] = None
    bid_outcome: Optional[str] = None
    bid_outcome_date: Optional[date] = None
    bid_outcome_reason: Optional[str] = None
    bid_lessons_learned: Optional[str] = None

    winning_candidate_id: Optional[int] = None
    project_id: Optional[int] = None
    version: int
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RequirementStatusChange(BaseModel):
    status: RequirementStatus
    expected_version: Optional[int] = None


class WinningCandidateRequest(BaseModel):
    candidate_id: int
    expected_version: Optional[int] = None


class MeddpiccUpdate(BaseModel):
    """Partial MEDDPICC assessment; omitted criteria are left unchanged"""
    metrics: Optional[int] = Field(None, ge=1, le=5)
    economic_buyer: Optional[int] = Field(None, ge=1, le=5)
    decision_criteria: Optional[int] = Field(None, ge=1, le=5)
    decision_process: Optional[int] = Field(None, ge=1, le=5)
    identify_pain: Optional[int] = Field(None, ge=1, le=5)
    paper_process: Optional[int] = Field(None, ge=1, le=5)
    champion: Optional[int] = Field(None, ge=1, le=5)
    competition: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[Dict[str, str]] = None
    expected_version: Optional[int] = None


class GoNoGoRequest(BaseModel):
    decision: GoNoGoDecision
    expected_version: Optional[int] = None


class ProposalRequest(BaseModel):
    proposal_value: float
    proposal_cost: Optional[float] = None
    proposal_margin_percent: Optional[float] = None
    proposal_notes: Optional[str] = None
    expected_version: Optional[int] = None


class BidOutcomeRequest(BaseModel):
    outcome: BidOutcome
    reason: Optional[str] = None
    lessons_learned: Optional[str] = None
    expected_version: Optional[int] = None


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    status: CompanyStatus = CompanyStatus.PROSPECT
    city: Optional[str] = None
    parent_company_id: Optional[int] = None
    financial_scoring: Optional[str] = None


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    status: Optional[CompanyStatus] = None
    city: Optional[str] = None
    parent_company_id: Optional[int] = None
    financial_scoring: Optional[str] = None


class CompanyResponse(BaseModel):
    id: int
    name: str
    status: CompanyStatus
    city: Optional[str] = None
    parent_company_id: Optional[int] = None
    financial_scoring: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FinancialScoringResponse(BaseModel):
    """Which company must hold the financial scoring and whether it does"""
    company_id: int
    state: str
    responsible_company_id: Optional[int] = None
    responsible_company_name: Optional[str] = None
    is_subsidiary: bool


class ProjectCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    account_manager_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None


class ProjectResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    company_id: int
    requirement_id: Optional[int] = None
    project_type: ProjectType
    status: ProjectStatus
    account_manager_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True
