"""
Requirement database model.

A customer staffing need. Time-and-materials requirements start `active`;
fixed-price requirements without a project start as a bid (`opportunity`,
bid_status `qualifying`) and carry the MEDDPICC qualification scores.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Text, Float, Boolean, Date, DateTime, JSON
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin, SoftDeleteMixin


class RequirementStatus(str, enum.Enum):
    ACTIVE = "active"
    OPPORTUNITY = "opportunity"
    ON_HOLD = "on_hold"
    WON = "won"
    LOST = "lost"
    CANCELLED = "cancelled"


class BidStatus(str, enum.Enum):
    """
    Bid sub-workflow, strictly forward:

    QUALIFYING -> PROPOSAL -> SUBMITTED -> WON | LOST
    """
    QUALIFYING = "qualifying"
    PROPOSAL = "proposal"
    SUBMITTED = "submitted"
    WON = "won"
    LOST = "lost"


class ProjectType(str, enum.Enum):
    TIME_AND_MATERIALS = "T&M"
    FIXED_PRICE = "Fixed_Price"


class GoNoGoDecision(str, enum.Enum):
    GO = "go"
    NOGO = "nogo"


class Requirement(AuditMixin, SoftDeleteMixin, Base):
    __tablename__ = "requirements"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    skills_required = Column(JSON, nullable=False, default=list)

    # Customer: either linked directly or resolved from the free-text name
    customer_name = Column(String, nullable=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)

    project_type = Column(Enum(ProjectType), default=ProjectType.TIME_AND_MATERIALS, nullable=False)
    status = Column(Enum(RequirementStatus), default=RequirementStatus.ACTIVE, nullable=False, index=True)
    owner_id = Column(String, nullable=True)

    # Budget
    day_rate_min = Column(Float, nullable=True)
    day_rate_max = Column(Float, nullable=True)

    # Bid sub-workflow
    is_bid = Column(Boolean, default=False, nullable=False)
    bid_status = Column(Enum(BidStatus), nullable=True)
    go_nogo_decision = Column(Enum(GoNoGoDecision), nullable=True)
    go_nogo_date = Column(DateTime(timezone=True), nullable=True)
    go_nogo_decided_by = Column(String, nullable=True)

    # MEDDPICC qualification scores (1-5, null when not assessed)
    meddpicc_metrics = Column(Integer, nullable=True)
    meddpicc_economic_buyer = Column(Integer, nullable=True)
    meddpicc_decision_criteria = Column(Integer, nullable=True)
    meddpicc_decision_process = Column(Integer, nullable=True)
    meddpicc_identify_pain = Column(Integer, nullable=True)
    meddpicc_paper_process = Column(Integer, nullable=True)
    meddpicc_champion = Column(Integer, nullable=True)
    meddpicc_competition = Column(Integer, nullable=True)
    meddpicc_notes = Column(JSON, nullable=True)

    # Proposal
    proposal_value = Column(Float, nullable=True)
    proposal_cost = Column(Float, nullable=True)
    proposal_margin_percent = Column(Float, nullable=True)
    proposal_submitted_date = Column(Date, nullable=True)
    proposal_notes = Column(Text, nullable=True)

    # Bid outcome
    bid_outcome = Column(String, nullable=True)
    bid_outcome_date = Column(Date, nullable=True)
    bid_outcome_reason = Column(Text, nullable=True)
    bid_lessons_learned = Column(Text, nullable=True)

    # Downstream links
    winning_candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    company = relationship("Company")

    def __repr__(self):
        return f"<Requirement(id={self.id}, title='{self.title}', status={self.status})>"
