"""
Candidate database model.

A person under recruitment. The stored `status` is only ever `sourced` or
one of the override values written by the offer/contract workflow; the
interview stages shown to users are derived from Interview records by
app.workflow.pipeline_status and never persisted.
"""

from sqlalchemy import Column, Integer, String, Enum, Text, Float, JSON
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin, SoftDeleteMixin


class CandidateStatus(str, enum.Enum):
    """
    Candidate pipeline lifecycle:

    SOURCED -> PHONE_* -> TECHNICAL_* -> DIRECTOR_*      (derived from interviews)
            -> OFFER_PENDING -> OFFER_APPROVED -> CONTRACT_SENT
            -> CONTRACT_SIGNED -> CONVERTED_TO_CONSULTANT (stored overrides)

    REJECTED / WITHDRAWN / OFFER_REJECTED are terminal overrides.
    """
    SOURCED = "sourced"
    PHONE_PLANNED = "phone_planned"
    PHONE_DONE = "phone_done"
    TECHNICAL_PLANNED = "technical_planned"
    TECHNICAL_DONE = "technical_done"
    DIRECTOR_PLANNED = "director_planned"
    DIRECTOR_DONE = "director_done"
    OFFER_PENDING = "offer_pending"
    OFFER_APPROVED = "offer_approved"
    OFFER_REJECTED = "offer_rejected"
    CONTRACT_SENT = "contract_sent"
    CONTRACT_SIGNED = "contract_signed"
    CONVERTED_TO_CONSULTANT = "converted_to_consultant"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class Candidate(AuditMixin, SoftDeleteMixin, Base):
    """
    A candidate in the recruitment pipeline.

    Created manually or from CV-parsed input (same payload either way).
    """
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)

    # Personal information
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=True, index=True)
    phone = Column(String, nullable=True)
    location = Column(String, nullable=True)
    linkedin_url = Column(String, nullable=True)

    # Professional information
    current_role = Column(String, nullable=True)
    current_company = Column(String, nullable=True)
    years_experience = Column(Integer, nullable=True)
    degree = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    previous_companies = Column(JSON, nullable=False, default=list)

    # Admin information
    right_to_work = Column(String, nullable=True)
    security_vetting = Column(String, nullable=True)
    salary_expectation_min = Column(Float, nullable=True)
    salary_expectation_max = Column(Float, nullable=True)
    source = Column(String, nullable=True)

    # Explicit terminal/override status (see module docstring)
    status = Column(
        Enum(CandidateStatus),
        default=CandidateStatus.SOURCED,
        nullable=False,
        index=True
    )

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    interviews = relationship("Interview", back_populates="candidate", cascade="all, delete-orphan")
    offers = relationship("Offer", back_populates="candidate", cascade="all, delete-orphan")
    consultant = relationship("Consultant", back_populates="candidate", uselist=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Candidate(id={self.id}, name='{self.full_name}', status={self.status})>"
