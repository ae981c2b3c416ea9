"""
Offer database model.

A compensation proposal for one candidate. Offers are never overwritten:
rejection and withdrawal are explicit terminal states, and a new hiring
attempt gets a new Offer row.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Text, Float, Date, DateTime
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin


class OfferStatus(str, enum.Enum):
    """
    Offer lifecycle:

    PENDING_APPROVAL -> APPROVED -> CONTRACT_SENT -> CONTRACT_SIGNED -> (conversion)
           |
           +-> REJECTED

    PENDING_APPROVAL, APPROVED and CONTRACT_SENT may also move to WITHDRAWN.
    """
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONTRACT_SENT = "contract_sent"
    CONTRACT_SIGNED = "contract_signed"
    WITHDRAWN = "withdrawn"


class Offer(AuditMixin, Base):
    __tablename__ = "offers"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False, index=True)
    requirement_id = Column(Integer, ForeignKey("requirements.id"), nullable=True, index=True)

    status = Column(Enum(OfferStatus), default=OfferStatus.PENDING_APPROVAL, nullable=False, index=True)

    # Routing
    requested_by = Column(String, nullable=False)
    approver_id = Column(String, nullable=False, index=True)

    # Terms
    job_title = Column(String, nullable=False)
    salary = Column(Float, nullable=True)
    day_rate = Column(Float, nullable=True)
    salary_currency = Column(String, nullable=False, default="GBP")
    start_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    # Decision trail
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String, nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(String, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    withdrawn_at = Column(DateTime(timezone=True), nullable=True)
    withdrawn_by = Column(String, nullable=True)
    contract_sent_at = Column(DateTime(timezone=True), nullable=True)
    contract_signed_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    candidate = relationship("Candidate", back_populates="offers")

    def __repr__(self):
        return f"<Offer(id={self.id}, candidate_id={self.candidate_id}, status={self.status})>"
