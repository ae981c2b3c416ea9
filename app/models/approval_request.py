"""
ApprovalRequest database model.

A sensitive HR/financial change against a consultant, routed through a
director then HR. The payload is only applied to the consultant when HR
approves.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Text, DateTime, JSON
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin


class ApprovalRequestType(str, enum.Enum):
    SALARY_INCREASE = "salary_increase"
    BONUS_PAYMENT = "bonus_payment"
    EMPLOYEE_EXIT = "employee_exit"


class ApprovalStatus(str, enum.Enum):
    """
    PENDING_DIRECTOR -> PENDING_HR -> APPROVED
            |               |
            +---------------+-> REJECTED
    """
    PENDING_DIRECTOR = "pending_director"
    PENDING_HR = "pending_hr"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalStage(str, enum.Enum):
    DIRECTOR = "director"
    HR = "hr"


class ApprovalRequest(AuditMixin, Base):
    __tablename__ = "approval_requests"

    id = Column(Integer, primary_key=True, index=True)
    consultant_id = Column(Integer, ForeignKey("consultants.id"), nullable=False, index=True)

    request_type = Column(Enum(ApprovalRequestType), nullable=False)
    status = Column(Enum(ApprovalStatus), default=ApprovalStatus.PENDING_DIRECTOR, nullable=False, index=True)
    request_data = Column(JSON, nullable=False, default=dict)
    requested_by = Column(String, nullable=False)

    director_approved_by = Column(String, nullable=True)
    director_approved_at = Column(DateTime(timezone=True), nullable=True)
    hr_approved_by = Column(String, nullable=True)
    hr_approved_at = Column(DateTime(timezone=True), nullable=True)

    rejected_stage = Column(Enum(ApprovalStage), nullable=True)
    rejected_by = Column(String, nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    consultant = relationship("Consultant")

    def __repr__(self):
        return f"<ApprovalRequest(id={self.id}, type={self.request_type}, status={self.status})>"
