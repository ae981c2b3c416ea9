"""
Interview database model.

One scheduled or completed assessment of a candidate. Several interviews
may exist for the same stage (reschedules, repeats); the pipeline status
derivation picks the most decisive one.
"""

from typing import Optional
from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Text, DateTime
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin


class InterviewStage(str, enum.Enum):
    PHONE_QUALIFICATION = "phone_qualification"
    TECHNICAL_INTERVIEW = "technical_interview"
    DIRECTOR_INTERVIEW = "director_interview"


class InterviewOutcome(str, enum.Enum):
    PENDING = "pending"
    PASS = "pass"
    FAIL = "fail"
    RESCHEDULE = "reschedule"  # Treated as pending for status derivation


class Interview(AuditMixin, Base):
    __tablename__ = "interviews"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False, index=True)

    stage = Column(Enum(InterviewStage), nullable=False, index=True)
    outcome = Column(Enum(InterviewOutcome), default=InterviewOutcome.PENDING, nullable=False)

    # Scheduling
    interviewer_id = Column(String, nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Feedback scores (1-5)
    communication_score = Column(Integer, nullable=True)
    professionalism_score = Column(Integer, nullable=True)
    enthusiasm_score = Column(Integer, nullable=True)
    cultural_fit_score = Column(Integer, nullable=True)
    technical_depth_score = Column(Integer, nullable=True)
    problem_solving_score = Column(Integer, nullable=True)

    general_comments = Column(Text, nullable=True)
    recommendation = Column(Text, nullable=True)

    candidate = relationship("Candidate", back_populates="interviews")

    @property
    def soft_skills_average(self) -> Optional[float]:
        return _average([
            self.communication_score,
            self.professionalism_score,
            self.enthusiasm_score,
            self.cultural_fit_score,
        ])

    @property
    def technical_average(self) -> Optional[float]:
        return _average([self.technical_depth_score, self.problem_solving_score])

    def __repr__(self):
        return f"<Interview(id={self.id}, candidate_id={self.candidate_id}, stage={self.stage}, outcome={self.outcome})>"


def _average(scores) -> Optional[float]:
    present = [s for s in scores if s is not None]
    if not present:
        return None
    return round(sum(present) / len(present), 1)
