"""
Consultant database model.

An employed person, created exactly once per converted candidate. The
unique constraint on candidate_id backs the one-to-one origin link at the
storage level.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Text, Float, Date
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin


class ConsultantStatus(str, enum.Enum):
    BENCH = "bench"
    IN_MISSION = "in_mission"
    ON_LEAVE = "on_leave"
    TERMINATED = "terminated"


class Consultant(AuditMixin, Base):
    __tablename__ = "consultants"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False, unique=True, index=True)

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    job_title = Column(String, nullable=True)

    status = Column(Enum(ConsultantStatus), default=ConsultantStatus.BENCH, nullable=False, index=True)

    # Compensation (changed only through approved HR requests)
    salary = Column(Float, nullable=True)
    day_rate = Column(Float, nullable=True)
    total_bonus_paid = Column(Float, nullable=False, default=0.0)

    start_date = Column(Date, nullable=True)
    exit_date = Column(Date, nullable=True)
    exit_reason = Column(Text, nullable=True)

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    candidate = relationship("Candidate", back_populates="consultant")
    missions = relationship("Mission", back_populates="consultant")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Consultant(id={self.id}, candidate_id={self.candidate_id}, status={self.status})>"
