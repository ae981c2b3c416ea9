"""
Mission database model.

A billable assignment of one consultant to one customer project for a date
range at a sold daily rate.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Text, Float, Date, DateTime
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin


class MissionStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"


class WorkMode(str, enum.Enum):
    FULL_ONSITE = "full_onsite"
    HYBRID = "hybrid"
    REMOTE = "remote"


class Mission(AuditMixin, Base):
    __tablename__ = "missions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)

    consultant_id = Column(Integer, ForeignKey("consultants.id"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    requirement_id = Column(Integer, ForeignKey("requirements.id"), nullable=True, index=True)

    status = Column(Enum(MissionStatus), default=MissionStatus.ACTIVE, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    sold_daily_rate = Column(Float, nullable=False)

    location = Column(String, nullable=True)
    work_mode = Column(Enum(WorkMode), default=WorkMode.HYBRID, nullable=False)
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    consultant = relationship("Consultant", back_populates="missions")

    def __repr__(self):
        return f"<Mission(id={self.id}, consultant_id={self.consultant_id}, status={self.status})>"
