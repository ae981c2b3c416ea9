"""
Project database model.

A customer engagement container. Created for a won requirement once the
owning company (or its parent) has a financial scoring on file.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Text, Date
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin
from app.models.requirement import ProjectType


class ProjectStatus(str, enum.Enum):
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Project(AuditMixin, Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    # Plain id (no FK): requirements already point at projects
    requirement_id = Column(Integer, nullable=True, index=True)

    project_type = Column(Enum(ProjectType), default=ProjectType.TIME_AND_MATERIALS, nullable=False)
    status = Column(Enum(ProjectStatus), default=ProjectStatus.ACTIVE, nullable=False)
    account_manager_id = Column(String, nullable=True)

    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    company = relationship("Company")

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}')>"
