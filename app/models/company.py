"""
Company database model (customer registry).

Companies form a one-level hierarchy: a subsidiary points at its parent
via parent_company_id. Financial scoring is only ever held by the parent.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Enum
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin, SoftDeleteMixin


class CompanyStatus(str, enum.Enum):
    PROSPECT = "prospect"
    ACTIVE = "active"


class Company(AuditMixin, SoftDeleteMixin, Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    status = Column(Enum(CompanyStatus), default=CompanyStatus.PROSPECT, nullable=False)
    city = Column(String, nullable=True)

    parent_company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    financial_scoring = Column(String, nullable=True)

    parent_company = relationship("Company", remote_side=[id])

    @property
    def is_subsidiary(self) -> bool:
        return self.parent_company_id is not None

    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}')>"
