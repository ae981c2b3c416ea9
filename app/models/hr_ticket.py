"""
HrTicket database model.

Operational HR task queue item. Contract tickets are opened when an offer
is approved and follow the offer through contract sent/signed; general
tickets are worked manually.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Text, DateTime
import enum
from app.core.database import Base
from app.models.mixins import AuditMixin


class HrTicketType(str, enum.Enum):
    CONTRACT_SEND = "contract_send"
    GENERAL = "general"


class HrTicketStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    CONTRACT_SENT = "contract_sent"
    CONTRACT_SIGNED = "contract_signed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class HrTicketPriority(str, enum.Enum):
    NORMAL = "normal"
    HIGH = "high"


class HrTicket(AuditMixin, Base):
    __tablename__ = "hr_tickets"

    id = Column(Integer, primary_key=True, index=True)
    ticket_type = Column(Enum(HrTicketType), default=HrTicketType.GENERAL, nullable=False)
    status = Column(Enum(HrTicketStatus), default=HrTicketStatus.PENDING, nullable=False, index=True)
    priority = Column(Enum(HrTicketPriority), default=HrTicketPriority.NORMAL, nullable=False)

    title = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    assigned_to = Column(String, nullable=True)

    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=True, index=True)
    consultant_id = Column(Integer, ForeignKey("consultants.id"), nullable=True, index=True)
    offer_id = Column(Integer, ForeignKey("offers.id"), nullable=True, index=True)

    completed_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<HrTicket(id={self.id}, type={self.ticket_type}, status={self.status})>"
