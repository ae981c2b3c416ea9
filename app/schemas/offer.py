"""
Pydantic schemas for Offer, Consultant and HR ticket API requests/responses.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field
from app.models.consultant import ConsultantStatus
from app.models.hr_ticket import HrTicketPriority, HrTicketStatus, HrTicketType
from app.models.offer import OfferStatus


class OfferCreate(BaseModel):
    """Schema for proposing compensation to a candidate"""
    candidate_id: int
    requirement_id: Optional[int] = None
    approver_id: str = Field(..., min_length=1, description="User who must approve the offer")
    job_title: str = Field(..., min_length=1, max_length=200)
    salary: Optional[float] = Field(None, gt=0)
    day_rate: Optional[float] = Field(None, gt=0)
    salary_currency: str = "GBP"
    start_date: Optional[date] = None
    notes: Optional[str] = None


class OfferResponse(BaseModel):
    id: int
    candidate_id: int
    requirement_id: Optional[int] = None
    status: OfferStatus
    requested_by: str
    approver_id: str
    job_title: str
    salary: Optional[float] = None
    day_rate: Optional[float] = None
    salary_currency: str
    start_date: Optional[date] = None
    notes: Optional[str] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    withdrawn_at: Optional[datetime] = None
    contract_sent_at: Optional[datetime] = None
    contract_signed_at: Optional[datetime] = None
    version: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConsultantResponse(BaseModel):
    id: int
    candidate_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    job_title: Optional[str] = None
    status: ConsultantStatus
    salary: Optional[float] = None
    day_rate: Optional[float] = None
    total_bonus_paid: float
    start_date: Optional[date] = None
    exit_date: Optional[date] = None
    exit_reason: Optional[str] = None
    version: int

    class Config:
        from_attributes = True


class HrTicketCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = None
    priority: HrTicketPriority = HrTicketPriority.NORMAL
    assigned_to: Optional[str] = None
    candidate_id: Optional[int] = None
    consultant_id: Optional[int] = None


class HrTicketAssign(BaseModel):
    assignee_id: str = Field(..., min_length=1)
    expected_version: Optional[int] = None


class HrTicketResponse(BaseModel):
    id: int
    ticket_type: HrTicketType
    status: HrTicketStatus
    priority: HrTicketPriority
    title: str
    notes: Optional[str] = None
    assigned_to: Optional[str] = None
    candidate_id: Optional[int] = None
    consultant_id: Optional[int] = None
    offer_id: Optional[int] = None
    completed_at: Optional[datetime] = None
    version: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
