"""
Pydantic schemas for Mission and ApprovalRequest API requests/responses.
"""

from datetime import date, datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from app.models.approval_request import ApprovalRequestType, ApprovalStage, ApprovalStatus
from app.models.mission import MissionStatus, WorkMode


class MissionCreate(BaseModel):
    """Mission for the winning candidate (as consultant) of a won requirement"""
    start_date: date
    end_date: date
    sold_daily_rate: float = Field(..., gt=0)
    name: Optional[str] = None
    location: Optional[str] = None
    work_mode: WorkMode = WorkMode.HYBRID
    notes: Optional[str] = None


class MissionUpdate(BaseModel):
    """Partial update; without manage_missions only end_date, notes and completion are allowed"""
    name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sold_daily_rate: Optional[float] = None
    location: Optional[str] = None
    work_mode: Optional[WorkMode] = None
    notes: Optional[str] = None
    status: Optional[MissionStatus] = None
    expected_version: Optional[int] = None


class MissionComplete(BaseModel):
    end_date: date
    expected_version: Optional[int] = None


class MissionResponse(BaseModel):
    id: int
    name: str
    consultant_id: int
    company_id: int
    project_id: int
    requirement_id: Optional[int] = None
    status: MissionStatus
    start_date: date
    end_date: date
    sold_daily_rate: float
    location: Optional[str] = None
    work_mode: WorkMode
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    version: int

    class Config:
        from_attributes = True


class ApprovalRequestCreate(BaseModel):
    """
    request_data by type:
    - salary_increase: {"new_salary": float > 0}
    - bonus_payment: {"amount": float > 0}
    - employee_exit: {"exit_reason": str, "exit_date": "YYYY-MM-DD"}
    """
    consultant_id: int
    request_type: ApprovalRequestType
    request_data: Dict[str, Any] = Field(default_factory=dict)


class ApprovalRejectRequest(BaseModel):
    stage: ApprovalStage
    reason: str
    expected_version: Optional[int] = None


class ApprovalRequestResponse(BaseModel):
    id: int
    consultant_id: int
    request_type: ApprovalRequestType
    status: ApprovalStatus
    request_data: Dict[str, Any]
    requested_by: str
    director_approved_by: Optional[str] = None
    director_approved_at: Optional[datetime] = None
    hr_approved_by: Optional[str] = None
    hr_approved_at: Optional[datetime] = None
    rejected_stage: Optional[ApprovalStage] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    version: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
