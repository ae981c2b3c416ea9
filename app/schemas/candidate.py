"""
Pydantic schemas for Candidate and Interview API requests/responses.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, EmailStr
from app.models.candidate import CandidateStatus
from app.models.interview import InterviewOutcome, InterviewStage


class VersionedRequest(BaseModel):
    """Body for transitions that only need an optimistic-concurrency guard."""
    expected_version: Optional[int] = Field(None, description="Version the client last saw; stale values yield 409")


class ReasonRequest(VersionedRequest):
    reason: str = Field(..., description="Mandatory reason, must not be blank")


class CandidateBase(BaseModel):
    """Base candidate schema; CV-prefilled input uses the same fields."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = None
    current_role: Optional[str] = None
    current_company: Optional[str] = None
    years_experience: Optional[int] = Field(None, ge=0)
    degree: Optional[str] = None
    summary: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    previous_companies: List[str] = Field(default_factory=list)
    right_to_work: Optional[str] = None
    security_vetting: Optional[str] = None
    salary_expectation_min: Optional[float] = None
    salary_expectation_max: Optional[float] = None
    source: Optional[str] = Field(None, description="Where the candidate came from (manual, cv_import, referral...)")


class CandidateCreate(CandidateBase):
    pass


class CandidateUpdate(BaseModel):
    """Partial update; status is not editable here."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = None
    current_role: Optional[str] = None
    current_company: Optional[str] = None
    years_experience: Optional[int] = Field(None, ge=0)
    degree: Optional[str] = None
    summary: Optional[str] = None
    skills: Optional[List[str]] = None
    previous_companies: Optional[List[str]] = None
    right_to_work: Optional[str] = None
    security_vetting: Optional[str] = None
    salary_expectation_min: Optional[float] = None
    salary_expectation_max: Optional[float] = None
    source: Optional[str] = None
    expected_version: Optional[int] = None


class CandidateResponse(CandidateBase):
    """Candidate with its derived pipeline status."""
    id: int
    email: Optional[str] = None
    status: CandidateStatus = Field(..., description="Stored override status")
    pipeline_status: CandidateStatus = Field(..., description="Status derived from interviews and overrides")
    pipeline_label: str
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InterviewCreate(BaseModel):
    stage: InterviewStage
    scheduled_at: Optional[datetime] = None
    interviewer_id: Optional[str] = None


class InterviewOutcomeRequest(BaseModel):
    """Outcome plus feedback scores (1-5)."""
    outcome: InterviewOutcome
    communication_score: Optional[int] = Field(None, ge=1, le=5)
    professionalism_score: Optional[int] = Field(None, ge=1, le=5)
    enthusiasm_score: Optional[int] = Field(None, ge=1, le=5)
    cultural_fit_score: Optional[int] = Field(None, ge=1, le=5)
    technical_depth_score: Optional[int] = Field(None, ge=1, le=5)
    problem_solving_score: Optional[int] = Field(None, ge=1, le=5)
    general_comments: Optional[str] = None
    recommendation: Optional[str] = None
    scheduled_at: Optional[datetime] = Field(None, description="New slot when rescheduling")


class InterviewResponse(BaseModel):
    id: int
    candidate_id: int
    stage: InterviewStage
    outcome: InterviewOutcome
    interviewer_id: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    communication_score: Optional[int] = None
    professionalism_score: Optional[int] = None
    enthusiasm_score: Optional[int] = None
    cultural_fit_score: Optional[int] = None
    technical_depth_score: Optional[int] = None
    problem_solving_score: Optional[int] = None
    soft_skills_average: Optional[float] = None
    technical_average: Optional[float] = None
    general_comments: Optional[str] = None
    recommendation: Optional[str] = None

    class Config:
        from_attributes = True
