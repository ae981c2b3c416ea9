"""
Database models package.
"""

from app.models.candidate import Candidate, CandidateStatus
from app.models.interview import Interview, InterviewStage, InterviewOutcome
from app.models.offer import Offer, OfferStatus
from app.models.consultant import Consultant, ConsultantStatus
from app.models.company import Company, CompanyStatus
from app.models.requirement import Requirement, RequirementStatus, BidStatus, ProjectType, GoNoGoDecision
from app.models.project import Project, ProjectStatus
from app.models.mission import Mission, MissionStatus, WorkMode
from app.models.approval_request import ApprovalRequest, ApprovalRequestType, ApprovalStatus, ApprovalStage
from app.models.hr_ticket import HrTicket, HrTicketType, HrTicketStatus, HrTicketPriority

__all__ = [
    "Candidate", "CandidateStatus",
    "Interview", "InterviewStage", "InterviewOutcome",
    "Offer", "OfferStatus",
    "Consultant", "ConsultantStatus",
    "Company", "CompanyStatus",
    "Requirement", "RequirementStatus", "BidStatus", "ProjectType", "GoNoGoDecision",
    "Project", "ProjectStatus",
    "Mission", "MissionStatus", "WorkMode",
    "ApprovalRequest", "ApprovalRequestType", "ApprovalStatus", "ApprovalStage",
    "HrTicket", "HrTicketType", "HrTicketStatus", "HrTicketPriority",
]
