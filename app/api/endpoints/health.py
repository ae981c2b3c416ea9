"""
Health check and monitoring endpoints.

Provides health status for the record store and a pipeline overview.
"""

import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy import func, text
from datetime import datetime, timezone

from app.core.database import get_db
from app.models import Candidate, Consultant, Mission, MissionStatus, Requirement, ApprovalRequest, ApprovalStatus

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check endpoint.

    Returns 200 OK if the service is running.
    Use this for simple uptime monitoring and load balancer health checks.
    """
    return {
        "status": "healthy",
        "timestamp": _timestamp()
    }


@router.get("/health/detailed", status_code=status.HTTP_200_OK)
def detailed_health_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Detailed health check with record store connectivity.
    """
    health_status = {
        "status": "healthy",
        "timestamp": _timestamp(),
        "checks": {}
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Database error: {str(e)}"
        }

    return health_status


@router.get("/metrics", status_code=status.HTTP_200_OK)
def get_metrics(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Pipeline metrics: candidates, open requirements, consultants, active
    missions and pending approvals.
    """
    try:
        return {
            "timestamp": _timestamp(),
            "metrics": {
                "candidates": db.query(func.count(Candidate.id)).filter(Candidate.deleted_at.is_(None)).scalar() or 0,
                "requirements": db.query(func.count(Requirement.id)).filter(Requirement.deleted_at.is_(None)).scalar() or 0,
                "consultants": db.query(func.count(Consultant.id)).scalar() or 0,
                "active_missions": db.query(func.count(Mission.id)).filter(
                    Mission.status == MissionStatus.ACTIVE
                ).scalar() or 0,
                "pending_approvals": db.query(func.count(ApprovalRequest.id)).filter(
                    ApprovalRequest.status.in_([ApprovalStatus.PENDING_DIRECTOR, ApprovalStatus.PENDING_HR])
                ).scalar() or 0,
            }
        }
    except Exception as e:
        logger.error(f"Failed to retrieve metrics: {e}")
        return {
            "error": "Failed to retrieve metrics",
            "message": str(e)
        }
