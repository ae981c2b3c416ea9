"""
API endpoints for the customer (company) registry.
"""

import logging
from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import Actor, get_current_actor
from app.schemas.requirement import CompanyCreate, CompanyResponse, CompanyUpdate, FinancialScoringResponse
from app.services import requirement_service

router = APIRouter(prefix="/companies", tags=["Companies"])
logger = logging.getLogger(__name__)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=CompanyResponse)
def create_company(
    request: CompanyCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Add a customer. Subsidiaries (with a parent) never hold a financial scoring."""
    return requirement_service.create_company(db, actor, request.model_dump())


@router.get("/", response_model=List[CompanyResponse])
def list_companies(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return requirement_service.list_companies(db, actor, skip=skip, limit=limit)


@router.get("/{company_id}", response_model=CompanyResponse)
def get_company(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return requirement_service.get_company(db, actor, company_id)


@router.patch("/{company_id}", response_model=CompanyResponse)
def update_company(
    company_id: int,
    request: CompanyUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return requirement_service.update_company(db, actor, company_id, request.model_dump(exclude_unset=True))


@router.get("/{company_id}/financial-scoring", response_model=FinancialScoringResponse)
def get_financial_scoring(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """
    Report which company must hold the financial scoring for projects of
    this company, and whether it is present, absent or unknown.
    """
    assessment = requirement_service.financial_scoring(db, actor, company_id)
    return FinancialScoringResponse(
        company_id=company_id,
        state=assessment.state.value,
        responsible_company_id=assessment.responsible_company_id,
        responsible_company_name=assessment.responsible_company_name,
        is_subsidiary=assessment.is_subsidiary,
    )
