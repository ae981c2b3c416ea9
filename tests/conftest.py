"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- JWT headers for any role set
- Persisted entity factories
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.models import (
    Candidate,
    CandidateStatus,
    Company,
    CompanyStatus,
    Consultant,
    ConsultantStatus,
    Mission,
    MissionStatus,
    Offer,
    OfferStatus,
    Project,
    ProjectStatus,
    ProjectType,
    Requirement,
    RequirementStatus,
)
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """
    Factory for Authorization headers carrying a user id and role tags.

    Usage: auth_headers(["hr"], "hr-1")
    """
    def _headers(roles, user_id="user-1"):
        token = create_access_token({"sub": user_id, "roles": list(roles)})
        return {"Authorization": f"Bearer {token}"}

    return _headers


def _persist(db_session, record):
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture
def make_candidate(db_session):
    def _make(**fields):
        data = {"first_name": "Ada", "last_name": "Lovelace", "status": CandidateStatus.SOURCED}
        data.update(fields)
        return _persist(db_session, Candidate(**data))

    return _make


@pytest.fixture
def make_offer(db_session, make_candidate):
    def _make(candidate=None, **fields):
        candidate = candidate or make_candidate(status=CandidateStatus.OFFER_PENDING)
        data = {
            "candidate_id": candidate.id,
            "status": OfferStatus.PENDING_APPROVAL,
            "requested_by": "manager-1",
            "approver_id": "director-1",
            "job_title": "Senior Engineer",
            "salary": 60000.0,
            "start_date": date(2026, 1, 5),
        }
        data.update(fields)
        return _persist(db_session, Offer(**data))

    return _make


@pytest.fixture
def make_consultant(db_session, make_candidate):
    def _make(candidate=None, **fields):
        candidate = candidate or make_candidate(status=CandidateStatus.CONVERTED_TO_CONSULTANT)
        data = {
            "candidate_id": candidate.id,
            "first_name": candidate.first_name,
            "last_name": candidate.last_name,
            "status": ConsultantStatus.BENCH,
            "salary": 50000.0,
            "total_bonus_paid": 0.0,
        }
        data.update(fields)
        return _persist(db_session, Consultant(**data))

    return _make


@pytest.fixture
def make_company(db_session):
    def _make(**fields):
        data = {"name": "Acme Corp", "status": CompanyStatus.ACTIVE, "city": "London"}
        data.update(fields)
        return _persist(db_session, Company(**data))

    return _make


@pytest.fixture
def make_requirement(db_session):
    def _make(**fields):
        data = {
            "title": "Python Developer",
            "customer_name": "Acme Corp",
            "project_type": ProjectType.TIME_AND_MATERIALS,
            "status": RequirementStatus.ACTIVE,
            "is_bid": False,
        }
        data.update(fields)
        return _persist(db_session, Requirement(**data))

    return _make


@pytest.fixture
def make_project(db_session):
    def _make(company, **fields):
        data = {
            "name": f"{company.name} - Platform",
            "company_id": company.id,
            "project_type": ProjectType.TIME_AND_MATERIALS,
            "status": ProjectStatus.ACTIVE,
        }
        data.update(fields)
        return _persist(db_session, Project(**data))

    return _make


@pytest.fixture
def make_mission(db_session):
    def _make(consultant, company, project, **fields):
        data = {
            "name": "Mission",
            "consultant_id": consultant.id,
            "company_id": company.id,
            "project_id": project.id,
            "status": MissionStatus.ACTIVE,
            "start_date": date(2026, 1, 5),
            "end_date": date(2026, 6, 30),
            "sold_daily_rate": 650.0,
        }
        data.update(fields)
        return _persist(db_session, Mission(**data))

    return _make
