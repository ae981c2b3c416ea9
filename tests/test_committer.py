"""
Tests for the single-transaction commit step.

Tests cover:
- Ref placeholders resolved to ids created earlier in the same result
- Guard mismatches rolling back every effect, creates included
- Database errors translated into workflow errors
- Audit columns written from the acting user
- Guard-only updates checked but not written
"""

import pytest

from app.core.exceptions import ConflictError, NotFoundError
from app.models import Candidate, CandidateStatus, Consultant, ConsultantStatus, HrTicket, HrTicketStatus, HrTicketType
from app.services.committer import atomic, commit
from app.workflow.effects import CreateEffect, EntityType, Ref, TransitionResult, UpdateEffect


def _ticket_effect():
    return CreateEffect(
        EntityType.HR_TICKET,
        {"title": "Send contract", "ticket_type": HrTicketType.GENERAL, "status": HrTicketStatus.PENDING},
        ref="ticket",
    )


class TestCommit:
    """Tests for commit()"""

    def test_ref_resolves_to_created_id(self, db_session):
        result = TransitionResult(
            effects=[
                CreateEffect(
                    EntityType.CANDIDATE,
                    {"first_name": "Alan", "last_name": "Turing", "status": CandidateStatus.SOURCED},
                    ref="candidate",
                ),
                CreateEffect(
                    EntityType.CONSULTANT,
                    {
                        "candidate_id": Ref("candidate"),
                        "first_name": "Alan",
                        "last_name": "Turing",
                        "status": ConsultantStatus.BENCH,
                    },
                    ref="consultant",
                ),
            ],
            summary="test create",
        )

        created = commit(db_session, result, "hr-1")

        assert created["consultant"].candidate_id == created["candidate"].id
        assert created["consultant"].created_by == "hr-1"
        assert created["candidate"].version == 1

    def test_update_sets_audit_and_bumps_version(self, db_session, make_candidate):
        candidate = make_candidate()
        result = TransitionResult(
            effects=[UpdateEffect(
                EntityType.CANDIDATE,
                candidate.id,
                {"status": CandidateStatus.REJECTED},
                expected={"status": CandidateStatus.SOURCED, "version": 1},
            )],
            summary="test update",
        )

        commit(db_session, result, "recruiter-1")

        db_session.expire_all()
        stored = db_session.get(Candidate, candidate.id)
        assert stored.status == CandidateStatus.REJECTED
        assert stored.updated_by == "recruiter-1"
        assert stored.version == 2

    def test_guard_mismatch_rolls_back_everything(self, db_session, make_candidate):
        candidate = make_candidate()
        result = TransitionResult(
            effects=[
                _ticket_effect(),
                UpdateEffect(
                    EntityType.CANDIDATE,
                    candidate.id,
                    {"status": CandidateStatus.REJECTED},
                    expected={"status": CandidateStatus.OFFER_PENDING},
                ),
            ],
            summary="test mismatch",
        )

        with pytest.raises(ConflictError) as exc_info:
            commit(db_session, result, "hr-1")

        assert exc_info.value.field == "status"
        assert exc_info.value.expected == CandidateStatus.OFFER_PENDING
        assert exc_info.value.actual == CandidateStatus.SOURCED
        assert db_session.query(HrTicket).count() == 0
        assert db_session.get(Candidate, candidate.id).status == CandidateStatus.SOURCED

    def test_guard_only_update_checks_without_writing(self, db_session, make_candidate):
        candidate = make_candidate()
        result = TransitionResult(
            effects=[
                _ticket_effect(),
                UpdateEffect(EntityType.CANDIDATE, candidate.id, {}, expected={"status": CandidateStatus.SOURCED}),
            ],
            summary="test guard",
        )

        commit(db_session, result, "hr-1")

        db_session.expire_all()
        stored = db_session.get(Candidate, candidate.id)
        assert stored.version == 1
        assert stored.updated_by is None
        assert db_session.query(HrTicket).count() == 1

    def test_guard_only_mismatch_rolls_back(self, db_session, make_candidate):
        candidate = make_candidate()
        result = TransitionResult(
            effects=[
                _ticket_effect(),
                UpdateEffect(EntityType.CANDIDATE, candidate.id, {}, expected={"status": CandidateStatus.REJECTED}),
            ],
            summary="test guard mismatch",
        )

        with pytest.raises(ConflictError):
            commit(db_session, result, "hr-1")
        assert db_session.query(HrTicket).count() == 0

    def test_stale_version_conflicts(self, db_session, make_candidate):
        candidate = make_candidate()
        result = TransitionResult(
            effects=[UpdateEffect(
                EntityType.CANDIDATE, candidate.id, {"summary": "x"}, expected={"version": 7},
            )],
            summary="test stale",
        )

        with pytest.raises(ConflictError) as exc_info:
            commit(db_session, result, "hr-1")
        assert exc_info.value.field == "version"

    def test_missing_update_target(self, db_session):
        result = TransitionResult(
            effects=[
                _ticket_effect(),
                UpdateEffect(EntityType.CONSULTANT, 999, {"status": ConsultantStatus.BENCH}),
            ],
            summary="test missing",
        )

        with pytest.raises(NotFoundError) as exc_info:
            commit(db_session, result, "hr-1")
        assert exc_info.value.entity == "consultant"
        assert db_session.query(HrTicket).count() == 0

    def test_unique_violation_becomes_conflict(self, db_session, make_consultant):
        existing = make_consultant()
        result = TransitionResult(
            effects=[CreateEffect(
                EntityType.CONSULTANT,
                {
                    "candidate_id": existing.candidate_id,
                    "first_name": "Ada",
                    "last_name": "Lovelace",
                    "status": ConsultantStatus.BENCH,
                },
            )],
            summary="test duplicate",
        )

        with pytest.raises(ConflictError):
            commit(db_session, result, "hr-1")
        assert db_session.query(Consultant).count() == 1


class TestAtomic:
    """Tests for the atomic() transaction block"""

    def test_commits_on_success(self, db_session):
        with atomic(db_session, "add ticket"):
            db_session.add(HrTicket(title="Badge", ticket_type=HrTicketType.GENERAL, status=HrTicketStatus.PENDING))
        assert db_session.query(HrTicket).count() == 1

    def test_rolls_back_other_errors(self, db_session):
        with pytest.raises(RuntimeError):
            with atomic(db_session, "add ticket"):
                db_session.add(HrTicket(title="Badge", ticket_type=HrTicketType.GENERAL, status=HrTicketStatus.PENDING))
                db_session.flush()
                raise RuntimeError("boom")
        assert db_session.query(HrTicket).count() == 0
