"""
Unit tests for candidate endpoints.

Tests:
- Candidate creation and editing
- Explicit reject / withdraw overrides
- Soft delete and restore
- Interviews driving the derived pipeline status
"""

import pytest

from app.core.exceptions import ConflictError, ValidationError
from app.models import Candidate, CandidateStatus
from app.workflow import candidates
from app.workflow.permissions import resolve_permissions

RECRUITER = resolve_permissions(["recruiter"])


class TestCandidateDecisions:
    """Tests for the candidates workflow module"""

    def test_status_is_not_editable(self):
        candidate = Candidate(id=1, first_name="Ada", last_name="Lovelace", status=CandidateStatus.SOURCED, version=1)
        with pytest.raises(ValidationError) as exc_info:
            candidates.decide_update_candidate(candidate, {"status": CandidateStatus.OFFER_PENDING}, RECRUITER)
        assert exc_info.value.field == "status"

    def test_create_ignores_supplied_status(self):
        result = candidates.decide_create_candidate(
            {"first_name": "Ada", "last_name": "Lovelace", "status": CandidateStatus.CONTRACT_SIGNED},
            "r-1", RECRUITER,
        )
        assert result.effects[0].fields["status"] == CandidateStatus.SOURCED

    def test_cannot_withdraw_converted(self):
        candidate = Candidate(
            id=1, first_name="Ada", last_name="Lovelace",
            status=CandidateStatus.CONVERTED_TO_CONSULTANT, version=3,
        )
        with pytest.raises(ConflictError):
            candidates.decide_close_candidate(candidate, CandidateStatus.WITHDRAWN, RECRUITER)


class TestCandidateAPI:
    """Candidate CRUD endpoints"""

    def test_create_candidate(self, client, auth_headers):
        response = client.post(
            "/api/v1/candidates/",
            headers=auth_headers(["recruiter"], "r-1"),
            json={
                "first_name": "Ada",
                "last_name": "Lovelace",
                "email": "ada@example.com",
                "skills": ["python", " python ", "sql"],
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "sourced"
        assert data["pipeline_status"] == "sourced"
        assert data["skills"] == ["python", "sql"]
        assert data["version"] == 1

    def test_create_requires_capability(self, client, auth_headers):
        response = client.post(
            "/api/v1/candidates/",
            headers=auth_headers(["hr"], "hr-1"),
            json={"first_name": "Ada", "last_name": "Lovelace"},
        )
        assert response.status_code == 403

    def test_update_candidate(self, client, auth_headers, make_candidate):
        candidate = make_candidate()
        response = client.patch(
            f"/api/v1/candidates/{candidate.id}",
            headers=auth_headers(["recruiter"], "r-1"),
            json={"current_role": "Data Engineer", "expected_version": 1},
        )
        assert response.status_code == 200
        assert response.json()["current_role"] == "Data Engineer"
        assert response.json()["version"] == 2

    def test_update_with_stale_version(self, client, auth_headers, make_candidate):
        candidate = make_candidate()
        response = client.patch(
            f"/api/v1/candidates/{candidate.id}",
            headers=auth_headers(["recruiter"], "r-1"),
            json={"current_role": "Data Engineer", "expected_version": 5},
        )
        assert response.status_code == 409
        assert response.json()["field"] == "version"

    def test_reject_then_withdraw_conflicts(self, client, auth_headers, make_candidate):
        candidate = make_candidate()
        headers = auth_headers(["recruiter"], "r-1")

        response = client.post(f"/api/v1/candidates/{candidate.id}/reject", headers=headers)
        assert response.status_code == 200
        assert response.json()["pipeline_status"] == "rejected"

        response = client.post(f"/api/v1/candidates/{candidate.id}/withdraw", headers=headers)
        assert response.status_code == 409

    def test_soft_delete_and_restore(self, client, auth_headers, make_candidate):
        candidate = make_candidate()
        manager = auth_headers(["recruiter_manager"], "rm-1")

        response = client.delete(f"/api/v1/candidates/{candidate.id}", headers=manager)
        assert response.status_code == 200
        assert response.json()["deleted_at"] is not None

        assert client.get("/api/v1/candidates/", headers=manager).json() == []
        assert client.get(f"/api/v1/candidates/{candidate.id}", headers=manager).status_code == 404
        listed = client.get("/api/v1/candidates/", headers=manager, params={"include_deleted": True}).json()
        assert [c["id"] for c in listed] == [candidate.id]

        response = client.post(f"/api/v1/candidates/{candidate.id}/restore", headers=manager)
        assert response.status_code == 200
        assert response.json()["deleted_at"] is None
        assert len(client.get("/api/v1/candidates/", headers=manager).json()) == 1

    def test_recruiter_cannot_soft_delete(self, client, auth_headers, make_candidate):
        candidate = make_candidate()
        response = client.delete(f"/api/v1/candidates/{candidate.id}", headers=auth_headers(["recruiter"], "r-1"))
        assert response.status_code == 403


class TestInterviews:
    """Interviews drive the derived pipeline status"""

    def _schedule(self, client, headers, candidate_id, stage):
        response = client.post(
            f"/api/v1/candidates/{candidate_id}/interviews",
            headers=headers,
            json={"stage": stage, "scheduled_at": "2026-11-02T10:00:00Z"},
        )
        assert response.status_code == 201
        return response.json()

    def test_pipeline_follows_interviews(self, client, auth_headers, make_candidate):
        candidate = make_candidate()
        headers = auth_headers(["business_manager"], "manager-1")

        phone = self._schedule(client, headers, candidate.id, "phone_qualification")
        assert phone["outcome"] == "pending"
        data = client.get(f"/api/v1/candidates/{candidate.id}", headers=headers).json()
        assert data["pipeline_status"] == "phone_planned"
        assert data["status"] == "sourced"

        response = client.post(
            f"/api/v1/interviews/{phone['id']}/outcome",
            headers=headers,
            json={"outcome": "pass", "communication_score": 4, "professionalism_score": 5},
        )
        assert response.status_code == 200
        assert response.json()["completed_at"] is not None
        assert response.json()["soft_skills_average"] == pytest.approx(4.5)

        self._schedule(client, headers, candidate.id, "technical_interview")
        data = client.get(f"/api/v1/candidates/{candidate.id}", headers=headers).json()
        assert data["pipeline_status"] == "technical_planned"

        interviews = client.get(f"/api/v1/candidates/{candidate.id}/interviews", headers=headers).json()
        assert [i["stage"] for i in interviews] == ["phone_qualification", "technical_interview"]

    def test_failed_phone_screen_rejects(self, client, auth_headers, make_candidate):
        candidate = make_candidate()
        headers = auth_headers(["recruiter"], "r-1")
        phone = self._schedule(client, headers, candidate.id, "phone_qualification")

        client.post(f"/api/v1/interviews/{phone['id']}/outcome", headers=headers, json={"outcome": "fail"})

        data = client.get(f"/api/v1/candidates/{candidate.id}", headers=headers).json()
        assert data["pipeline_status"] == "rejected"
        assert data["status"] == "sourced"

    def test_score_out_of_range(self, client, auth_headers, make_candidate):
        candidate = make_candidate()
        headers = auth_headers(["recruiter"], "r-1")
        phone = self._schedule(client, headers, candidate.id, "phone_qualification")

        response = client.post(
            f"/api/v1/interviews/{phone['id']}/outcome",
            headers=headers,
            json={"outcome": "pass", "communication_score": 6},
        )
        assert response.status_code == 422

    def test_list_filters_on_derived_status(self, client, auth_headers, make_candidate):
        screened = make_candidate(first_name="Grace")
        make_candidate(first_name="Alan")
        headers = auth_headers(["recruiter"], "r-1")
        self._schedule(client, headers, screened.id, "phone_qualification")

        response = client.get("/api/v1/candidates/", headers=headers, params={"status": "phone_planned"})
        assert [c["first_name"] for c in response.json()] == ["Grace"]

        response = client.get("/api/v1/candidates/", headers=headers, params={"status": "sourced"})
        assert [c["first_name"] for c in response.json()] == ["Alan"]

    def test_cannot_schedule_for_rejected_candidate(self, client, auth_headers, make_candidate):
        candidate = make_candidate(status=CandidateStatus.REJECTED)
        response = client.post(
            f"/api/v1/candidates/{candidate.id}/interviews",
            headers=auth_headers(["recruiter"], "r-1"),
            json={"stage": "phone_qualification"},
        )
        assert response.status_code == 409
