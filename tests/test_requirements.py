"""
Tests for the requirement / bid state machine and the project and mission gates.

Tests cover:
- Requirement creation (time-and-materials vs fixed-price bid)
- MEDDPICC scoring and the go/no-go threshold
- Bid outcome recording
- Financial scoring gate (direct company and subsidiary -> parent)
- Mission creation prerequisites and inline project creation
- End-to-end flows through the API
"""

from datetime import date
from types import SimpleNamespace

import pytest

from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from app.models import (
    BidStatus,
    CandidateStatus,
    Company,
    CompanyStatus,
    Consultant,
    ConsultantStatus,
    GoNoGoDecision,
    Mission,
    Project,
    ProjectType,
    Requirement,
    RequirementStatus,
)
from app.workflow import requirements as workflow
from app.workflow.effects import EntityType, Ref
from app.workflow.permissions import resolve_permissions

MANAGER = resolve_permissions(["business_manager"])
RECRUITER = resolve_permissions(["recruiter"])
THRESHOLD = 2.5


def bid(bid_status=BidStatus.QUALIFYING, **fields):
    data = dict(
        id=3, title="Data platform rebuild", customer_name="Acme Corp",
        project_type=ProjectType.FIXED_PRICE, status=RequirementStatus.OPPORTUNITY,
        is_bid=True, bid_status=bid_status, go_nogo_decision=None, version=2,
    )
    data.update(fields)
    return Requirement(**data)


def won_requirement(**fields):
    data = dict(
        id=4, title="Python Developer", customer_name="Acme Corp",
        project_type=ProjectType.TIME_AND_MATERIALS, status=RequirementStatus.WON,
        is_bid=False, winning_candidate_id=7, project_id=None, company_id=None, version=5,
    )
    data.update(fields)
    return Requirement(**data)


def company(**fields):
    data = dict(id=20, name="Acme Corp", status=CompanyStatus.ACTIVE, city="Leeds",
                parent_company_id=None, financial_scoring="A")
    data.update(fields)
    return Company(**data)


def consultant(status=ConsultantStatus.BENCH):
    return Consultant(id=30, candidate_id=7, first_name="Grace", last_name="Hopper", status=status)


MISSION_FIELDS = {
    "start_date": date(2026, 3, 1),
    "end_date": date(2026, 8, 31),
    "sold_daily_rate": 700.0,
}


class TestMeddpiccScore:
    """Tests for compute_meddpicc_score"""

    def test_nothing_scored_is_insufficient(self):
        score = workflow.compute_meddpicc_score({})
        assert score.insufficient_data
        assert score.value is None
        assert score.scored_criteria == 0

    def test_average_of_scored_criteria_only(self):
        score = workflow.compute_meddpicc_score({"metrics": 4, "champion": 3, "competition": None})
        assert score.value == 3.5
        assert score.scored_criteria == 2
        assert not score.is_complete

    def test_rounded_to_one_decimal(self):
        score = workflow.compute_meddpicc_score({"metrics": 1, "champion": 2, "competition": 2})
        assert score.value == 1.7

    def test_complete_assessment(self):
        score = workflow.compute_meddpicc_score({name: 5 for name in workflow.MEDDPICC_CRITERIA})
        assert score.value == 5.0
        assert score.is_complete


class TestCreateRequirement:
    """Tests for decide_create_requirement"""

    def test_time_and_materials_starts_active(self):
        result = workflow.decide_create_requirement(
            {"title": "Dev", "customer_name": "Acme"}, "manager-1", MANAGER,
        )
        fields = result.created(EntityType.REQUIREMENT)[0].fields
        assert fields["status"] == RequirementStatus.ACTIVE
        assert fields["is_bid"] is False
        assert fields["owner_id"] == "manager-1"

    def test_fixed_price_without_project_is_bid(self):
        result = workflow.decide_create_requirement(
            {"title": "Rebuild", "customer_name": "Acme", "project_type": ProjectType.FIXED_PRICE},
            "manager-1",
            MANAGER,
        )
        fields = result.created(EntityType.REQUIREMENT)[0].fields
        assert fields["status"] == RequirementStatus.OPPORTUNITY
        assert fields["is_bid"] is True
        assert fields["bid_status"] == BidStatus.QUALIFYING

    def test_fixed_price_with_project_is_not_bid(self):
        result = workflow.decide_create_requirement(
            {"title": "Phase 2", "company_id": 1, "project_id": 9, "project_type": ProjectType.FIXED_PRICE},
            "manager-1",
            MANAGER,
        )
        assert result.created(EntityType.REQUIREMENT)[0].fields["is_bid"] is False

    def test_needs_customer(self):
        with pytest.raises(ValidationError):
            workflow.decide_create_requirement({"title": "Dev"}, "manager-1", MANAGER)

    def test_cannot_start_won(self):
        with pytest.raises(ValidationError):
            workflow.decide_create_requirement(
                {"title": "Dev", "customer_name": "Acme", "status": RequirementStatus.WON}, "manager-1", MANAGER,
            )

    def test_recruiter_cannot_create(self):
        with pytest.raises(PermissionDeniedError):
            workflow.decide_create_requirement({"title": "Dev", "customer_name": "Acme"}, "r-1", RECRUITER)


class TestRequirementStatus:
    """Tests for manual status changes and the winning candidate"""

    def test_hold_and_resume(self):
        requirement = won_requirement(status=RequirementStatus.ACTIVE)
        result = workflow.decide_change_requirement_status(requirement, RequirementStatus.ON_HOLD, MANAGER)
        assert result.update_for(EntityType.REQUIREMENT).changes == {"status": RequirementStatus.ON_HOLD}

    def test_won_is_terminal_for_manual_changes(self):
        with pytest.raises(ConflictError):
            workflow.decide_change_requirement_status(won_requirement(), RequirementStatus.ACTIVE, MANAGER)

    def test_cancelling_bid_records_outcome(self):
        result = workflow.decide_change_requirement_status(bid(), RequirementStatus.CANCELLED, MANAGER)
        assert result.update_for(EntityType.REQUIREMENT).changes["bid_outcome"] == "cancelled"

    def test_winning_candidate_marks_tm_won(self):
        requirement = won_requirement(status=RequirementStatus.ACTIVE, winning_candidate_id=None)
        candidate = SimpleNamespace(id=7, status=CandidateStatus.DIRECTOR_DONE)
        result = workflow.decide_set_winning_candidate(requirement, candidate, "manager-1", MANAGER)
        assert result.update_for(EntityType.REQUIREMENT).changes == {
            "winning_candidate_id": 7, "status": RequirementStatus.WON,
        }

    def test_bid_must_be_won_before_candidate(self):
        candidate = SimpleNamespace(id=7, status=CandidateStatus.SOURCED)
        with pytest.raises(ConflictError):
            workflow.decide_set_winning_candidate(bid(BidStatus.SUBMITTED), candidate, "manager-1", MANAGER)

    def test_rejected_candidate_cannot_win(self):
        requirement = won_requirement(status=RequirementStatus.ACTIVE)
        candidate = SimpleNamespace(id=7, status=CandidateStatus.REJECTED)
        with pytest.raises(ConflictError):
            workflow.decide_set_winning_candidate(requirement, candidate, "manager-1", MANAGER)


class TestBidWorkflow:
    """Tests for MEDDPICC, go/no-go, proposal and outcome"""

    def test_update_meddpicc_scores(self):
        result = workflow.decide_update_meddpicc(bid(), {"metrics": 4, "champion": 5}, {"metrics": "KPIs"}, MANAGER)
        update = result.update_for(EntityType.REQUIREMENT)
        assert update.changes == {"meddpicc_metrics": 4, "meddpicc_champion": 5, "meddpicc_notes": {"metrics": "KPIs"}}
        assert update.expected["bid_status"] == BidStatus.QUALIFYING

    def test_meddpicc_score_out_of_range(self):
        with pytest.raises(ValidationError):
            workflow.decide_update_meddpicc(bid(), {"metrics": 6}, None, MANAGER)

    def test_meddpicc_locked_after_decision(self):
        with pytest.raises(ConflictError):
            workflow.decide_update_meddpicc(bid(go_nogo_decision=GoNoGoDecision.GO), {"metrics": 3}, None, MANAGER)

    def test_go_with_no_scores_is_refused(self):
        """Absent scores are insufficient data, never a default"""
        with pytest.raises(ValidationError) as exc_info:
            workflow.decide_go_nogo(bid(), GoNoGoDecision.GO, "manager-1", MANAGER, THRESHOLD)
        assert "insufficient" in exc_info.value.message

    def test_go_below_threshold_is_refused(self):
        requirement = bid(meddpicc_metrics=2, meddpicc_champion=2)
        with pytest.raises(ValidationError):
            workflow.decide_go_nogo(requirement, GoNoGoDecision.GO, "manager-1", MANAGER, THRESHOLD)

    def test_go_moves_to_proposal(self):
        requirement = bid(meddpicc_metrics=3, meddpicc_champion=4)
        result = workflow.decide_go_nogo(requirement, GoNoGoDecision.GO, "manager-1", MANAGER, THRESHOLD)
        changes = result.update_for(EntityType.REQUIREMENT).changes
        assert changes["bid_status"] == BidStatus.PROPOSAL
        assert changes["go_nogo_decided_by"] == "manager-1"

    def test_nogo_closes_as_lost(self):
        result = workflow.decide_go_nogo(bid(), GoNoGoDecision.NOGO, "manager-1", MANAGER, THRESHOLD)
        changes = result.update_for(EntityType.REQUIREMENT).changes
        assert changes["bid_status"] == BidStatus.LOST
        assert changes["status"] == RequirementStatus.LOST
        assert changes["bid_outcome"] == "no_go"

    def test_submit_proposal_requires_positive_value(self):
        with pytest.raises(ValidationError):
            workflow.decide_submit_proposal(bid(BidStatus.PROPOSAL), {"proposal_value": 0}, MANAGER)

    def test_submit_proposal(self):
        result = workflow.decide_submit_proposal(
            bid(BidStatus.PROPOSAL), {"proposal_value": 120000.0}, MANAGER, today=date(2026, 2, 1),
        )
        changes = result.update_for(EntityType.REQUIREMENT).changes
        assert changes["bid_status"] == BidStatus.SUBMITTED
        assert changes["proposal_submitted_date"] == date(2026, 2, 1)

    def test_won_only_after_submission(self):
        with pytest.raises(ConflictError):
            workflow.decide_record_bid_outcome(bid(BidStatus.PROPOSAL), workflow.BidOutcome.WON, None, None, MANAGER)

    def test_won_outcome(self):
        result = workflow.decide_record_bid_outcome(
            bid(BidStatus.SUBMITTED), workflow.BidOutcome.WON, None, "Strong champion", MANAGER,
        )
        changes = result.update_for(EntityType.REQUIREMENT).changes
        assert changes["status"] == RequirementStatus.WON
        assert changes["bid_status"] == BidStatus.WON

    def test_lost_needs_reason(self):
        with pytest.raises(ValidationError):
            workflow.decide_record_bid_outcome(bid(BidStatus.SUBMITTED), workflow.BidOutcome.LOST, " ", None, MANAGER)

    def test_non_bid_has_no_bid_workflow(self):
        with pytest.raises(ConflictError) as exc_info:
            workflow.decide_go_nogo(won_requirement(), GoNoGoDecision.NOGO, "manager-1", MANAGER, THRESHOLD)
        assert exc_info.value.field == "is_bid"


class TestFinancialScoringGate:
    """Tests for the financial scoring requirement on project creation"""

    def test_company_with_scoring_passes(self):
        assessment = workflow.require_financial_scoring(company())
        assert assessment.state == workflow.FinancialScoringState.PRESENT
        assert not assessment.is_subsidiary

    def test_company_without_scoring_is_refused(self):
        with pytest.raises(ValidationError) as exc_info:
            workflow.require_financial_scoring(company(financial_scoring=None))
        assert exc_info.value.entity_id == 20
        assert exc_info.value.field == "financial_scoring"

    def test_whitespace_scoring_counts_as_absent(self):
        with pytest.raises(ValidationError):
            workflow.require_financial_scoring(company(financial_scoring="   "))

    def test_subsidiary_uses_parent_scoring(self):
        parent = company(id=21, name="Acme Holdings", financial_scoring="B")
        subsidiary = company(parent_company_id=21, financial_scoring=None)
        assessment = workflow.require_financial_scoring(subsidiary, parent)
        assert assessment.is_subsidiary
        assert assessment.responsible_company_id == 21

    def test_subsidiary_own_scoring_is_ignored(self):
        """Only the parent's scoring counts for a subsidiary"""
        parent = company(id=21, name="Acme Holdings", financial_scoring=None)
        subsidiary = company(parent_company_id=21, financial_scoring="A")
        with pytest.raises(ValidationError) as exc_info:
            workflow.require_financial_scoring(subsidiary, parent)
        assert "parent company 'Acme Holdings'" in exc_info.value.message
        assert exc_info.value.entity_id == 21

    def test_unresolved_parent_is_unknown_not_absent(self):
        subsidiary = company(parent_company_id=21)
        assert workflow.assess_financial_scoring(subsidiary, None).state == workflow.FinancialScoringState.UNKNOWN
        with pytest.raises(NotFoundError):
            workflow.require_financial_scoring(subsidiary, None)


class TestCreateProject:
    """Tests for decide_create_project"""

    def test_creates_and_links_project(self):
        result = workflow.decide_create_project(
            won_requirement(), company(status=CompanyStatus.PROSPECT), None, {}, "manager-1", MANAGER,
        )
        project = result.created(EntityType.PROJECT)[0]
        assert project.ref == "project"
        assert project.fields["requirement_id"] == 4
        link = result.update_for(EntityType.REQUIREMENT, 4)
        assert link.changes["project_id"] == Ref("project")
        assert link.expected["project_id"] is None
        assert result.update_for(EntityType.COMPANY, 20).changes == {"status": CompanyStatus.ACTIVE}

    def test_requirement_must_be_won(self):
        with pytest.raises(ConflictError):
            workflow.decide_create_project(
                won_requirement(status=RequirementStatus.ACTIVE), company(), None, {}, "manager-1", MANAGER,
            )

    def test_existing_project_conflicts(self):
        with pytest.raises(ConflictError):
            workflow.decide_create_project(won_requirement(project_id=9), company(), None, {}, "manager-1", MANAGER)

    def test_no_customer_is_not_found(self):
        with pytest.raises(NotFoundError):
            workflow.decide_create_project(won_requirement(), None, None, {}, "manager-1", MANAGER)


class TestCreateMission:
    """Tests for the mission creation gate"""

    def test_creates_project_and_mission_and_moves_off_bench(self):
        result = workflow.decide_create_mission(
            won_requirement(), consultant(), company(), None, None, MISSION_FIELDS, "manager-1", MANAGER,
        )
        assert result.created(EntityType.PROJECT)
        mission = result.created(EntityType.MISSION)[0]
        assert mission.fields["project_id"] == Ref("project")
        assert mission.fields["consultant_id"] == 30
        assert mission.fields["location"] == "Leeds"
        assert result.update_for(EntityType.CONSULTANT, 30).changes == {"status": ConsultantStatus.IN_MISSION}

    def test_uses_existing_project(self):
        project = Project(id=9, name="Platform", company_id=20, start_date=date(2026, 1, 1), end_date=date(2026, 12, 31))
        result = workflow.decide_create_mission(
            won_requirement(project_id=9), consultant(ConsultantStatus.IN_MISSION), company(), None, project,
            MISSION_FIELDS, "manager-1", MANAGER,
        )
        assert not result.created(EntityType.PROJECT)
        assert result.created(EntityType.MISSION)[0].fields["project_id"] == 9
        assert result.update_for(EntityType.CONSULTANT) is None

    def test_mission_outside_project_dates(self):
        project = Project(id=9, name="Platform", company_id=20, start_date=date(2026, 4, 1), end_date=None)
        with pytest.raises(ValidationError) as exc_info:
            workflow.decide_create_mission(
                won_requirement(project_id=9), consultant(), company(), None, project,
                MISSION_FIELDS, "manager-1", MANAGER,
            )
        assert exc_info.value.field == "start_date"

    def test_unconverted_candidate_is_refused(self):
        with pytest.raises(ValidationError) as exc_info:
            workflow.decide_create_mission(
                won_requirement(), None, company(), None, None, MISSION_FIELDS, "manager-1", MANAGER,
            )
        assert "has not been converted to a consultant" in exc_info.value.message

    def test_missing_winning_candidate(self):
        with pytest.raises(ValidationError):
            workflow.decide_create_mission(
                won_requirement(winning_candidate_id=None), None, company(), None, None,
                MISSION_FIELDS, "manager-1", MANAGER,
            )

    def test_consultant_checked_before_customer(self):
        """With neither consultant nor customer the consultant error wins"""
        with pytest.raises(ValidationError):
            workflow.decide_create_mission(
                won_requirement(), None, None, None, None, MISSION_FIELDS, "manager-1", MANAGER,
            )

    def test_no_customer_is_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            workflow.decide_create_mission(
                won_requirement(), consultant(), None, None, None, MISSION_FIELDS, "manager-1", MANAGER,
            )
        assert "No customer found" in exc_info.value.message

    def test_inline_project_goes_through_scoring_gate(self):
        with pytest.raises(ValidationError) as exc_info:
            workflow.decide_create_mission(
                won_requirement(), consultant(), company(financial_scoring=None), None, None,
                MISSION_FIELDS, "manager-1", MANAGER,
            )
        assert exc_info.value.field == "financial_scoring"

    def test_end_before_start(self):
        fields = dict(MISSION_FIELDS, end_date=date(2026, 2, 1))
        with pytest.raises(ValidationError):
            workflow.decide_create_mission(
                won_requirement(), consultant(), company(), None, None, fields, "manager-1", MANAGER,
            )

    def test_terminated_consultant_conflicts(self):
        with pytest.raises(ConflictError):
            workflow.decide_create_mission(
                won_requirement(), consultant(ConsultantStatus.TERMINATED), company(), None, None,
                MISSION_FIELDS, "manager-1", MANAGER,
            )


class TestMatchCustomer:
    """Tests for resolving the free-text customer name"""

    def test_case_and_whitespace_insensitive(self):
        companies = [company(id=1, name="Globex"), company(id=2, name="Acme  Corp")]
        assert workflow.match_customer(" acme corp ", companies).id == 2

    def test_no_match(self):
        assert workflow.match_customer("Initech", [company()]) is None
        assert workflow.match_customer(None, [company()]) is None


class TestRequirementAPI:
    """End-to-end requirement, project and mission flows through the API"""

    def test_tm_requirement_to_mission(
        self, client, db_session, auth_headers, make_candidate, make_consultant, make_company,
    ):
        make_company(name="Acme Corp", financial_scoring="A")
        candidate = make_candidate(status=CandidateStatus.CONVERTED_TO_CONSULTANT)
        bench = make_consultant(candidate=candidate)
        manager = auth_headers(["business_manager"], "manager-1")

        response = client.post("/api/v1/requirements/", headers=manager, json={
            "title": "Python Developer", "customer_name": "acme corp",
        })
        assert response.status_code == 201
        requirement_id = response.json()["id"]
        assert response.json()["status"] == "active"

        response = client.post(
            f"/api/v1/requirements/{requirement_id}/winning-candidate",
            headers=manager,
            json={"candidate_id": candidate.id},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "won"

        response = client.post(f"/api/v1/requirements/{requirement_id}/missions", headers=manager, json={
            "start_date": "2026-03-02", "end_date": "2026-09-30", "sold_daily_rate": 650,
        })
        assert response.status_code == 201
        mission = response.json()
        assert mission["status"] == "active"
        assert mission["consultant_id"] == bench.id

        requirement = db_session.get(Requirement, requirement_id)
        assert requirement.project_id == mission["project_id"]
        assert db_session.get(Project, mission["project_id"]).requirement_id == requirement_id
        assert db_session.get(Consultant, bench.id).status == ConsultantStatus.IN_MISSION

    def test_subsidiary_without_parent_scoring(
        self, client, db_session, auth_headers, make_company, make_requirement,
    ):
        parent = make_company(name="Acme Holdings", financial_scoring=None)
        subsidiary = make_company(name="Acme UK", parent_company_id=parent.id)
        requirement = make_requirement(customer_name="Acme UK", status=RequirementStatus.WON)

        response = client.post(
            f"/api/v1/requirements/{requirement.id}/project",
            headers=auth_headers(["business_manager"], "manager-1"),
        )
        assert response.status_code == 400
        body = response.json()
        assert body["entity_id"] == parent.id
        assert "Acme Holdings" in body["detail"]
        assert db_session.query(Project).count() == 0

        # Once the parent is scored the subsidiary's project goes through
        parent.financial_scoring = "B"
        db_session.commit()
        response = client.post(
            f"/api/v1/requirements/{requirement.id}/project",
            headers=auth_headers(["business_manager"], "manager-1"),
        )
        assert response.status_code == 201
        assert response.json()["company_id"] == subsidiary.id

    def test_mission_without_consultant_is_400(self, client, db_session, auth_headers, make_candidate, make_company, make_requirement):
        make_company(financial_scoring="A")
        candidate = make_candidate(status=CandidateStatus.DIRECTOR_DONE)
        requirement = make_requirement(status=RequirementStatus.WON, winning_candidate_id=candidate.id)

        response = client.post(
            f"/api/v1/requirements/{requirement.id}/missions",
            headers=auth_headers(["business_manager"], "manager-1"),
            json={"start_date": "2026-03-02", "end_date": "2026-09-30", "sold_daily_rate": 650},
        )
        assert response.status_code == 400
        assert "not been converted" in response.json()["detail"]
        assert db_session.query(Mission).count() == 0

    def test_mission_without_customer_is_404(
        self, client, db_session, auth_headers, make_candidate, make_consultant, make_requirement,
    ):
        candidate = make_candidate(status=CandidateStatus.CONVERTED_TO_CONSULTANT)
        make_consultant(candidate=candidate)
        requirement = make_requirement(
            customer_name="Nobody Ltd", status=RequirementStatus.WON, winning_candidate_id=candidate.id,
        )

        response = client.post(
            f"/api/v1/requirements/{requirement.id}/missions",
            headers=auth_headers(["business_manager"], "manager-1"),
            json={"start_date": "2026-03-02", "end_date": "2026-09-30", "sold_daily_rate": 650},
        )
        assert response.status_code == 404
        assert "No customer found" in response.json()["detail"]
        assert db_session.query(Project).count() == 0

    def test_bid_flow(self, client, auth_headers, make_company):
        make_company(name="Globex", financial_scoring="A")
        manager = auth_headers(["business_manager"], "manager-1")

        response = client.post("/api/v1/requirements/", headers=manager, json={
            "title": "Migration", "customer_name": "Globex", "project_type": "Fixed_Price",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "opportunity"
        assert body["bid_status"] == "qualifying"
        assert body["meddpicc_insufficient_data"] is True
        requirement_id = body["id"]

        response = client.post(f"/api/v1/requirements/{requirement_id}/go-nogo", headers=manager, json={"decision": "go"})
        assert response.status_code == 400

        response = client.put(f"/api/v1/requirements/{requirement_id}/meddpicc", headers=manager, json={
            "metrics": 4, "economic_buyer": 3, "champion": 4,
        })
        assert response.status_code == 200
        assert response.json()["meddpicc_score"] == 3.7

        response = client.post(f"/api/v1/requirements/{requirement_id}/go-nogo", headers=manager, json={"decision": "go"})
        assert response.status_code == 200
        assert response.json()["bid_status"] == "proposal"

        response = client.post(f"/api/v1/requirements/{requirement_id}/proposal", headers=manager, json={
            "proposal_value": 250000,
        })
        assert response.json()["bid_status"] == "submitted"

        response = client.post(f"/api/v1/requirements/{requirement_id}/outcome", headers=manager, json={
            "outcome": "won",
        })
        assert response.status_code == 200
        assert response.json()["status"] == "won"

        response = client.post(f"/api/v1/requirements/{requirement_id}/project", headers=manager)
        assert response.status_code == 201
        assert response.json()["project_type"] == "Fixed_Price"

    def test_recruiter_cannot_record_outcome(self, client, auth_headers, make_requirement):
        requirement = make_requirement(
            project_type=ProjectType.FIXED_PRICE, status=RequirementStatus.OPPORTUNITY,
            is_bid=True, bid_status=BidStatus.SUBMITTED,
        )
        response = client.post(
            f"/api/v1/requirements/{requirement.id}/outcome",
            headers=auth_headers(["recruiter"], "r-1"),
            json={"outcome": "won"},
        )
        assert response.status_code == 403
