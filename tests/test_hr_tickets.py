"""
Tests for the HR ticket queue.
"""

import pytest

from app.core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from app.models import HrTicket, HrTicketPriority, HrTicketStatus, HrTicketType
from app.workflow import hr_tickets
from app.workflow.effects import EntityType
from app.workflow.permissions import resolve_permissions

HR = resolve_permissions(["hr"])
RECRUITER = resolve_permissions(["recruiter"])


def ticket(status=HrTicketStatus.PENDING, ticket_type=HrTicketType.GENERAL, assigned_to=None):
    return HrTicket(id=12, ticket_type=ticket_type, status=status, title="Onboarding pack",
                    assigned_to=assigned_to, version=1)


class TestTicketDecisions:
    """Tests for the hr_tickets decisions"""

    def test_create_general_ticket(self):
        result = hr_tickets.decide_create_ticket({"title": "  Laptop  "}, "hr-1", HR)
        fields = result.created(EntityType.HR_TICKET)[0].fields
        assert fields["title"] == "Laptop"
        assert fields["ticket_type"] == HrTicketType.GENERAL
        assert fields["status"] == HrTicketStatus.PENDING
        assert fields["priority"] == HrTicketPriority.NORMAL

    def test_create_needs_title(self):
        with pytest.raises(ValidationError):
            hr_tickets.decide_create_ticket({"title": " "}, "hr-1", HR)

    def test_create_needs_capability(self):
        with pytest.raises(PermissionDeniedError):
            hr_tickets.decide_create_ticket({"title": "Laptop"}, "r-1", RECRUITER)

    def test_start_assigns_actor_when_unassigned(self):
        result = hr_tickets.decide_start_ticket(ticket(), "hr-1", HR)
        assert result.update_for(EntityType.HR_TICKET).changes == {
            "status": HrTicketStatus.IN_PROGRESS, "assigned_to": "hr-1",
        }

    def test_start_keeps_existing_assignee(self):
        result = hr_tickets.decide_start_ticket(ticket(assigned_to="hr-2"), "hr-1", HR)
        assert result.update_for(EntityType.HR_TICKET).changes["assigned_to"] == "hr-2"

    def test_complete_in_progress(self):
        result = hr_tickets.decide_complete_ticket(ticket(HrTicketStatus.IN_PROGRESS), HR)
        assert result.update_for(EntityType.HR_TICKET).changes["status"] == HrTicketStatus.COMPLETED

    def test_cannot_cancel_completed(self):
        with pytest.raises(ConflictError):
            hr_tickets.decide_cancel_ticket(ticket(HrTicketStatus.COMPLETED), HR)

    def test_contract_ticket_follows_its_offer(self):
        contract = ticket(ticket_type=HrTicketType.CONTRACT_SEND)
        with pytest.raises(ConflictError) as exc_info:
            hr_tickets.decide_complete_ticket(contract, HR)
        assert exc_info.value.field == "ticket_type"

    def test_contract_ticket_can_be_assigned(self):
        contract = ticket(HrTicketStatus.CONTRACT_SENT, HrTicketType.CONTRACT_SEND)
        result = hr_tickets.decide_assign_ticket(contract, "hr-3", HR)
        assert result.update_for(EntityType.HR_TICKET).changes == {"assigned_to": "hr-3"}


class TestTicketAPI:
    """HR ticket endpoints"""

    def test_ticket_lifecycle(self, client, auth_headers):
        hr = auth_headers(["hr"], "hr-1")
        response = client.post("/api/v1/hr-tickets/", headers=hr, json={"title": "Right to work check", "priority": "high"})
        assert response.status_code == 201
        ticket_id = response.json()["id"]

        response = client.post(f"/api/v1/hr-tickets/{ticket_id}/assign", headers=hr, json={"assignee_id": "hr-2"})
        assert response.json()["assigned_to"] == "hr-2"

        response = client.post(f"/api/v1/hr-tickets/{ticket_id}/start", headers=hr)
        assert response.json()["status"] == "in_progress"

        response = client.post(f"/api/v1/hr-tickets/{ticket_id}/complete", headers=hr)
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["completed_at"] is not None

        response = client.post(f"/api/v1/hr-tickets/{ticket_id}/cancel", headers=hr)
        assert response.status_code == 409

    def test_filter_by_status(self, client, auth_headers):
        hr = auth_headers(["hr"], "hr-1")
        client.post("/api/v1/hr-tickets/", headers=hr, json={"title": "First"})
        second = client.post("/api/v1/hr-tickets/", headers=hr, json={"title": "Second"}).json()
        client.post(f"/api/v1/hr-tickets/{second['id']}/cancel", headers=hr)

        response = client.get("/api/v1/hr-tickets/", headers=hr, params={"status": "pending"})
        assert [t["title"] for t in response.json()] == ["First"]
