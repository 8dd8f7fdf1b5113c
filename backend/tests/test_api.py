"""HTTP tests for the ticket API and the staff update form."""
import re
from datetime import datetime, timedelta, timezone

import pytest

from ticketdesk.models import Company, Profile
from ticketdesk.services.notification_service import RecordingMailer


CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, POST, OPTIONS",
    "access-control-allow-headers": "Content-Type",
}


def assert_cors(response):
    for name, value in CORS.items():
        assert response.headers[name] == value


# ===================================================================
# Root, CORS and unmatched routes
# ===================================================================


class TestRouting:

    def test_root_reports_version(self, client):
        response = client.get("/")
        assert response.status_code == 200
        body = response.json()
        assert body["version"] == "3.0.0"
        assert "running" in body["status"]
        assert body["endpoints"]["submitTicket"] == "POST /api/submit-ticket"
        assert_cors(response)

    @pytest.mark.parametrize("path", ["/", "/api/submit-ticket", "/update/abc", "/does/not/exist"])
    def test_options_preflight(self, client, path):
        response = client.options(path)
        assert response.status_code == 200
        assert response.content == b""
        assert_cors(response)

    def test_unmatched_route_is_diagnosed(self, client):
        response = client.get("/api/unknown")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["method"] == "GET"
        assert body["path"] == "/api/unknown"
        assert_cors(response)

    def test_wrong_method_is_not_found(self, client):
        response = client.get("/api/submit-ticket")
        assert response.status_code == 404
        assert response.json()["method"] == "GET"


# ===================================================================
# POST /api/submit-ticket
# ===================================================================


class TestSubmitTicket:

    def test_example_submission(self, client, mailer, submission):
        response = client.post("/api/submit-ticket", json=submission)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["notificationSent"] is True
        assert body["ticketNumber"].startswith("PIOT-")
        assert re.fullmatch(r"PIOT-[0-9A-Z]+", body["ticketNumber"])
        assert_cors(response)

        assert len(mailer.sent) == 1
        assert mailer.sent[0].to == "support@piot.co.za"
        assert body["ticketNumber"] in mailer.sent[0].subject

        ticket = client.get(f"/api/ticket/{body['ticketId']}").json()["ticket"]
        assert ticket["status"] == "unassigned"
        assert ticket["subject"] == "Printer down"
        assert ticket["description"] == "No power"
        assert ticket["priority"] == "high"
        assert ticket["ticket_number"] == body["ticketNumber"]

    def test_missing_user_is_bad_request(self, client, mailer, submission):
        del submission["user"]
        response = client.post("/api/submit-ticket", json=submission)
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Missing ticket or user data"}
        assert mailer.sent == []

    def test_invalid_json_is_bad_request(self, client, mailer):
        response = client.post(
            "/api/submit-ticket",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert mailer.sent == []

    def test_field_errors_are_listed(self, client, submission):
        submission["ticket"]["priority"] = "urgent"
        response = client.post("/api/submit-ticket", json=submission)
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid ticket or user data"
        assert [e["field"] for e in body["errors"]] == ["ticket.priority"]

    def test_link_uses_host_header_without_base_url(self, settings_factory, submission):
        from fastapi.testclient import TestClient
        from ticketdesk.main import create_app

        mailer = RecordingMailer()
        app = create_app(settings_factory(base_url=None), mailer=mailer)
        with TestClient(app) as client:
            body = client.post(
                "/api/submit-ticket", json=submission, headers={"Host": "help.piot.co.za"}
            ).json()
        assert f"https://help.piot.co.za/update/{body['ticketId']}" in mailer.sent[0].html

    def test_email_failure_reports_flag(self, settings, submission):
        from fastapi.testclient import TestClient
        from ticketdesk.main import create_app

        app = create_app(settings, mailer=RecordingMailer(fail_with=OSError("no route")))
        with TestClient(app) as client:
            response = client.post("/api/submit-ticket", json=submission)
            assert response.status_code == 200
            assert response.json()["notificationSent"] is False
            ticket_id = response.json()["ticketId"]
            assert client.get(f"/api/ticket/{ticket_id}").status_code == 200

    def test_email_failure_is_500_when_configured(self, settings_factory, submission):
        from fastapi.testclient import TestClient
        from ticketdesk.main import create_app

        settings = settings_factory(fail_on_notification_error=True)
        app = create_app(settings, mailer=RecordingMailer(fail_with=OSError("no route")))
        with TestClient(app) as client:
            response = client.post("/api/submit-ticket", json=submission)
        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to submit ticket"}


# ===================================================================
# GET /api/tickets/{userId}, GET /api/ticket/{ticketId}
# ===================================================================


class TestReadTickets:

    def test_list_user_tickets(self, client, seed, ticket_factory):
        base = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)
        seed(Profile(id="user-1", first_name="Jane", surname="Doe", email="jane@x.com"))
        seed(
            ticket_factory(id="old", ticket_number="PIOT-A", user_id="user-1", created_at=base),
            ticket_factory(id="new", ticket_number="PIOT-C", user_id="user-1", created_at=base + timedelta(days=2)),
            ticket_factory(id="mid", ticket_number="PIOT-B", user_id="user-1", created_at=base + timedelta(days=1)),
            ticket_factory(id="other", ticket_number="PIOT-D", user_id="user-2", created_at=base),
        )

        response = client.get("/api/tickets/user-1")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [t["id"] for t in body["tickets"]] == ["new", "mid", "old"]
        assert all(t["user_id"] == "user-1" for t in body["tickets"])

    def test_submitted_ticket_is_linked_to_profile(self, client, seed, submission):
        seed(Company(id="company-1", name="Acme"))
        seed(Profile(id="user-1", first_name="Jane", surname="Doe", email="jane@x.com"))
        created = client.post("/api/submit-ticket", json=submission).json()

        tickets = client.get("/api/tickets/user-1").json()["tickets"]
        assert [t["id"] for t in tickets] == [created["ticketId"]]
        assert tickets[0]["company_id"] == "company-1"

    def test_list_for_unknown_user(self, client):
        response = client.get("/api/tickets/nobody")
        assert response.status_code == 200
        assert response.json() == {"success": True, "tickets": []}

    def test_unknown_ticket_is_404_json(self, client):
        response = client.get("/api/ticket/missing")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Ticket not found"}


# ===================================================================
# /update/{ticketId}
# ===================================================================


class TestUpdateForm:

    @pytest.fixture
    def ticket(self, seed, ticket_factory):
        company = Company(id="company-1", name="Acme")
        profile = Profile(id="user-1", first_name="Jane", surname="Doe", email="jane@x.com")
        seed(company, profile)
        (ticket,) = seed(ticket_factory(id="ticket-1", user_id="user-1", company_id="company-1"))
        return ticket

    def test_form_is_prefilled(self, client, ticket):
        response = client.get("/update/ticket-1")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        html = response.text
        assert "PIOT-TEST1" in html
        assert "Jane Doe" in html
        assert "Acme" in html
        assert '<option value="unassigned" selected>' in html
        for name in ["Jeandre", "Dekel", "Rob", "Aiden", "Jakes", "Jaco", "Norman", "Karabo"]:
            assert f'<option value="{name}">' in html
        assert '<textarea name="note"' in html

    def test_form_for_ticket_without_owner(self, client, seed, ticket_factory):
        seed(ticket_factory(id="orphan", ticket_number="PIOT-ORPHAN", technician_name="Rob"))
        html = client.get("/update/orphan").text
        assert "Unknown" in html
        assert '<option value="Rob" selected>' in html

    def test_form_for_unknown_ticket(self, client):
        response = client.get("/update/nope")
        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/html")
        assert "Ticket Not Found" in response.text
        assert "nope" in response.text

    def test_example_form_update(self, client, ticket):
        response = client.post(
            "/update/ticket-1",
            data={"status": "completed", "technicianName": "Rob", "note": "Fixed it"},
        )
        assert response.status_code == 200
        assert "Ticket Updated!" in response.text
        assert "Completed" in response.text
        assert "Rob" in response.text
        assert_cors(response)

        detail = client.get("/api/ticket/ticket-1").json()["ticket"]
        assert detail["status"] == "completed"
        assert detail["technician_name"] == "Rob"
        assert len(detail["comments"]) == 1
        assert detail["comments"][0]["text"] == "Fixed it"
        assert detail["comments"][0]["author_name"] == "Rob"
        assert detail["comments"][0]["is_from_user"] is False

    def test_json_update(self, client, ticket):
        response = client.post("/update/ticket-1", json={"status": "in-progress", "technicianName": "Karabo"})
        assert response.status_code == 200
        detail = client.get("/api/ticket/ticket-1").json()["ticket"]
        assert detail["status"] == "in-progress"
        assert detail["technician_name"] == "Karabo"
        assert detail["comments"] == []

    def test_unparseable_body_changes_nothing(self, client, ticket):
        response = client.post(
            "/update/ticket-1",
            content=b"{broken",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 200
        detail = client.get("/api/ticket/ticket-1").json()["ticket"]
        assert detail["status"] == "unassigned"
        assert detail["comments"] == []

    def test_unknown_status_is_rejected(self, client, ticket):
        response = client.post("/update/ticket-1", data={"status": "closed"})
        assert response.status_code == 400
        assert "Unknown status" in response.text
        assert client.get("/api/ticket/ticket-1").json()["ticket"]["status"] == "unassigned"

    def test_update_unknown_ticket(self, client):
        response = client.post("/update/nope", data={"status": "completed", "note": "x"})
        assert response.status_code == 404
        assert "Ticket Not Found" in response.text
