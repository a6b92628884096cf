"""
Expense Claim Route Tests
"""

from datetime import timedelta

from travel_expense.models.approvable import ApprovalStatus
from travel_expense.models.audit_log import AuditLog
from travel_expense.models.expense_claim import ExpenseClaim
from travel_expense.models.notification import Notification


def claim_body(travel_request, expense_date=None, **overrides):
    body = {
        "travel_request_id": travel_request.id,
        "amount": 89.9,
        "description": "Dinner with client",
        "expense_date": (expense_date or travel_request.start_date).isoformat(),
        "category": "Meals",
    }
    body.update(overrides)
    return body


class TestExpenseSubmission:
    """POST /api/expense"""

    def test_submit_against_approved_travel(self, client, db, users, headers_for, make_travel_request):
        travel_request = make_travel_request(
            users["employee"], status=ApprovalStatus.APPROVED, admin_status=ApprovalStatus.APPROVED
        )

        response = client.post(
            "/api/expense", json=claim_body(travel_request), headers=headers_for(users["employee"])
        )

        assert response.status_code == 201
        claim = response.json()["expense_claim"]
        assert claim["status"] == "Pending"
        assert claim["category"] == "Meals"
        assert claim["travel_request"]["destination"] == travel_request.destination

        types = {n.type.value for n in db.query(Notification).all()}
        assert types == {"expense_submitted"}

    def test_date_outside_window_rejected(self, client, db, users, headers_for, make_travel_request):
        travel_request = make_travel_request(
            users["employee"], status=ApprovalStatus.APPROVED, admin_status=ApprovalStatus.APPROVED
        )

        response = client.post(
            "/api/expense",
            json=claim_body(travel_request, expense_date=travel_request.end_date + timedelta(days=1)),
            headers=headers_for(users["employee"])
        )

        assert response.status_code == 400
        assert "travel period" in response.json()["message"]
        assert db.query(ExpenseClaim).count() == 0

    def test_pending_travel_rejected(self, client, users, headers_for, make_travel_request):
        travel_request = make_travel_request(users["employee"])

        response = client.post(
            "/api/expense", json=claim_body(travel_request), headers=headers_for(users["employee"])
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or unapproved travel request"

    def test_blank_description_rejected(self, client, users, headers_for, make_travel_request):
        travel_request = make_travel_request(users["employee"], status=ApprovalStatus.APPROVED)

        response = client.post(
            "/api/expense",
            json=claim_body(travel_request, description="   "),
            headers=headers_for(users["employee"])
        )

        assert response.status_code == 422

    def test_negative_amount_rejected(self, client, users, headers_for, make_travel_request):
        travel_request = make_travel_request(users["employee"], status=ApprovalStatus.APPROVED)

        response = client.post(
            "/api/expense",
            json=claim_body(travel_request, amount=-5),
            headers=headers_for(users["employee"])
        )

        assert response.status_code == 422


class TestExpenseReview:
    """PATCH /api/expense/{id}/status and queries"""

    def test_admin_finalizes_claim(self, client, db, users, headers_for, make_travel_request, make_expense_claim):
        travel_request = make_travel_request(users["employee"], status=ApprovalStatus.APPROVED)
        claim = make_expense_claim(travel_request)

        response = client.patch(
            f"/api/expense/{claim.id}/status",
            json={"status": "Approved", "review_comments": "Receipts ok"},
            headers=headers_for(users["admin"])
        )

        assert response.status_code == 200
        data = response.json()["expense_claim"]
        assert data["status"] == "Approved"
        assert data["admin_comments"] == "Receipts ok"
        assert data["admin_reviewer_id"] == users["admin"].id

        submitter_notes = db.query(Notification).filter(
            Notification.recipient_id == users["employee"].id
        ).all()
        assert [n.type.value for n in submitter_notes] == ["expense_approved"]
        assert db.query(AuditLog).one().action == "ExpenseClaim Approved"

        response = client.patch(
            f"/api/expense/{claim.id}/status",
            json={"status": "Rejected"},
            headers=headers_for(users["manager"])
        )
        assert response.status_code == 409

    def test_unassigned_manager_forbidden(self, client, users, headers_for, make_travel_request, make_expense_claim):
        travel_request = make_travel_request(users["employee"], status=ApprovalStatus.APPROVED)
        claim = make_expense_claim(travel_request)

        response = client.patch(
            f"/api/expense/{claim.id}/status",
            json={"status": "Approved"},
            headers=headers_for(users["manager2"])
        )

        assert response.status_code == 403

    def test_list_and_detail(self, client, users, headers_for, make_travel_request, make_expense_claim):
        travel_request = make_travel_request(users["employee"], status=ApprovalStatus.APPROVED)
        claim = make_expense_claim(travel_request)

        listing = client.get("/api/expense", headers=headers_for(users["manager"])).json()
        assert listing["total"] == 1
        assert listing["expense_claims"][0]["id"] == claim.id

        assert client.get("/api/expense", headers=headers_for(users["manager2"])).json()["total"] == 0

        detail = client.get(f"/api/expense/{claim.id}", headers=headers_for(users["employee"]))
        assert detail.status_code == 200
        assert detail.json()["amount"] == claim.amount
