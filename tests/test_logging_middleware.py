"""
Logging Middleware Tests
Request ids, principal and error code on the access log
"""

import pytest
from loguru import logger

from travel_expense.middleware.logging_middleware import REQUEST_ID_HEADER, describe_call
from travel_expense.models.approvable import ApprovalStatus
from travel_expense.utils.logger import setup_logger


@pytest.fixture
def access_log():
    """Records emitted while the test runs"""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="INFO")
    yield records
    logger.remove(handler_id)


def entries_for(records, prefix):
    return [record for record in records if record["message"].startswith(prefix)]


def test_records_outside_a_request_carry_placeholders(access_log):
    configured = setup_logger()
    assert setup_logger() is configured

    configured.info("startup check")

    record = entries_for(access_log, "startup check")[0]
    assert record["extra"]["request_id"] == "-"
    assert record["extra"]["principal"] == "-"


@pytest.mark.parametrize("method, path, expected", [
    ("PATCH", "/api/travel/12/status", "review travel #12"),
    ("PATCH", "/api/expense/7/status", "review expense #7"),
    ("POST", "/api/travel", "submit travel"),
    ("POST", "/api/expense", "submit expense"),
    ("GET", "/api/travel/12", "GET /api/travel/12"),
    ("GET", "/api/travel/12/status", "GET /api/travel/12/status"),
])
def test_describe_call(method, path, expected):
    assert describe_call(method, path) == expected


def test_request_id_generated(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.headers[REQUEST_ID_HEADER]


def test_request_id_echoed(client, access_log):
    response = client.get("/health", headers={REQUEST_ID_HEADER: "trace-abc"})

    assert response.headers[REQUEST_ID_HEADER] == "trace-abc"
    entries = entries_for(access_log, "GET /health -> 200")
    assert len(entries) == 1
    assert entries[0]["extra"]["request_id"] == "trace-abc"
    assert entries[0]["extra"]["principal"] == "anonymous"


def test_review_logs_principal_and_error_code(client, users, headers_for, make_travel_request, access_log):
    travel_request = make_travel_request(
        users["employee"], status=ApprovalStatus.APPROVED, admin_status=ApprovalStatus.APPROVED
    )

    response = client.patch(
        f"/api/travel/{travel_request.id}/status",
        json={"status": "Rejected"},
        headers=headers_for(users["manager"])
    )

    assert response.status_code == 409
    entries = entries_for(access_log, f"review travel #{travel_request.id} -> 409")
    assert len(entries) == 1
    assert entries[0]["level"].name == "WARNING"
    assert "error=finalized" in entries[0]["message"]
    assert entries[0]["extra"]["principal"] == users["manager"].id
    assert entries[0]["extra"]["request_id"] == response.headers[REQUEST_ID_HEADER]


def test_successful_submission_logged_at_info(client, users, headers_for, access_log):
    body = {
        "destination": "Oslo",
        "purpose": "Offsite",
        "start_date": "2099-01-10",
        "end_date": "2099-01-12",
        "estimated_cost": 100,
    }

    response = client.post("/api/travel", json=body, headers=headers_for(users["employee"]))

    assert response.status_code == 201
    entries = entries_for(access_log, "submit travel -> 201")
    assert len(entries) == 1
    assert entries[0]["level"].name == "INFO"
    assert "error=" not in entries[0]["message"]
    assert entries[0]["extra"]["principal"] == users["employee"].id


def test_blank_destination_logged_as_request_validation(client, users, headers_for, access_log):
    response = client.post(
        "/api/travel",
        json={
            "destination": "   ",
            "purpose": "Offsite",
            "start_date": "2099-01-10",
            "end_date": "2099-01-12",
            "estimated_cost": 100,
        },
        headers=headers_for(users["employee"])
    )

    assert response.status_code == 422
    entries = entries_for(access_log, "submit travel -> 422")
    assert len(entries) == 1
    assert "error=request_validation" in entries[0]["message"]
