"""
Application Tests
Health and root endpoints, settings and schema configuration
"""

import pytest

from travel_expense.config.settings import Settings
from travel_expense.schemas.expense import ExpenseClaimResponse, TravelRequestRef
from travel_expense.schemas.notification import NotificationResponse
from travel_expense.schemas.travel import TravelRequestResponse
from travel_expense.schemas.user import UserSummary


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["health"] == "/health"


@pytest.mark.parametrize("schema", [
    UserSummary,
    TravelRequestRef,
    TravelRequestResponse,
    ExpenseClaimResponse,
    NotificationResponse,
])
def test_response_schemas_read_orm_attributes(schema):
    assert schema.model_config["from_attributes"] is True


def test_settings_read_env_file_case_sensitively():
    assert Settings.model_config["env_file"] == ".env"
    assert Settings.model_config["case_sensitive"] is True
