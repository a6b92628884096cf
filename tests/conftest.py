"""
Shared test fixtures
Test database, users for every role, tokens and request factories
"""

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables before the app reads its settings
os.environ['DATABASE_URL'] = 'sqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-travel-expense'
os.environ['SMTP_USERNAME'] = ''
os.environ['SMTP_PASSWORD'] = ''
os.environ['NOTIFICATION_RETRY_DELAY_SECONDS'] = '0'

import pytest
from datetime import date, timedelta
from fastapi.testclient import TestClient

from travel_expense.main import app
from travel_expense.config.database import Base, SessionLocal, engine
from travel_expense.models.approvable import ApprovalStatus
from travel_expense.models.expense_claim import ExpenseClaim, ExpenseCategory
from travel_expense.models.travel_request import TravelRequest, TravelPriority
from travel_expense.models.user import User, UserRole
from travel_expense.utils.security import create_access_token


@pytest.fixture(scope="function")
def test_db():
    """Create test database"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(test_db):
    """Session for arranging and inspecting test data"""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_db):
    return TestClient(app)


def _add_user(db, email, first_name, last_name, role, manager=None, is_active=True):
    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        department="Operations",
        manager_id=manager.id if manager else None,
        is_active=is_active
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def users(db):
    """
    One user per role plus the edge cases:
    second admin, a second manager with no reports,
    an employee assigned to ``manager`` and an inactive admin
    """
    admin = _add_user(db, "admin@acme-corp.com", "Ada", "Admin", UserRole.ADMIN)
    admin2 = _add_user(db, "admin2@acme-corp.com", "Alan", "Second", UserRole.ADMIN)
    manager = _add_user(db, "manager@acme-corp.com", "Maria", "Lopez", UserRole.MANAGER)
    manager2 = _add_user(db, "manager2@acme-corp.com", "Mo", "Khan", UserRole.MANAGER)
    employee = _add_user(db, "employee@acme-corp.com", "Sam", "Patel", UserRole.EMPLOYEE, manager=manager)
    inactive_admin = _add_user(
        db, "former.admin@acme-corp.com", "Ivy", "Gone", UserRole.ADMIN, is_active=False
    )
    return {
        "admin": admin,
        "admin2": admin2,
        "manager": manager,
        "manager2": manager2,
        "employee": employee,
        "inactive_admin": inactive_admin,
    }


def token_for(user) -> str:
    return create_access_token({"sub": str(user.id)})


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture
def make_travel_request(db):
    """Insert a travel request directly, in any approval state"""

    def _make(employee, status=ApprovalStatus.PENDING, manager_status=None, admin_status=ApprovalStatus.PENDING,
              start_date=None, end_date=None, destination="Berlin"):
        start_date = start_date or date.today() + timedelta(days=5)
        end_date = end_date or start_date + timedelta(days=3)
        travel_request = TravelRequest(
            employee_id=employee.id,
            destination=destination,
            purpose="Client workshop",
            start_date=start_date,
            end_date=end_date,
            estimated_cost=1500.0,
            priority=TravelPriority.HIGH,
            status=status,
            manager_status=manager_status or status,
            admin_status=admin_status,
        )
        db.add(travel_request)
        db.commit()
        db.refresh(travel_request)
        return travel_request

    return _make


@pytest.fixture
def make_expense_claim(db):
    """Insert a pending expense claim against the given travel request"""

    def _make(travel_request, amount=240.5):
        expense_claim = ExpenseClaim(
            employee_id=travel_request.employee_id,
            travel_request_id=travel_request.id,
            amount=amount,
            description="Hotel, two nights",
            expense_date=travel_request.start_date,
            category=ExpenseCategory.ACCOMMODATION,
        )
        db.add(expense_claim)
        db.commit()
        db.refresh(expense_claim)
        return expense_claim

    return _make


@pytest.fixture
def headers_for():
    """Authorization headers for a user"""
    return auth_headers
