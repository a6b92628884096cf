"""
Database Setup Script
Creates all tables and seeds an admin, a manager and an employee reporting to that manager
"""

import sys
from pathlib import Path
from datetime import timedelta

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from travel_expense.config.database import Base, SessionLocal, engine
from travel_expense.models.user import User, UserRole
from travel_expense.models import audit_log, expense_claim, notification, travel_request  # noqa: F401
from travel_expense.utils.security import create_access_token


SEED_USERS = [
    {
        "email": "admin@acme-corp.com",
        "first_name": "System",
        "last_name": "Administrator",
        "role": UserRole.ADMIN,
        "department": "Finance",
    },
    {
        "email": "manager@acme-corp.com",
        "first_name": "Maria",
        "last_name": "Lopez",
        "role": UserRole.MANAGER,
        "department": "Operations",
    },
    {
        "email": "employee@acme-corp.com",
        "first_name": "Sam",
        "last_name": "Patel",
        "role": UserRole.EMPLOYEE,
        "department": "Operations",
        "reports_to": "manager@acme-corp.com",
    },
]


def create_tables():
    """Create all database tables"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✓ Database tables created successfully")


def create_initial_users():
    """Create the seed users, skipping any that already exist"""
    print("\nCreating initial users...")
    db = SessionLocal()

    try:
        by_email = {}
        for data in SEED_USERS:
            data = dict(data)
            reports_to = data.pop("reports_to", None)

            user = db.query(User).filter(User.email == data["email"]).first()
            if user:
                print(f"✓ {user.email} already exists, skipping...")
            else:
                user = User(**data, is_active=True)
                if reports_to:
                    user.manager_id = by_email[reports_to].id
                db.add(user)
                db.commit()
                db.refresh(user)
                print(f"✓ Created {user.role.value}: {user.email}")

            by_email[user.email] = user

        print("\nDevelopment tokens (valid 7 days):")
        for user in by_email.values():
            token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(days=7))
            print(f"  {user.role.value:<9} {user.email}\n    {token}")

    except Exception as e:
        db.rollback()
        print(f"✗ Error creating users: {str(e)}")
        raise
    finally:
        db.close()


def main():
    """Main setup function"""
    print("=" * 60)
    print("Travel & Expense Approval System - Database Setup")
    print("=" * 60)

    create_tables()
    create_initial_users()

    print("\n" + "=" * 60)
    print("✓ Database setup completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
