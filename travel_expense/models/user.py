"""
User Model
Represents the principals supplied by the identity provider
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from travel_expense.config.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    EMPLOYEE = "Employee"
    MANAGER = "Manager"
    ADMIN = "Admin"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)

    # Role and reporting line
    role = Column(Enum(UserRole), default=UserRole.EMPLOYEE, nullable=False)
    department = Column(String, default="General", nullable=False)
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    manager = relationship("User", remote_side=[id], foreign_keys=[manager_id])
    notifications = relationship("Notification", back_populates="recipient")
    audit_logs = relationship("AuditLog", back_populates="user")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def can_submit_requests(self) -> bool:
        """Employees and managers submit travel requests and expense claims"""
        return self.is_active and self.role in (UserRole.EMPLOYEE, UserRole.MANAGER)

    def manages(self, other: "User") -> bool:
        """Check the live manager assignment of another user"""
        return other.manager_id is not None and other.manager_id == self.id
