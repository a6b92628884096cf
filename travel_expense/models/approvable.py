"""
Approvable Model Mixin
Dual-tier (manager + admin) approval sub-model shared by travel requests
and expense claims
"""

from sqlalchemy import Column, Integer, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import declared_attr, relationship
from datetime import datetime
import enum


class ApprovalStatus(str, enum.Enum):
    """Approval status, used for both tiers and the aggregate status"""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class RequestKind(str, enum.Enum):
    """Kinds of approvable requests"""
    TRAVEL = "travel"
    EXPENSE = "expense"

    @property
    def model_name(self) -> str:
        """Name used for polymorphic notification back-references"""
        return "TravelRequest" if self is RequestKind.TRAVEL else "ExpenseClaim"

    @property
    def label(self) -> str:
        return "Travel Request" if self is RequestKind.TRAVEL else "Expense Claim"


def derive_status(manager_status: ApprovalStatus, admin_status: ApprovalStatus) -> ApprovalStatus:
    """
    Compute the aggregate status from the two tiers

    The admin decision always wins; until the admin acts, the manager's
    decision is provisionally authoritative.

    Args:
        manager_status: Manager tier status
        admin_status: Admin tier status

    Returns:
        ApprovalStatus: Aggregate status
    """
    if admin_status != ApprovalStatus.PENDING:
        return admin_status
    return manager_status


class ApprovableMixin:
    """Columns and helpers of the dual-tier approval sub-model"""

    # Aggregate status (never set independently of the two tiers)
    status = Column(Enum(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False, index=True)

    # Manager tier
    manager_status = Column(Enum(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False)
    manager_comments = Column(Text, nullable=True)
    manager_reviewed_at = Column(DateTime, nullable=True)

    # Admin tier
    admin_status = Column(Enum(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False)
    admin_comments = Column(Text, nullable=True)
    admin_reviewed_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @declared_attr
    def employee_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    @declared_attr
    def manager_reviewer_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=True)

    @declared_attr
    def admin_reviewer_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=True)

    @declared_attr
    def employee(cls):
        return relationship("User", foreign_keys=f"{cls.__name__}.employee_id")

    @declared_attr
    def manager_reviewer(cls):
        return relationship("User", foreign_keys=f"{cls.__name__}.manager_reviewer_id")

    @declared_attr
    def admin_reviewer(cls):
        return relationship("User", foreign_keys=f"{cls.__name__}.admin_reviewer_id")

    @property
    def is_finalized(self) -> bool:
        """An admin decision is terminal"""
        return self.admin_status in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED)
