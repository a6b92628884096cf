"""
Approval Schemas
Pydantic models for the review workflow
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from enum import Enum

from travel_expense.models.approvable import ApprovalStatus
from travel_expense.schemas.user import UserSummary


class ReviewDecision(str, Enum):
    """Decisions a reviewer may record"""
    APPROVED = "Approved"
    REJECTED = "Rejected"

    def to_status(self) -> ApprovalStatus:
        return ApprovalStatus(self.value)


class ReviewCreate(BaseModel):
    """Schema for approving or rejecting a request"""
    status: ReviewDecision
    review_comments: Optional[str] = Field(None, max_length=1000)


class ApprovalFields(BaseModel):
    """Dual-tier approval fields shared by both request responses"""
    id: int
    employee_id: int
    employee: Optional[UserSummary] = None

    status: ApprovalStatus

    manager_status: ApprovalStatus
    manager_reviewer_id: Optional[int] = None
    manager_comments: Optional[str] = None
    manager_reviewed_at: Optional[datetime] = None

    admin_status: ApprovalStatus
    admin_reviewer_id: Optional[int] = None
    admin_comments: Optional[str] = None
    admin_reviewed_at: Optional[datetime] = None

    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
