"""
Expense Claim Schemas
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import date

from travel_expense.models.expense_claim import ExpenseCategory
from travel_expense.schemas.approval import ApprovalFields


class ExpenseClaimCreate(BaseModel):
    """Schema for submitting an expense claim"""
    travel_request_id: int
    amount: float = Field(..., ge=0)
    description: str = Field(..., min_length=1, max_length=1000)
    expense_date: date
    category: ExpenseCategory

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        """Reject whitespace-only descriptions"""
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        return value


class TravelRequestRef(BaseModel):
    """Travel request fields shown alongside a claim"""
    id: int
    destination: str
    purpose: str

    model_config = ConfigDict(from_attributes=True)


class ExpenseClaimResponse(ApprovalFields):
    """Schema for expense claim response"""
    travel_request_id: int
    travel_request: Optional[TravelRequestRef] = None
    amount: float
    description: str
    expense_date: date
    category: ExpenseCategory


class ExpenseClaimListResponse(BaseModel):
    """Paginated expense claims"""
    expense_claims: List[ExpenseClaimResponse]
    total: int
    total_pages: int
    current_page: int
