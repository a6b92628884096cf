"""
Travel Request Schemas
"""

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing import List
from datetime import date

from travel_expense.models.travel_request import TravelPriority
from travel_expense.schemas.approval import ApprovalFields


class TravelRequestCreate(BaseModel):
    """Schema for submitting a travel request"""
    destination: str = Field(..., min_length=1, max_length=200)
    purpose: str = Field(..., min_length=1, max_length=1000)
    start_date: date
    end_date: date
    estimated_cost: float = Field(..., ge=0)
    priority: TravelPriority = TravelPriority.MEDIUM

    @field_validator("destination", "purpose")
    @classmethod
    def strip_required_text(cls, value: str, info: ValidationInfo) -> str:
        """Reject whitespace-only destination and purpose"""
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return value


class TravelRequestResponse(ApprovalFields):
    """Schema for travel request response"""
    destination: str
    purpose: str
    start_date: date
    end_date: date
    estimated_cost: float
    priority: TravelPriority


class TravelRequestListResponse(BaseModel):
    """Paginated travel requests"""
    travel_requests: List[TravelRequestResponse]
    total: int
    total_pages: int
    current_page: int
