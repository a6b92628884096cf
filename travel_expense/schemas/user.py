"""
User Schemas
Pydantic models for user summaries embedded in responses
"""

from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional

from travel_expense.models.user import UserRole


class UserSummary(BaseModel):
    """Compact user representation"""
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    role: UserRole
    department: Optional[str] = None
    manager_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
