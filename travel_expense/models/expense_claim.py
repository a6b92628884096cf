"""
Expense Claim Model
Represents expense claims filed against an approved travel request
"""

from sqlalchemy import Column, Integer, Float, Date, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship
import enum

from travel_expense.config.database import Base
from travel_expense.models.approvable import ApprovableMixin, RequestKind


class ExpenseCategory(str, enum.Enum):
    """Expense categories"""
    TRANSPORTATION = "Transportation"
    ACCOMMODATION = "Accommodation"
    MEALS = "Meals"
    MISCELLANEOUS = "Miscellaneous"


class ExpenseClaim(ApprovableMixin, Base):
    """Expense claim model"""
    __tablename__ = "expense_claims"

    kind = RequestKind.EXPENSE

    id = Column(Integer, primary_key=True, index=True)

    travel_request_id = Column(Integer, ForeignKey("travel_requests.id"), nullable=False, index=True)

    # Expense details
    amount = Column(Float, nullable=False)
    description = Column(Text, nullable=False)
    expense_date = Column(Date, nullable=False)
    category = Column(Enum(ExpenseCategory), nullable=False)

    # Relationships
    travel_request = relationship("TravelRequest")

    def __repr__(self):
        return f"<ExpenseClaim {self.id} - {self.category.value} - {self.status.value}>"
