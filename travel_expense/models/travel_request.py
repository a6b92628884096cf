"""
Travel Request Model
Represents travel requests submitted by employees and managers
"""

from sqlalchemy import Column, Integer, String, Float, Date, Enum, Text
import enum

from travel_expense.config.database import Base
from travel_expense.models.approvable import ApprovableMixin, RequestKind


class TravelPriority(str, enum.Enum):
    """Travel request priority"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TravelRequest(ApprovableMixin, Base):
    """Travel request model"""
    __tablename__ = "travel_requests"

    kind = RequestKind.TRAVEL

    id = Column(Integer, primary_key=True, index=True)

    # Trip details
    destination = Column(String, nullable=False)
    purpose = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    estimated_cost = Column(Float, nullable=False)
    priority = Column(Enum(TravelPriority), default=TravelPriority.MEDIUM, nullable=False)

    def __repr__(self):
        return f"<TravelRequest {self.id} - {self.destination} - {self.status.value}>"
