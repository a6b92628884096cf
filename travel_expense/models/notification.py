"""
Notification Model
Represents in-app notifications created by the notification fan-out
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from travel_expense.config.database import Base


class NotificationType(str, enum.Enum):
    """Notification types (consumers key icons and colors off this exact set)"""
    EXPENSE_SUBMITTED = "expense_submitted"
    EXPENSE_APPROVED = "expense_approved"
    EXPENSE_REJECTED = "expense_rejected"
    TRAVEL_SUBMITTED = "travel_submitted"
    TRAVEL_APPROVED = "travel_approved"
    TRAVEL_REJECTED = "travel_rejected"
    GENERAL = "general"
    USER_PENDING_APPROVAL = "user_pending_approval"

    @classmethod
    def for_event(cls, kind: str, event: str) -> "NotificationType":
        """
        Resolve the type for a request kind and event

        Args:
            kind: Request kind value ("travel" or "expense")
            event: "submitted", "approved" or "rejected"
        """
        return cls(f"{kind}_{event}")


class RelatedKind(str, enum.Enum):
    """Entities a notification may point back to"""
    TRAVEL_REQUEST = "TravelRequest"
    EXPENSE_CLAIM = "ExpenseClaim"
    USER = "User"


class Notification(Base):
    """Notification model"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)

    # Recipient
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Notification details
    type = Column(Enum(NotificationType), nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)

    # Polymorphic back-reference
    related_id = Column(Integer, nullable=True)
    related_kind = Column(Enum(RelatedKind), nullable=True)

    # Status
    is_read = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    read_at = Column(DateTime, nullable=True)

    # Relationships
    recipient = relationship("User", back_populates="notifications")

    def __repr__(self):
        return f"<Notification {self.type.value} - User {self.recipient_id}>"
