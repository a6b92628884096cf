"""
Notification Schemas
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from travel_expense.models.notification import NotificationType, RelatedKind


class NotificationResponse(BaseModel):
    """Schema for a notification, also used as the real-time push payload"""
    id: int
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool
    related_id: Optional[int] = None
    related_kind: Optional[RelatedKind] = None
    created_at: datetime
    read_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
