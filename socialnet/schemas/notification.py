"""Pydantic schemas for `Notification` domain objects."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from socialnet.schemas.user import UserSummary


class NotificationResponse(BaseModel):
    id: int
    recipient_id: int
    sender_id: Optional[int] = None
    sender: Optional[UserSummary] = None
    notification_type: str
    post_id: Optional[int] = None
    content: Optional[str] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    total: int
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated_count: int


class SystemNotificationCreate(BaseModel):
    """Admin-triggered system notice."""
    recipient_ids: List[int] = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=1000)
