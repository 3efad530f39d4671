from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import relationship

from ..database import Base


class NotificationType(str, Enum):
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    MENTION = "mention"
    NEW_POST = "new_post"
    SYSTEM = "system"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)

    # Recipient & sender
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Null for admin-issued system notices
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)

    # Classification
    notification_type = Column(String(20), nullable=False, index=True)

    # Related entity
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=True, index=True)
    content = Column(Text)

    # Status
    is_read = Column(Boolean, default=False, index=True)
    read_at = Column(TIMESTAMP)

    created_at = Column(TIMESTAMP, default=datetime.utcnow, index=True)

    __table_args__ = (
        CheckConstraint(
            "notification_type IN ('like', 'comment', 'follow', 'mention', 'new_post', 'system')",
            name="check_notification_type",
        ),
        Index("ix_notifications_recipient_unread", "recipient_id", "is_read", "created_at"),
    )

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id])
    recipient = relationship("User", foreign_keys=[recipient_id])
