"""Story model: 24h ephemeral image or video."""

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, Table, TIMESTAMP
from sqlalchemy.orm import relationship

from ..database import Base


class StoryContentType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


story_views = Table(
    "story_views",
    Base.metadata,
    Column("story_id", Integer, ForeignKey("stories.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("viewed_at", TIMESTAMP, default=datetime.utcnow),
)


class Story(Base):
    __tablename__ = "stories"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content_type = Column(String(10), nullable=False)
    media_url = Column(String(500), nullable=False)

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    expires_at = Column(TIMESTAMP, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("content_type IN ('image', 'video')", name="check_story_content_type"),
    )

    user = relationship("User", back_populates="stories")
    viewers = relationship("User", secondary=story_views)

    @property
    def view_count(self) -> int:
        return len(self.viewers)

    def is_expired(self, now: datetime = None) -> bool:
        return (now or datetime.utcnow()) > self.expires_at
