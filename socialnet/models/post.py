"""Post model for the social feed."""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TIMESTAMP,
)
from sqlalchemy.orm import relationship

from ..database import Base


class ModerationStatus(str, Enum):
    """Review outcome shared by posts and comments."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"


MAX_POST_TEXT_LENGTH = 500
MAX_POST_IMAGES = 5
MAX_POST_VIDEOS = 2


# Users currently liking a post (the post's "likes" list)
post_likers = Table(
    "post_likers",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
)

# Users who bookmarked a post
post_saves = Table(
    "post_saves",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("created_at", TIMESTAMP, default=datetime.utcnow),
)


class Post(Base):
    """Model untuk postingan pengguna."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    author_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Post Content
    text = Column(String(MAX_POST_TEXT_LENGTH), nullable=True)
    images = Column(JSON, nullable=False, default=list)
    videos = Column(JSON, nullable=False, default=list)
    mentions = Column(JSON, nullable=False, default=list)
    # Set on shares: the post being re-published
    shared_post_id = Column(Integer, ForeignKey("posts.id", ondelete="SET NULL"), nullable=True, index=True)

    # Metadata
    like_count = Column(Integer, default=0, index=True)  # Denormalized
    comment_count = Column(Integer, default=0, index=True)  # Denormalized
    save_count = Column(Integer, default=0)  # Denormalized
    share_count = Column(Integer, default=0)  # Denormalized
    moderation_status = Column(String(20), nullable=False, default=ModerationStatus.APPROVED.value, index=True)
    is_edited = Column(Boolean, default=False)

    # Timestamps
    created_at = Column(TIMESTAMP, default=datetime.utcnow, index=True)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "moderation_status IN ('pending', 'approved', 'rejected', 'flagged')",
            name="check_post_moderation_status",
        ),
        Index("idx_post_author_created", "author_user_id", "created_at"),
        Index("idx_post_popularity", "like_count", "comment_count", "created_at"),
    )

    # Relationships
    author = relationship("User", back_populates="posts")
    likers = relationship("User", secondary=post_likers)
    comments = relationship(
        "Comment",
        back_populates="post",
        order_by="Comment.created_at.asc()",
    )

    @property
    def liker_ids(self):
        return [user.id for user in self.likers]

    @property
    def is_share(self) -> bool:
        return self.shared_post_id is not None

    @property
    def media_urls(self):
        return list(self.images or []) + list(self.videos or [])
