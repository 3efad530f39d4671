"""Comment model for post comments and threaded replies."""

from datetime import datetime

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
    Text,
    TIMESTAMP,
)
from sqlalchemy.orm import relationship

from ..database import Base
from .post import ModerationStatus

MAX_COMMENT_TEXT_LENGTH = 2000


comment_likers = Table(
    "comment_likers",
    Base.metadata,
    Column("comment_id", Integer, ForeignKey("comments.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Comment(Base):
    """Model untuk komentar pada postingan."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    post_id = Column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Weak pointer without a foreign key: replies may outlive their parent
    # depending on the configured comment delete policy
    parent_comment_id = Column(Integer, nullable=True, index=True)

    # Content
    text = Column(Text, nullable=False)
    images = Column(JSON, nullable=False, default=list)
    videos = Column(JSON, nullable=False, default=list)

    # Metadata
    like_count = Column(Integer, default=0)
    moderation_status = Column(String(20), nullable=False, default=ModerationStatus.APPROVED.value, index=True)
    is_edited = Column(Boolean, default=False)

    # Timestamps
    created_at = Column(TIMESTAMP, default=datetime.utcnow, index=True)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "moderation_status IN ('pending', 'approved', 'rejected', 'flagged')",
            name="check_comment_moderation_status",
        ),
        Index("idx_comment_post", "post_id", "created_at"),
        Index("idx_comment_author", "author_user_id", "created_at"),
    )

    # Relationships
    post = relationship("Post", back_populates="comments")
    author = relationship("User", foreign_keys=[author_user_id])
    likers = relationship("User", secondary=comment_likers)

    @property
    def is_reply(self) -> bool:
        return self.parent_comment_id is not None
