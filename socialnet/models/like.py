"""Like model: one toggle-state record per (user, post)."""

from datetime import datetime

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, TIMESTAMP, UniqueConstraint

from ..database import Base


class Like(Base):
    """Append-once like record. ``is_liked`` flips instead of the row being deleted."""

    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)

    is_liked = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        # Satu user hanya punya satu record like per post
        UniqueConstraint("user_id", "post_id", name="uq_like_user_post"),
        Index("idx_like_post", "post_id", "is_liked"),
    )
