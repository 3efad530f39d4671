from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    TIMESTAMP,
)
from sqlalchemy.orm import relationship

from ..database import Base


PRIVACY_LEVELS = ("public", "friends", "private")
_PRIVACY_SQL = ", ".join(f"'{level}'" for level in PRIVACY_LEVELS)


# Directed follow edge: follower -> followed
user_follows = Table(
    "user_follows",
    Base.metadata,
    Column("follower_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("followed_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("created_at", TIMESTAMP, default=datetime.utcnow),
    CheckConstraint("follower_id != followed_id", name="check_no_self_follow"),
)

# Directed block edge: blocker -> blocked
user_blocks = Table(
    "user_blocks",
    Base.metadata,
    Column("blocker_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("blocked_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("created_at", TIMESTAMP, default=datetime.utcnow),
    CheckConstraint("blocker_id != blocked_id", name="check_no_self_block"),
)


class User(Base):
    __tablename__ = "users"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Authentication & Contact
    username = Column(String(30), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(20), unique=True, nullable=True, index=True)
    password_hash = Column(String(255), nullable=False)

    # Profile
    full_name = Column(String(255))
    bio = Column(Text)
    profile_picture_url = Column(String(500))

    # Push notifications
    fcm_token = Column(String(500))
    fcm_token_updated_at = Column(TIMESTAMP)

    # Privacy (who may see the profile, the posts and the follow lists)
    privacy_profile = Column(String(10), nullable=False, default="public")
    privacy_posts = Column(String(10), nullable=False, default="public")
    privacy_friends_list = Column(String(10), nullable=False, default="public")

    # Account Status
    is_active = Column(Boolean, default=True, index=True)
    suspended_until = Column(TIMESTAMP, nullable=True)
    deactivation_reason = Column(String(500))
    last_login_at = Column(TIMESTAMP)

    # Timestamps
    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = tuple(
        CheckConstraint(f"{column} IN ({_PRIVACY_SQL})", name=f"check_{column}")
        for column in ("privacy_profile", "privacy_posts", "privacy_friends_list")
    )

    # Social graph
    following = relationship(
        "User",
        secondary=user_follows,
        primaryjoin=lambda: User.id == user_follows.c.follower_id,
        secondaryjoin=lambda: User.id == user_follows.c.followed_id,
        backref="followers",
    )
    blocked_users = relationship(
        "User",
        secondary=user_blocks,
        primaryjoin=lambda: User.id == user_blocks.c.blocker_id,
        secondaryjoin=lambda: User.id == user_blocks.c.blocked_id,
        backref="blocked_by",
    )

    # Owned content (weak back-references, looked up through the owner column)
    posts = relationship("Post", back_populates="author", order_by="Post.created_at.desc()")
    stories = relationship("Story", back_populates="user", order_by="Story.created_at.desc()")

    @property
    def is_suspended(self) -> bool:
        return self.suspended_until is not None and self.suspended_until > datetime.utcnow()
