"""CRUD operations for `User` model and the follow/block graph."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Set, Tuple

from sqlalchemy import delete, desc, func, insert, or_, select
from sqlalchemy.orm import Session

from socialnet.core.security import get_password_hash, verify_password
from socialnet.crud.base import CRUDBase
from socialnet.models.post import Post
from socialnet.models.user import User, user_blocks, user_follows
from socialnet.schemas.user import UserCreate, UserUpdate


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    def get_by_username(self, db: Session, username: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.username) == username.lower()).limit(1)
        return db.scalars(stmt).first()

    def get_by_email(self, db: Session, email: Optional[str]) -> Optional[User]:
        if not email:
            return None
        stmt = select(User).where(func.lower(User.email) == email.lower()).limit(1)
        return db.scalars(stmt).first()

    def get_by_phone(self, db: Session, phone: Optional[str]) -> Optional[User]:
        if not phone:
            return None
        stmt = select(User).where(User.phone_number == phone).limit(1)
        return db.scalars(stmt).first()

    def get_by_identifier(self, db: Session, identifier: str) -> Optional[User]:
        """Username or email lookup used by login."""
        if "@" in identifier:
            return self.get_by_email(db, identifier)
        return self.get_by_username(db, identifier)

    def create_user(self, db: Session, *, user_in: UserCreate) -> User:
        user_data = user_in.model_dump(exclude_unset=True)
        raw_password = user_data.pop("password")
        user_data["password_hash"] = get_password_hash(raw_password)
        user_data["email"] = user_data["email"].lower()

        db_obj = User(**user_data)
        try:
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        except Exception:
            db.rollback()
            raise
        return db_obj

    def authenticate(self, db: Session, *, identifier: str, password: str) -> Optional[User]:
        user = self.get_by_identifier(db, identifier)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def search(self, db: Session, *, query: str, exclude_id: Optional[int] = None,
               skip: int = 0, limit: int = 25) -> Tuple[List[User], int]:
        needle = query.lower()
        stmt = select(User).where(or_(
            func.lower(User.username).contains(needle, autoescape=True),
            func.lower(User.full_name).contains(needle, autoescape=True),
        ))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id, User.is_active == True)
        stmt = stmt.order_by(User.username)
        return self.paginate(db, stmt, skip=skip, limit=limit)

    # ----- Social graph -----
    def get_following_ids(self, db: Session, user_id: int) -> Set[int]:
        stmt = select(user_follows.c.followed_id).where(user_follows.c.follower_id == user_id)
        return set(db.scalars(stmt).all())

    def get_follower_ids(self, db: Session, user_id: int) -> Set[int]:
        stmt = select(user_follows.c.follower_id).where(user_follows.c.followed_id == user_id)
        return set(db.scalars(stmt).all())

    def is_following(self, db: Session, *, follower_id: int, followed_id: int) -> bool:
        stmt = select(func.count()).select_from(user_follows).where(
            user_follows.c.follower_id == follower_id,
            user_follows.c.followed_id == followed_id,
        )
        return (db.scalar(stmt) or 0) > 0

    def add_follow(self, db: Session, *, follower_id: int, followed_id: int) -> None:
        db.execute(insert(user_follows).values(
            follower_id=follower_id, followed_id=followed_id, created_at=datetime.utcnow()
        ))

    def remove_follow(self, db: Session, *, follower_id: int, followed_id: int) -> int:
        result = db.execute(delete(user_follows).where(
            user_follows.c.follower_id == follower_id,
            user_follows.c.followed_id == followed_id,
        ))
        return result.rowcount or 0

    def count_followers(self, db: Session, user_id: int) -> int:
        stmt = select(func.count()).select_from(user_follows).where(user_follows.c.followed_id == user_id)
        return db.scalar(stmt) or 0

    def count_following(self, db: Session, user_id: int) -> int:
        stmt = select(func.count()).select_from(user_follows).where(user_follows.c.follower_id == user_id)
        return db.scalar(stmt) or 0

    def get_blocked_ids(self, db: Session, user_id: int) -> Set[int]:
        """Ids blocked by the user plus ids that blocked the user."""
        stmt = select(user_blocks.c.blocked_id).where(user_blocks.c.blocker_id == user_id).union(
            select(user_blocks.c.blocker_id).where(user_blocks.c.blocked_id == user_id)
        )
        return set(db.scalars(stmt).all())

    def has_blocked(self, db: Session, *, blocker_id: int, blocked_id: int) -> bool:
        stmt = select(func.count()).select_from(user_blocks).where(
            user_blocks.c.blocker_id == blocker_id,
            user_blocks.c.blocked_id == blocked_id,
        )
        return (db.scalar(stmt) or 0) > 0

    def add_block(self, db: Session, *, blocker_id: int, blocked_id: int) -> None:
        db.execute(insert(user_blocks).values(
            blocker_id=blocker_id, blocked_id=blocked_id, created_at=datetime.utcnow()
        ))

    def remove_block(self, db: Session, *, blocker_id: int, blocked_id: int) -> int:
        result = db.execute(delete(user_blocks).where(
            user_blocks.c.blocker_id == blocker_id,
            user_blocks.c.blocked_id == blocked_id,
        ))
        return result.rowcount or 0

    def get_suggested(self, db: Session, *, user_id: int, limit: int = 10) -> List[User]:
        """Users not yet followed, ranked by followers in common with the user's
        followees, then by follower count."""
        following = self.get_following_ids(db, user_id)
        excluded = following | self.get_blocked_ids(db, user_id) | {user_id}

        follower_count = (
            select(user_follows.c.followed_id.label("uid"), func.count().label("cnt"))
            .group_by(user_follows.c.followed_id)
            .subquery()
        )
        common = (
            select(user_follows.c.followed_id.label("uid"), func.count().label("cnt"))
            .where(user_follows.c.follower_id.in_(list(following)))
            .group_by(user_follows.c.followed_id)
            .subquery()
        )
        stmt = (
            select(User)
            .outerjoin(common, common.c.uid == User.id)
            .outerjoin(follower_count, follower_count.c.uid == User.id)
            .where(User.id.notin_(list(excluded)), User.is_active == True)
            .order_by(
                desc(func.coalesce(common.c.cnt, 0)),
                desc(func.coalesce(follower_count.c.cnt, 0)),
                User.id,
            )
            .limit(limit)
        )
        return list(db.scalars(stmt).all())

    def count_posts(self, db: Session, user_id: int) -> int:
        return db.scalar(select(func.count(Post.id)).where(Post.author_user_id == user_id)) or 0


# Singleton instance
crud_user = CRUDUser(User)
