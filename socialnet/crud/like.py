"""CRUD operations for Like toggle records."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from socialnet.crud.base import CRUDBase
from socialnet.models.like import Like


class CRUDLike(CRUDBase[Like, dict, dict]):
    """CRUD operations for Like."""

    def get_like(self, db: Session, *, user_id: int, post_id: int) -> Optional[Like]:
        """Get like record if exists."""
        stmt = select(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        return db.scalars(stmt).first()

    def get_by_post(self, db: Session, *, post_id: int, liked_only: bool = True) -> List[Like]:
        stmt = select(Like).where(Like.post_id == post_id)
        if liked_only:
            stmt = stmt.where(Like.is_liked == True)
        return list(db.scalars(stmt.order_by(Like.created_at)).all())

    def has_user_liked(self, db: Session, *, user_id: int, post_id: int) -> bool:
        like = self.get_like(db, user_id=user_id, post_id=post_id)
        return bool(like and like.is_liked)


# Singleton instance
crud_like = CRUDLike(Like)
