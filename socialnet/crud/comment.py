"""CRUD operations for Comment."""

from typing import List, Optional, Tuple

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session, aliased

from socialnet.crud.base import CRUDBase
from socialnet.models.comment import Comment, comment_likers
from socialnet.models.post import ModerationStatus
from socialnet.schemas.comment import CommentCreate, CommentUpdate


class CRUDComment(CRUDBase[Comment, CommentCreate, CommentUpdate]):
    """CRUD operations for Comment."""

    def create_comment(
        self,
        db: Session,
        *,
        post_id: int,
        author_user_id: int,
        text: str,
        parent_comment_id: Optional[int] = None,
        images: Optional[List[str]] = None,
        videos: Optional[List[str]] = None,
    ) -> Comment:
        """Stage a new comment. The caller commits together with the post counter."""
        comment = Comment(
            post_id=post_id,
            author_user_id=author_user_id,
            text=text,
            parent_comment_id=parent_comment_id,
            images=list(images or []),
            videos=list(videos or []),
            like_count=0,
        )
        db.add(comment)
        return comment

    def get_by_post(
        self, db: Session, *, post_id: int, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Comment], int]:
        """Top-level comments for a post, newest first."""
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id, Comment.parent_comment_id.is_(None))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return self.paginate(db, stmt, skip=skip, limit=limit)

    def get_replies(
        self, db: Session, *, comment_id: int, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Comment], int]:
        stmt = (
            select(Comment)
            .where(Comment.parent_comment_id == comment_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return self.paginate(db, stmt, skip=skip, limit=limit)

    def get_reply_ids(self, db: Session, comment_id: int) -> List[int]:
        stmt = select(Comment.id).where(Comment.parent_comment_id == comment_id)
        return list(db.scalars(stmt).all())

    def count_by_post(self, db: Session, post_id: int, *, replies: bool) -> int:
        """Count visible top-level comments, or replies when ``replies`` is set."""
        thread = Comment.parent_comment_id.isnot(None) if replies else Comment.parent_comment_id.is_(None)
        return self.count(
            db,
            Comment.post_id == post_id,
            thread,
            Comment.moderation_status != ModerationStatus.REJECTED.value,
        )

    def get_popular(self, db: Session, *, post_id: int, limit: int = 10) -> List[Comment]:
        """Most liked comments of a post, then most replied to, then newest."""
        reply = aliased(Comment)
        reply_count = (
            select(func.count(reply.id))
            .where(reply.parent_comment_id == Comment.id)
            .correlate(Comment)
            .scalar_subquery()
        )
        stmt = (
            select(Comment)
            .where(
                Comment.post_id == post_id,
                Comment.moderation_status != ModerationStatus.REJECTED.value,
            )
            .order_by(
                Comment.like_count.desc(),
                reply_count.desc(),
                Comment.created_at.desc(),
                Comment.id.desc(),
            )
            .limit(limit)
        )
        return list(db.scalars(stmt).all())

    def get_ids_by_post(self, db: Session, post_id: int) -> List[int]:
        return list(db.scalars(select(Comment.id).where(Comment.post_id == post_id)).all())

    def get_by_author(self, db: Session, author_id: int) -> List[Comment]:
        return list(db.scalars(select(Comment).where(Comment.author_user_id == author_id)).all())

    # ----- Likers -----
    def is_liker(self, db: Session, *, comment_id: int, user_id: int) -> bool:
        stmt = select(func.count()).select_from(comment_likers).where(
            comment_likers.c.comment_id == comment_id, comment_likers.c.user_id == user_id
        )
        return (db.scalar(stmt) or 0) > 0

    def add_liker(self, db: Session, *, comment_id: int, user_id: int) -> None:
        db.execute(insert(comment_likers).values(comment_id=comment_id, user_id=user_id))

    def remove_liker(self, db: Session, *, comment_id: int, user_id: int) -> int:
        result = db.execute(delete(comment_likers).where(
            comment_likers.c.comment_id == comment_id, comment_likers.c.user_id == user_id
        ))
        return result.rowcount or 0


# Singleton instance
crud_comment = CRUDComment(Comment)
