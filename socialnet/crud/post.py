"""CRUD operations for Post."""

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import delete, desc, func, insert, select
from sqlalchemy.orm import Session

from socialnet.crud.base import CRUDBase
from socialnet.models.post import ModerationStatus, Post, post_likers, post_saves
from socialnet.schemas.post import PostCreate, PostUpdate


class CRUDPost(CRUDBase[Post, PostCreate, PostUpdate]):
    """CRUD operations for Post."""

    def create_post(
        self,
        db: Session,
        *,
        author_user_id: int,
        text: Optional[str],
        images: List[str],
        videos: List[str],
        mentions: Optional[List[int]] = None,
    ) -> Post:
        """Create a new post."""
        post = Post(
            author_user_id=author_user_id,
            text=text,
            images=list(images),
            videos=list(videos),
            mentions=list(mentions or []),
            like_count=0,
            comment_count=0,
        )
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    def get_many(self, db: Session, ids: Iterable[int]) -> List[Post]:
        ids = list(ids)
        if not ids:
            return []
        return list(db.scalars(select(Post).where(Post.id.in_(ids))).all())

    def _visible(self, stmt):
        return stmt.where(Post.moderation_status != ModerationStatus.REJECTED.value)

    def get_by_author(
        self, db: Session, *, author_id: int, skip: int = 0, limit: int = 50
    ) -> Tuple[List[Post], int]:
        stmt = self._visible(
            select(Post).where(Post.author_user_id == author_id)
        ).order_by(desc(Post.created_at), desc(Post.id))
        return self.paginate(db, stmt, skip=skip, limit=limit)

    def get_by_authors(
        self, db: Session, *, author_ids: Iterable[int], skip: int = 0, limit: int = 20
    ) -> Tuple[List[Post], int]:
        stmt = self._visible(
            select(Post).where(Post.author_user_id.in_(list(author_ids)))
        ).order_by(desc(Post.created_at), desc(Post.id))
        return self.paginate(db, stmt, skip=skip, limit=limit)

    def get_ids_by_author(self, db: Session, author_id: int) -> List[int]:
        return list(db.scalars(select(Post.id).where(Post.author_user_id == author_id)).all())

    def get_recent_by_authors(self, db: Session, *, author_ids: Iterable[int], limit: int) -> List[Post]:
        """Newest visible posts written by any of ``author_ids``."""
        author_ids = list(author_ids)
        if not author_ids or limit <= 0:
            return []
        stmt = (
            self._visible(select(Post).where(Post.author_user_id.in_(author_ids)))
            .order_by(desc(Post.created_at), desc(Post.id))
            .limit(limit)
        )
        return list(db.scalars(stmt).all())

    def get_ids_not_by_authors(self, db: Session, *, author_ids: Iterable[int]) -> List[int]:
        """Ids of visible posts written by anyone outside ``author_ids``."""
        stmt = self._visible(select(Post.id).where(Post.author_user_id.notin_(list(author_ids))))
        return list(db.scalars(stmt).all())

    def get_popular(self, db: Session, *, limit: int = 10) -> List[Post]:
        stmt = (
            self._visible(select(Post))
            .order_by(desc(Post.like_count), desc(Post.comment_count), desc(Post.created_at))
            .limit(limit)
        )
        return list(db.scalars(stmt).all())

    def search(self, db: Session, *, query: str, skip: int = 0, limit: int = 20) -> Tuple[List[Post], int]:
        stmt = (
            self._visible(select(Post).where(func.lower(Post.text).contains(query.lower(), autoescape=True)))
            .order_by(desc(Post.created_at), desc(Post.id))
        )
        return self.paginate(db, stmt, skip=skip, limit=limit)

    def get_all(
        self, db: Session, *, moderation_status: Optional[str] = None, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Post], int]:
        """All posts including rejected ones (admin listing), optionally one status only."""
        stmt = select(Post)
        if moderation_status:
            stmt = stmt.where(Post.moderation_status == moderation_status)
        stmt = stmt.order_by(desc(Post.created_at), desc(Post.id))
        return self.paginate(db, stmt, skip=skip, limit=limit)

    # ----- Likers -----
    def is_liker(self, db: Session, *, post_id: int, user_id: int) -> bool:
        stmt = select(func.count()).select_from(post_likers).where(
            post_likers.c.post_id == post_id, post_likers.c.user_id == user_id
        )
        return (db.scalar(stmt) or 0) > 0

    def add_liker(self, db: Session, *, post_id: int, user_id: int) -> None:
        if not self.is_liker(db, post_id=post_id, user_id=user_id):
            db.execute(insert(post_likers).values(post_id=post_id, user_id=user_id))

    def remove_liker(self, db: Session, *, post_id: int, user_id: int) -> int:
        result = db.execute(delete(post_likers).where(
            post_likers.c.post_id == post_id, post_likers.c.user_id == user_id
        ))
        return result.rowcount or 0

    def get_liker_ids(self, db: Session, post_id: int) -> List[int]:
        stmt = select(post_likers.c.user_id).where(post_likers.c.post_id == post_id)
        return list(db.scalars(stmt).all())

    # ----- Saves -----
    def is_saver(self, db: Session, *, post_id: int, user_id: int) -> bool:
        stmt = select(func.count()).select_from(post_saves).where(
            post_saves.c.post_id == post_id, post_saves.c.user_id == user_id
        )
        return (db.scalar(stmt) or 0) > 0

    def add_saver(self, db: Session, *, post_id: int, user_id: int) -> None:
        db.execute(insert(post_saves).values(post_id=post_id, user_id=user_id))

    def remove_saver(self, db: Session, *, post_id: int, user_id: int) -> int:
        result = db.execute(delete(post_saves).where(
            post_saves.c.post_id == post_id, post_saves.c.user_id == user_id
        ))
        return result.rowcount or 0

    def get_saved_by_user(
        self, db: Session, *, user_id: int, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Post], int]:
        """Bookmarked posts, most recently saved first."""
        stmt = self._visible(
            select(Post)
            .join(post_saves, post_saves.c.post_id == Post.id)
            .where(post_saves.c.user_id == user_id)
        ).order_by(desc(post_saves.c.created_at), desc(Post.id))
        return self.paginate(db, stmt, skip=skip, limit=limit)

    def get_saved_post_ids(self, db: Session, user_id: int) -> List[int]:
        return list(db.scalars(select(post_saves.c.post_id).where(post_saves.c.user_id == user_id)).all())

    # ----- Shares -----
    def create_share(
        self, db: Session, *, original: Post, author_user_id: int, text: Optional[str] = None
    ) -> Post:
        """Publish a share of ``original`` and bump its share counter in one commit."""
        share = Post(
            author_user_id=author_user_id,
            text=text,
            images=[],
            videos=[],
            mentions=[],
            shared_post_id=original.id,
            like_count=0,
            comment_count=0,
            save_count=0,
            share_count=0,
        )
        try:
            db.add(share)
            original.share_count = Post.share_count + 1
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(share)
        db.refresh(original)
        return share


# Singleton instance
crud_post = CRUDPost(Post)
