"""CRUD operations for Story."""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from sqlalchemy import func, insert, select
from sqlalchemy.orm import Session

from socialnet.config import settings
from socialnet.crud.base import CRUDBase
from socialnet.models.story import Story, story_views


class CRUDStory(CRUDBase[Story, dict, dict]):

    def create_story(
        self,
        db: Session,
        *,
        user_id: int,
        content_type: str,
        media_url: str,
        now: Optional[datetime] = None,
    ) -> Story:
        created_at = now or datetime.utcnow()
        story = Story(
            user_id=user_id,
            content_type=content_type,
            media_url=media_url,
            created_at=created_at,
            expires_at=created_at + timedelta(hours=settings.STORY_TTL_HOURS),
        )
        try:
            db.add(story)
            db.commit()
            db.refresh(story)
        except Exception:
            db.rollback()
            raise
        return story

    def get_active_by_users(
        self, db: Session, *, user_ids: Iterable[int], now: Optional[datetime] = None
    ) -> List[Story]:
        """Non-expired stories of the given users, newest first."""
        user_ids = list(user_ids)
        if not user_ids:
            return []
        stmt = (
            select(Story)
            .where(Story.user_id.in_(user_ids), Story.expires_at > (now or datetime.utcnow()))
            .order_by(Story.created_at.desc())
        )
        return list(db.scalars(stmt).all())

    def get_expired(self, db: Session, *, now: Optional[datetime] = None) -> List[Story]:
        stmt = select(Story).where(Story.expires_at <= (now or datetime.utcnow()))
        return list(db.scalars(stmt).all())

    def get_by_user(self, db: Session, user_id: int) -> List[Story]:
        return list(db.scalars(select(Story).where(Story.user_id == user_id)).all())

    def count_active(self, db: Session, *, now: Optional[datetime] = None) -> int:
        return self.count(db, Story.expires_at > (now or datetime.utcnow()))

    def has_viewed(self, db: Session, *, story_id: int, user_id: int) -> bool:
        stmt = select(func.count()).select_from(story_views).where(
            story_views.c.story_id == story_id, story_views.c.user_id == user_id
        )
        return (db.scalar(stmt) or 0) > 0

    def add_view(self, db: Session, *, story_id: int, user_id: int) -> None:
        db.execute(insert(story_views).values(
            story_id=story_id, user_id=user_id, viewed_at=datetime.utcnow()
        ))

    def count_views(self, db: Session, story_id: int) -> int:
        stmt = select(func.count()).select_from(story_views).where(story_views.c.story_id == story_id)
        return db.scalar(stmt) or 0


# Singleton instance
crud_story = CRUDStory(Story)
