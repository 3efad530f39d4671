"""Ephemeral stories."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from socialnet.core.exceptions import NotFoundError, ValidationError
from socialnet.crud import crud_story, crud_user
from socialnet.models.story import Story, StoryContentType
from socialnet.services.deletion_service import CascadeResult, deletion_service
from socialnet.services.media_service import media_service

logger = logging.getLogger(__name__)


class StoryService:

    def __init__(self, media_store=None, deleter=None):
        self.media_store = media_store or media_service
        self.deleter = deleter or deletion_service

    def create_story(self, db: Session, *, user_id: int, content_type: str, media_url: str) -> Story:
        if content_type not in {kind.value for kind in StoryContentType}:
            raise ValidationError(f"Invalid story content type: {content_type}")
        story = crud_story.create_story(db, user_id=user_id, content_type=content_type, media_url=media_url)
        logger.info(f"Story created: id={story.id}, user_id={user_id}, type={content_type}")
        return story

    def create_story_from_upload(self, db: Session, *, user_id: int, data: bytes) -> Story:
        """Upload bytes to the media store and publish them as a story."""
        uploaded = self.media_store.upload(data, user_id, "story")
        return self.create_story(db, user_id=user_id, content_type=uploaded["type"], media_url=uploaded["url"])

    def get_user_stories(self, db: Session, *, user_id: int, now: Optional[datetime] = None) -> List[Story]:
        if not crud_user.get(db, user_id):
            raise NotFoundError("User not found")
        return crud_story.get_active_by_users(db, user_ids=[user_id], now=now)

    def get_following_stories(self, db: Session, *, user_id: int, now: Optional[datetime] = None) -> List[Story]:
        following = crud_user.get_following_ids(db, user_id)
        return crud_story.get_active_by_users(db, user_ids=following, now=now)

    def view_story(self, db: Session, *, story_id: int, viewer_id: int) -> int:
        """Record a view once per viewer and return the story's view count."""
        story = crud_story.get(db, story_id)
        if not story or story.is_expired():
            raise NotFoundError("Story not found")

        if story.user_id != viewer_id and not crud_story.has_viewed(db, story_id=story_id, user_id=viewer_id):
            try:
                crud_story.add_view(db, story_id=story_id, user_id=viewer_id)
                db.commit()
            except Exception:
                db.rollback()
                raise
        return crud_story.count_views(db, story_id)

    def delete_story(self, db: Session, *, story_id: int, user_id: int) -> CascadeResult:
        return self.deleter.delete_story(db, story_id, user_id=user_id)

    def delete_expired(self, db: Session, now: Optional[datetime] = None) -> int:
        return self.deleter.delete_expired_stories(db, now=now)


# Singleton instance
story_service = StoryService()
