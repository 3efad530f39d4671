"""Cascading deletion of users, posts, comments and stories.

Each step commits on its own. A database error aborts the cascade after
rolling back the failing step; steps already committed stay applied and are
listed in the ``CascadeResult`` attached to the raised error.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from socialnet.config import settings
from socialnet.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from socialnet.crud import crud_comment, crud_post, crud_story, crud_user
from socialnet.models.comment import Comment, comment_likers
from socialnet.models.like import Like
from socialnet.models.notification import Notification
from socialnet.models.post import Post, post_likers, post_saves
from socialnet.models.story import Story, story_views
from socialnet.models.user import User, user_blocks, user_follows
from socialnet.services.media_service import media_service

logger = logging.getLogger(__name__)


class CommentDeletePolicy(str, Enum):
    """What happens to the replies of a deleted comment."""
    ORPHAN = "orphan"        # replies keep pointing at the deleted id
    CASCADE = "cascade"      # the whole reply subtree is deleted
    REPARENT = "reparent"    # replies move up to the deleted comment's parent


@dataclass
class CascadeResult:
    """Progress report of a (non-atomic) cascade."""

    root_type: str
    root_id: int
    completed_steps: List[str] = field(default_factory=list)
    deleted: Dict[str, int] = field(default_factory=dict)
    media_failures: List[str] = field(default_factory=list)

    def record(self, step: str, entity: Optional[str] = None, count: int = 0) -> None:
        self.completed_steps.append(step)
        if entity:
            self.deleted[entity] = self.deleted.get(entity, 0) + count

    def absorb(self, other: "CascadeResult") -> None:
        """Fold a nested cascade's counts and media failures into this one."""
        for entity, count in other.deleted.items():
            self.deleted[entity] = self.deleted.get(entity, 0) + count
        self.media_failures.extend(other.media_failures)


class CascadeError(Exception):
    """A cascade step failed after earlier steps were committed."""

    def __init__(self, result: CascadeResult, step: str):
        self.result = result
        self.step = step
        super().__init__(f"{result.root_type} {result.root_id} cascade failed at step '{step}'")


class DeletionService:
    """Delete root entities together with everything that depends on them."""

    def __init__(self, media_store=None):
        self.media_store = media_store or media_service

    # ----- Helpers -----
    def _run(self, db: Session, result: CascadeResult, step: str, statement) -> int:
        """Execute one statement as its own committed step."""
        try:
            outcome = db.execute(statement)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Cascade {result.root_type}={result.root_id} failed at {step}: {e}")
            raise CascadeError(result, step) from e
        return outcome.rowcount or 0

    def release_media(self, url: str, kind: str, result: Optional[CascadeResult] = None) -> bool:
        """Best-effort delete of one hosted asset. Never raises."""
        public_id = self.media_store.extract_public_id(url)
        if not public_id:
            logger.warning(f"Cannot derive media id from url: {url}")
            if result is not None:
                result.media_failures.append(url)
            return False
        try:
            self.media_store.delete(public_id, kind)
            return True
        except Exception as e:
            logger.warning(f"Media cleanup failed for {kind} {public_id}: {e}")
            if result is not None:
                result.media_failures.append(url)
            return False

    def _recount_comments(self, db: Session, result: CascadeResult, post_ids) -> None:
        for post_id in set(post_ids):
            count = select(func.count(Comment.id)).where(Comment.post_id == post_id).scalar_subquery()
            self._run(
                db, result, "recount_comments",
                update(Post).where(Post.id == post_id).values(comment_count=count),
            )

    # ----- Posts -----
    def delete_post(self, db: Session, post_id: int) -> CascadeResult:
        """
        Delete a post, its media, comments, likes, saves and notifications.

        Shares of the post are kept with their pointer cleared; if the post
        is itself a share, the original's share counter goes down.

        Raises:
            NotFoundError: If the post does not exist.
            CascadeError: If a database step fails.
        """
        post = crud_post.get(db, post_id)
        if not post:
            raise NotFoundError("Post not found")

        result = CascadeResult(root_type="post", root_id=post_id)
        images = list(post.images or [])
        videos = list(post.videos or [])
        shared_post_id = post.shared_post_id

        for url in images:
            self.release_media(url, "image", result)
        for url in videos:
            self.release_media(url, "video", result)
        result.record("media")

        comment_ids = crud_comment.get_ids_by_post(db, post_id)
        if comment_ids:
            self._run(db, result, "comment_likers",
                      delete(comment_likers).where(comment_likers.c.comment_id.in_(comment_ids)))
        count = self._run(db, result, "comments", delete(Comment).where(Comment.post_id == post_id))
        result.record("comments", "comments", count)

        self._run(db, result, "post_likers", delete(post_likers).where(post_likers.c.post_id == post_id))
        count = self._run(db, result, "likes", delete(Like).where(Like.post_id == post_id))
        result.record("likes", "likes", count)

        count = self._run(db, result, "saves", delete(post_saves).where(post_saves.c.post_id == post_id))
        result.record("saves", "saves", count)

        # Shares of this post stay, without their target
        self._run(db, result, "shares", update(Post).where(
            Post.shared_post_id == post_id
        ).values(shared_post_id=None))
        if shared_post_id is not None:
            self._run(db, result, "share_count", update(Post).where(
                Post.id == shared_post_id, Post.share_count > 0
            ).values(share_count=Post.share_count - 1))
        result.record("shares")

        count = self._run(db, result, "notifications",
                          delete(Notification).where(Notification.post_id == post_id))
        result.record("notifications", "notifications", count)

        count = self._run(db, result, "post", delete(Post).where(Post.id == post_id))
        result.record("post", "posts", count)

        logger.info(
            f"Post {post_id} deleted: {result.deleted}, "
            f"media_failures={len(result.media_failures)}"
        )
        return result

    # ----- Users -----
    def delete_user(self, db: Session, user_id: int) -> CascadeResult:
        """
        Delete a user and every entity that references them.

        Order: posts and shares (one cascade each), authored comments,
        stories, graph edges, likes and saves, notifications, then the user row.

        Raises:
            NotFoundError: If the user does not exist.
            CascadeError: If a database step fails.
        """
        user = crud_user.get(db, user_id)
        if not user:
            raise NotFoundError("User not found")

        result = CascadeResult(root_type="user", root_id=user_id)

        # Posts: one cascade per post for the media cleanup
        for post_id in crud_post.get_ids_by_author(db, user_id):
            try:
                result.absorb(self.delete_post(db, post_id))
            except NotFoundError:
                # Removed concurrently
                continue
        result.record("posts")

        # Comments written elsewhere
        authored = crud_comment.get_by_author(db, user_id)
        touched_posts = [comment.post_id for comment in authored]
        comment_ids = [comment.id for comment in authored]
        if comment_ids:
            self._run(db, result, "comment_likers",
                      delete(comment_likers).where(comment_likers.c.comment_id.in_(comment_ids)))
        count = self._run(db, result, "comments", delete(Comment).where(Comment.author_user_id == user_id))
        result.record("comments", "comments", count)
        self._recount_comments(db, result, touched_posts)

        # Stories
        for story in crud_story.get_by_user(db, user_id):
            self.release_media(story.media_url, story.content_type, result)
        self._run(db, result, "story_views", delete(story_views).where(
            story_views.c.story_id.in_(select(Story.id).where(Story.user_id == user_id))
        ))
        count = self._run(db, result, "stories", delete(Story).where(Story.user_id == user_id))
        result.record("stories", "stories", count)

        self._detach_from_graph(db, result, user_id)

        count = self._run(db, result, "notifications", delete(Notification).where(
            or_(Notification.sender_id == user_id, Notification.recipient_id == user_id)
        ))
        result.record("notifications", "notifications", count)

        count = self._run(db, result, "user", delete(User).where(User.id == user_id))
        result.record("user", "users", count)

        logger.info(
            f"User {user_id} deleted: {result.deleted}, "
            f"media_failures={len(result.media_failures)}"
        )
        return result

    def _detach_from_graph(self, db: Session, result: CascadeResult, user_id: int) -> None:
        count = self._run(db, result, "follows", delete(user_follows).where(
            or_(user_follows.c.follower_id == user_id, user_follows.c.followed_id == user_id)
        ))
        count += self._run(db, result, "blocks", delete(user_blocks).where(
            or_(user_blocks.c.blocker_id == user_id, user_blocks.c.blocked_id == user_id)
        ))
        result.record("graph", "edges", count)

        liked_posts = list(db.scalars(
            select(post_likers.c.post_id).where(post_likers.c.user_id == user_id)
        ).all())
        self._run(db, result, "post_likers", delete(post_likers).where(post_likers.c.user_id == user_id))
        if liked_posts:
            self._run(db, result, "like_counts", update(Post).where(
                Post.id.in_(liked_posts), Post.like_count > 0
            ).values(like_count=Post.like_count - 1))
        count = self._run(db, result, "likes", delete(Like).where(Like.user_id == user_id))
        result.record("likes", "likes", count)

        saved_posts = crud_post.get_saved_post_ids(db, user_id)
        count = self._run(db, result, "saves", delete(post_saves).where(post_saves.c.user_id == user_id))
        if saved_posts:
            self._run(db, result, "save_counts", update(Post).where(
                Post.id.in_(saved_posts), Post.save_count > 0
            ).values(save_count=Post.save_count - 1))
        result.record("saves", "saves", count)

        liked_comments = list(db.scalars(
            select(comment_likers.c.comment_id).where(comment_likers.c.user_id == user_id)
        ).all())
        self._run(db, result, "comment_likers",
                  delete(comment_likers).where(comment_likers.c.user_id == user_id))
        if liked_comments:
            self._run(db, result, "comment_like_counts", update(Comment).where(
                Comment.id.in_(liked_comments), Comment.like_count > 0
            ).values(like_count=Comment.like_count - 1))

        self._run(db, result, "story_views", delete(story_views).where(story_views.c.user_id == user_id))
        result.record("interactions")

    # ----- Comments -----
    def delete_comment(
        self,
        db: Session,
        comment_id: int,
        policy: Optional[CommentDeletePolicy] = None,
    ) -> CascadeResult:
        """
        Delete a comment and apply the reply policy.

        ``policy`` defaults to ``settings.COMMENT_DELETE_POLICY``.

        Raises:
            NotFoundError: If the comment does not exist.
            ValidationError: If the configured policy is unknown.
        """
        try:
            policy = CommentDeletePolicy(policy or settings.COMMENT_DELETE_POLICY)
        except ValueError as e:
            raise ValidationError(f"Unknown comment delete policy: {policy}") from e

        comment = crud_comment.get(db, comment_id)
        if not comment:
            raise NotFoundError("Comment not found")

        result = CascadeResult(root_type="comment", root_id=comment_id)
        post_id = comment.post_id
        parent_id = comment.parent_comment_id

        doomed = [comment_id]
        if policy == CommentDeletePolicy.CASCADE:
            frontier = [comment_id]
            while frontier:
                children = []
                for current in frontier:
                    children.extend(crud_comment.get_reply_ids(db, current))
                doomed.extend(children)
                frontier = children
        elif policy == CommentDeletePolicy.REPARENT:
            count = self._run(db, result, "reparent", update(Comment).where(
                Comment.parent_comment_id == comment_id
            ).values(parent_comment_id=parent_id))
            result.record("reparent", "reparented", count)

        self._run(db, result, "comment_likers",
                  delete(comment_likers).where(comment_likers.c.comment_id.in_(doomed)))
        count = self._run(db, result, "comments", delete(Comment).where(Comment.id.in_(doomed)))
        result.record("comments", "comments", count)

        self._recount_comments(db, result, [post_id])
        logger.info(f"Comment {comment_id} deleted with policy={policy.value}: {result.deleted}")
        return result

    # ----- Stories -----
    def delete_story(self, db: Session, story_id: int, user_id: Optional[int] = None) -> CascadeResult:
        """Delete a story and release its media. ``user_id`` restricts to the owner."""
        story = crud_story.get(db, story_id)
        if not story:
            raise NotFoundError("Story not found")
        if user_id is not None and story.user_id != user_id:
            raise ForbiddenError("You can only delete your own stories")

        result = CascadeResult(root_type="story", root_id=story_id)
        self.release_media(story.media_url, story.content_type, result)
        result.record("media")
        self._run(db, result, "story_views", delete(story_views).where(story_views.c.story_id == story_id))
        count = self._run(db, result, "story", delete(Story).where(Story.id == story_id))
        result.record("story", "stories", count)
        return result

    def delete_expired_stories(self, db: Session, now: Optional[datetime] = None) -> int:
        """Remove every story past its expiry. Returns the number deleted."""
        deleted = 0
        for story in crud_story.get_expired(db, now=now):
            try:
                deleted += self.delete_story(db, story.id).deleted.get("stories", 0)
            except NotFoundError:
                continue
        logger.info(f"Expired stories cleanup removed {deleted} stories")
        return deleted


# Singleton instance
deletion_service = DeletionService()
