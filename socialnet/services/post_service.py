"""Posts: publishing, editing, likes and lookups."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from socialnet.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from socialnet.core.key_lock import like_locks
from socialnet.crud import crud_like, crud_post, crud_user
from socialnet.models.like import Like
from socialnet.models.notification import NotificationType
from socialnet.models.post import ModerationStatus, Post
from socialnet.schemas.post import PostCreate, PostUpdate
from socialnet.services.deletion_service import CascadeResult, deletion_service
from socialnet.services.notification_service import notification_service
from socialnet.services.user_service import user_service

logger = logging.getLogger(__name__)


class PostService:

    def __init__(self, notifier=None, deleter=None):
        self.notifier = notifier or notification_service
        self.deleter = deleter or deletion_service

    def get_post(self, db: Session, post_id: int) -> Post:
        post = crud_post.get(db, post_id)
        if not post:
            raise NotFoundError("Post not found")
        return post

    def create_post(self, db: Session, *, author_id: int, post_in: PostCreate) -> Post:
        """Publish a post, then notify followers and mentioned users."""
        post = crud_post.create_post(
            db,
            author_user_id=author_id,
            text=post_in.text,
            images=post_in.images,
            videos=post_in.videos,
            mentions=post_in.mentions,
        )
        logger.info(
            f"Post created: id={post.id}, author_id={author_id}, "
            f"images={len(post.images)}, videos={len(post.videos)}"
        )

        self.notifier.notify_followers_of_new_post(db, post)
        if post.mentions:
            self.notifier.notify_mentions(db, post)
        return post

    def update_post(self, db: Session, *, post_id: int, user_id: int, post_in: PostUpdate) -> Post:
        post = self.get_post(db, post_id)
        if post.author_user_id != user_id:
            raise ForbiddenError("You can only edit your own posts")

        changes = post_in.model_dump(exclude_unset=True)
        text = changes.get("text", post.text)
        images = changes.get("images", post.images) or []
        videos = changes.get("videos", post.videos) or []
        if not (text and text.strip()) and not images and not videos and not post.is_share:
            raise ValidationError("A post needs text or at least one media item")

        changes["is_edited"] = True
        return crud_post.update(db, db_obj=post, obj_in=changes)

    def delete_post(self, db: Session, *, post_id: int, user_id: int) -> CascadeResult:
        post = self.get_post(db, post_id)
        if post.author_user_id != user_id:
            raise ForbiddenError("You can only delete your own posts")
        return self.deleter.delete_post(db, post_id)

    def toggle_like(self, db: Session, *, post_id: int, user_id: int) -> Tuple[Like, Post]:
        """
        Flip the user's like on a post.

        The Like record, likers row and like_count change commit together,
        serialized per (user, post). Only the first like ever notifies the owner.
        """
        with like_locks.hold((user_id, post_id)):
            post = self.get_post(db, post_id)
            like = crud_like.get_like(db, user_id=user_id, post_id=post_id)
            first_time = like is None

            try:
                if like is None:
                    like = Like(user_id=user_id, post_id=post_id, is_liked=True)
                    db.add(like)
                else:
                    like.is_liked = not like.is_liked

                if like.is_liked:
                    crud_post.add_liker(db, post_id=post_id, user_id=user_id)
                    post.like_count = Post.like_count + 1
                elif crud_post.remove_liker(db, post_id=post_id, user_id=user_id):
                    post.like_count = Post.like_count - 1
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise ConflictError("Like state changed concurrently") from e
            except Exception:
                db.rollback()
                raise

            db.refresh(like)
            db.refresh(post)

        if first_time:
            self.notifier.notify(
                db,
                sender_id=user_id,
                recipient_id=post.author_user_id,
                notification_type=NotificationType.LIKE.value,
                post_id=post.id,
            )
        logger.info(f"User {user_id} {'liked' if like.is_liked else 'unliked'} post {post_id}")
        return like, post

    def toggle_save(self, db: Session, *, post_id: int, user_id: int) -> Tuple[str, Post]:
        """Bookmark a post, or remove the bookmark. Returns ("saved" | "unsaved", post)."""
        with like_locks.hold(("save", user_id, post_id)):
            post = self.get_post(db, post_id)
            try:
                if crud_post.is_saver(db, post_id=post_id, user_id=user_id):
                    crud_post.remove_saver(db, post_id=post_id, user_id=user_id)
                    post.save_count = Post.save_count - 1
                    action = "unsaved"
                else:
                    crud_post.add_saver(db, post_id=post_id, user_id=user_id)
                    post.save_count = Post.save_count + 1
                    action = "saved"
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise ConflictError("Save state changed concurrently") from e
            except Exception:
                db.rollback()
                raise
            db.refresh(post)

        logger.info(f"User {user_id} {action} post {post_id}")
        return action, post

    def get_saved_posts(self, db: Session, *, user_id: int, skip: int = 0, limit: int = 20) -> Tuple[List[Post], int]:
        return crud_post.get_saved_by_user(db, user_id=user_id, skip=skip, limit=limit)

    def share_post(self, db: Session, *, post_id: int, user_id: int, text: Optional[str] = None) -> Post:
        """
        Re-publish a post as a new share post pointing at the original.

        The original's share counter goes up and its author is notified.
        Rejected posts cannot be shared.
        """
        original = self.get_post(db, post_id)
        if original.moderation_status == ModerationStatus.REJECTED.value:
            raise NotFoundError("Post not found")

        share = crud_post.create_share(
            db, original=original, author_user_id=user_id, text=(text or "").strip() or None
        )
        sharer = crud_user.get(db, user_id)
        self.notifier.notify(
            db,
            sender_id=user_id,
            recipient_id=original.author_user_id,
            notification_type=NotificationType.NEW_POST.value,
            post_id=original.id,
            content=f"{sharer.username if sharer else 'Someone'} shared your post",
        )
        logger.info(f"User {user_id} shared post {post_id} as post {share.id}")
        return share

    def get_user_posts(
        self, db: Session, *, user_id: int, viewer_id: Optional[int] = None, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Post], int]:
        """Posts of one author, subject to the author's posts privacy setting."""
        user_service.ensure_visible(db, user_service.get_user(db, user_id), viewer_id, "posts")
        return crud_post.get_by_author(db, author_id=user_id, skip=skip, limit=limit)

    def get_popular(self, db: Session, *, limit: int = 10) -> List[Post]:
        return crud_post.get_popular(db, limit=limit)

    def search(self, db: Session, *, query: str, skip: int = 0, limit: int = 20) -> Tuple[List[Post], int]:
        if not query.strip():
            raise ValidationError("Search query must not be empty")
        return crud_post.search(db, query=query.strip(), skip=skip, limit=limit)


# Singleton instance
post_service = PostService()
