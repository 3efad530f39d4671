"""Comments and threaded replies."""

import logging
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from socialnet.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from socialnet.core.key_lock import like_locks
from socialnet.crud import crud_comment, crud_post
from socialnet.models.comment import Comment
from socialnet.models.notification import NotificationType
from socialnet.models.post import Post
from socialnet.schemas.comment import CommentCreate, CommentUpdate
from socialnet.services.deletion_service import CascadeResult, deletion_service
from socialnet.services.notification_service import notification_service

logger = logging.getLogger(__name__)


class CommentService:

    def __init__(self, notifier=None, deleter=None):
        self.notifier = notifier or notification_service
        self.deleter = deleter or deletion_service

    def get_comment(self, db: Session, comment_id: int) -> Comment:
        comment = crud_comment.get(db, comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        return comment

    def add_comment(self, db: Session, *, post_id: int, user_id: int, comment_in: CommentCreate) -> Comment:
        """
        Comment on a post or reply to a comment of the same post.

        The post owner gets a comment notification; the parent comment's
        author gets one too when replying to someone else.
        """
        post = crud_post.get(db, post_id)
        if not post:
            raise NotFoundError("Post not found")

        parent = None
        if comment_in.parent_comment_id is not None:
            parent = crud_comment.get(db, comment_in.parent_comment_id)
            if not parent:
                raise NotFoundError("Parent comment not found")
            if parent.post_id != post_id:
                raise ValidationError("Parent comment belongs to another post")

        try:
            comment = crud_comment.create_comment(
                db,
                post_id=post_id,
                author_user_id=user_id,
                text=comment_in.text,
                parent_comment_id=comment_in.parent_comment_id,
                images=comment_in.images,
                videos=comment_in.videos,
            )
            post.comment_count = Post.comment_count + 1
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(comment)
        db.refresh(post)

        self.notifier.notify(
            db,
            sender_id=user_id,
            recipient_id=post.author_user_id,
            notification_type=NotificationType.COMMENT.value,
            post_id=post_id,
        )
        if parent and parent.author_user_id != post.author_user_id:
            author = comment.author.username if comment.author else "Someone"
            self.notifier.notify(
                db,
                sender_id=user_id,
                recipient_id=parent.author_user_id,
                notification_type=NotificationType.COMMENT.value,
                post_id=post_id,
                content=f"{author} replied to your comment",
            )

        logger.info(f"Comment created: id={comment.id}, post_id={post_id}, author_id={user_id}")
        return comment

    def list_comments(self, db: Session, *, post_id: int, skip: int = 0, limit: int = 20) -> Tuple[List[Comment], int]:
        if not crud_post.get(db, post_id):
            raise NotFoundError("Post not found")
        return crud_comment.get_by_post(db, post_id=post_id, skip=skip, limit=limit)

    def list_replies(self, db: Session, *, comment_id: int, skip: int = 0, limit: int = 20) -> Tuple[List[Comment], int]:
        self.get_comment(db, comment_id)
        return crud_comment.get_replies(db, comment_id=comment_id, skip=skip, limit=limit)

    def get_popular_comments(self, db: Session, *, post_id: int, limit: int = 10) -> List[Comment]:
        if not crud_post.get(db, post_id):
            raise NotFoundError("Post not found")
        return crud_comment.get_popular(db, post_id=post_id, limit=limit)

    def get_comment_stats(self, db: Session, *, post_id: int) -> Dict:
        """Top-level and reply counts of a post plus its five most popular comments."""
        popular = self.get_popular_comments(db, post_id=post_id, limit=5)
        return {
            "post_id": post_id,
            "total_comments": crud_comment.count_by_post(db, post_id, replies=False),
            "total_replies": crud_comment.count_by_post(db, post_id, replies=True),
            "popular_comments": popular,
        }

    def update_comment(self, db: Session, *, comment_id: int, user_id: int, comment_in: CommentUpdate) -> Comment:
        comment = self.get_comment(db, comment_id)
        if comment.author_user_id != user_id:
            raise ForbiddenError("You can only edit your own comments")
        return crud_comment.update(db, db_obj=comment, obj_in={"text": comment_in.text, "is_edited": True})

    def delete_comment(self, db: Session, *, comment_id: int, user_id: int) -> CascadeResult:
        """The comment author or the post owner may delete."""
        comment = self.get_comment(db, comment_id)
        post = crud_post.get(db, comment.post_id)
        if comment.author_user_id != user_id and (not post or post.author_user_id != user_id):
            raise ForbiddenError("Not allowed to delete this comment")
        return self.deleter.delete_comment(db, comment_id)

    def toggle_like(self, db: Session, *, comment_id: int, user_id: int) -> Tuple[str, Comment]:
        with like_locks.hold(("comment", user_id, comment_id)):
            comment = self.get_comment(db, comment_id)
            try:
                if crud_comment.is_liker(db, comment_id=comment_id, user_id=user_id):
                    crud_comment.remove_liker(db, comment_id=comment_id, user_id=user_id)
                    comment.like_count = Comment.like_count - 1
                    action = "unliked"
                else:
                    crud_comment.add_liker(db, comment_id=comment_id, user_id=user_id)
                    comment.like_count = Comment.like_count + 1
                    action = "liked"
                db.commit()
            except Exception:
                db.rollback()
                raise
            db.refresh(comment)
        return action, comment


# Singleton instance
comment_service = CommentService()
