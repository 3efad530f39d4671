"""Service layer for in-app notifications and their push fan-out."""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from socialnet.config import settings
from socialnet.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from socialnet.crud import crud_notification, crud_user
from socialnet.models.notification import Notification, NotificationType
from socialnet.models.post import Post
from socialnet.models.user import User
from socialnet.services.firebase_service import firebase_service

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Create, read and clean up notifications.

    Notifications are written synchronously inside the request that triggers
    them. The push sink only receives a copy; its failures never reach the
    caller.
    """

    # Default in-app text per type, formatted with the sender's username
    CONTENT_TEMPLATES = {
        NotificationType.LIKE.value: "{sender} liked your post",
        NotificationType.COMMENT.value: "{sender} commented on your post",
        NotificationType.FOLLOW.value: "{sender} started following you",
        NotificationType.MENTION.value: "{sender} mentioned you in a post",
        NotificationType.NEW_POST.value: "{sender} published a new post",
        NotificationType.SYSTEM.value: "You have a new message from the SocialNet team",
    }

    PUSH_TITLES = {
        NotificationType.LIKE.value: "New like",
        NotificationType.COMMENT.value: "New comment",
        NotificationType.FOLLOW.value: "New follower",
        NotificationType.MENTION.value: "You were mentioned",
        NotificationType.NEW_POST.value: "New post",
        NotificationType.SYSTEM.value: "SocialNet",
    }

    def __init__(self, push_sink=None):
        self.push_sink = push_sink or firebase_service

    def _build(
        self,
        *,
        sender: Optional[User],
        recipient_id: int,
        notification_type: str,
        post_id: Optional[int],
        content: Optional[str],
    ) -> Notification:
        if notification_type not in self.CONTENT_TEMPLATES:
            raise ValidationError(
                f"Invalid notification_type. Must be one of: {sorted(self.CONTENT_TEMPLATES)}"
            )
        if content is None:
            sender_name = sender.username if sender else "SocialNet"
            content = self.CONTENT_TEMPLATES[notification_type].format(sender=sender_name)
        return Notification(
            recipient_id=recipient_id,
            sender_id=sender.id if sender else None,
            notification_type=notification_type,
            post_id=post_id,
            content=content,
            is_read=False,
        )

    def notify(
        self,
        db: Session,
        *,
        sender_id: Optional[int],
        recipient_id: int,
        notification_type: str,
        post_id: Optional[int] = None,
        content: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Create one notification and push it to the recipient's device.

        Returns:
            The notification, or None when sender and recipient are the same user.
        """
        if sender_id is not None and sender_id == recipient_id:
            return None

        sender = crud_user.get(db, sender_id) if sender_id is not None else None
        notification = self._build(
            sender=sender,
            recipient_id=recipient_id,
            notification_type=notification_type,
            post_id=post_id,
            content=content,
        )

        try:
            db.add(notification)
            db.commit()
            db.refresh(notification)
        except Exception:
            db.rollback()
            raise

        logger.info(
            f"Notification created: id={notification.id}, "
            f"recipient_id={recipient_id}, type={notification_type}"
        )
        self._push(db, notification, sender)
        return notification

    def notify_many(
        self,
        db: Session,
        *,
        sender_id: Optional[int],
        recipient_ids: Iterable[int],
        notification_type: str,
        post_id: Optional[int] = None,
        content: Optional[str] = None,
    ) -> List[Notification]:
        """Fan one event out to many recipients with a single batch insert."""
        sender = crud_user.get(db, sender_id) if sender_id is not None else None
        seen = set()
        notifications = []
        for recipient_id in recipient_ids:
            if recipient_id in seen or recipient_id == sender_id:
                continue
            seen.add(recipient_id)
            notifications.append(self._build(
                sender=sender,
                recipient_id=recipient_id,
                notification_type=notification_type,
                post_id=post_id,
                content=content,
            ))

        if not notifications:
            return []

        try:
            db.add_all(notifications)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            f"Fan-out: {len(notifications)} {notification_type} notifications "
            f"from sender_id={sender_id}"
        )
        for notification in notifications:
            self._push(db, notification, sender)
        return notifications

    def notify_followers_of_new_post(self, db: Session, post: Post) -> List[Notification]:
        follower_ids = crud_user.get_follower_ids(db, post.author_user_id)
        return self.notify_many(
            db,
            sender_id=post.author_user_id,
            recipient_ids=follower_ids,
            notification_type=NotificationType.NEW_POST.value,
            post_id=post.id,
        )

    def notify_mentions(self, db: Session, post: Post) -> List[Notification]:
        """Notify mentioned users that exist; unknown ids are skipped."""
        mentioned = [user_id for user_id in (post.mentions or []) if crud_user.get(db, user_id)]
        return self.notify_many(
            db,
            sender_id=post.author_user_id,
            recipient_ids=mentioned,
            notification_type=NotificationType.MENTION.value,
            post_id=post.id,
        )

    def _push(self, db: Session, notification: Notification, sender: Optional[User]) -> None:
        recipient = crud_user.get(db, notification.recipient_id)
        if not recipient or not recipient.fcm_token:
            return

        data = {
            "notification_id": str(notification.id),
            "type": notification.notification_type,
            "post_id": str(notification.post_id) if notification.post_id else "",
            "sender_id": str(sender.id) if sender else "",
            "sender_name": sender.username if sender else "SocialNet",
        }
        try:
            self.push_sink.send(
                token=recipient.fcm_token,
                title=self.PUSH_TITLES[notification.notification_type],
                body=notification.content or "",
                data=data,
                db=db,
                user_id=recipient.id,
            )
        except Exception as e:
            # Delivery is best-effort
            logger.warning(f"Failed to send push notification id={notification.id}: {e}")

    # ----- Read side -----
    def list_for_user(
        self,
        db: Session,
        *,
        user_id: int,
        unread_only: bool = False,
        notification_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Notification], int, int]:
        """Return (notifications, total, unread_count)."""
        items, total = crud_notification.get_by_recipient(
            db,
            recipient_id=user_id,
            unread_only=unread_only,
            notification_type=notification_type,
            skip=skip,
            limit=limit,
        )
        unread = crud_notification.count_unread(db, recipient_id=user_id)
        return items, total, unread

    def get_unread_count(self, db: Session, *, user_id: int) -> int:
        return crud_notification.count_unread(db, recipient_id=user_id)

    def _get_owned(self, db: Session, notification_id: int, user_id: int) -> Notification:
        notification = crud_notification.get(db, notification_id)
        if not notification:
            raise NotFoundError("Notification not found")
        if notification.recipient_id != user_id:
            raise ForbiddenError("Not your notification")
        return notification

    def mark_as_read(self, db: Session, *, notification_id: int, user_id: int) -> Notification:
        notification = self._get_owned(db, notification_id, user_id)
        if notification.is_read:
            return notification
        return crud_notification.update(
            db, db_obj=notification, obj_in={"is_read": True, "read_at": datetime.utcnow()}
        )

    def mark_all_as_read(self, db: Session, *, user_id: int) -> int:
        count = crud_notification.mark_all_read(db, recipient_id=user_id)
        logger.info(f"Marked {count} notifications as read for user_id={user_id}")
        return count

    def delete_notification(self, db: Session, *, notification_id: int, user_id: int) -> None:
        self._get_owned(db, notification_id, user_id)
        crud_notification.delete_where(db, Notification.id == notification_id)

    def cleanup_old(self, db: Session, *, days: Optional[int] = None) -> int:
        """Delete read notifications older than ``days`` (default from settings)."""
        days = settings.NOTIFICATION_RETENTION_DAYS if days is None else days
        cutoff = datetime.utcnow() - timedelta(days=days)
        count = crud_notification.delete_read_before(db, cutoff=cutoff)
        logger.info(f"Cleaned up {count} read notifications older than {days} days")
        return count


# Singleton instance
notification_service = NotificationService()
