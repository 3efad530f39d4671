"""CRUD operations for `Notification` model."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.orm import Session

from socialnet.crud.base import CRUDBase
from socialnet.models.notification import Notification


class CRUDNotification(CRUDBase[Notification, dict, dict]):
    def get_by_recipient(
        self,
        db: Session,
        *,
        recipient_id: int,
        unread_only: bool = False,
        notification_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Notification], int]:
        """Get notifications for a user, optionally filtered to unread or one type."""
        conditions = [Notification.recipient_id == recipient_id]

        if unread_only:
            conditions.append(Notification.is_read == False)
        if notification_type:
            conditions.append(Notification.notification_type == notification_type)

        stmt = (
            select(Notification)
            .where(and_(*conditions))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return self.paginate(db, stmt, skip=skip, limit=limit)

    def count_unread(self, db: Session, *, recipient_id: int) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.recipient_id == recipient_id,
            Notification.is_read == False,
        )
        return db.scalar(stmt) or 0

    def mark_all_read(self, db: Session, *, recipient_id: int) -> int:
        """Mark all notifications for a user as read.

        Returns the number of notifications marked.
        """
        stmt = (
            update(Notification)
            .where(Notification.recipient_id == recipient_id, Notification.is_read == False)
            .values(is_read=True, read_at=datetime.utcnow())
        )
        try:
            result = db.execute(stmt)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return result.rowcount or 0

    def delete_read_before(self, db: Session, *, cutoff: datetime) -> int:
        try:
            result = db.execute(
                delete(Notification).where(
                    Notification.created_at < cutoff, Notification.is_read == True
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        return result.rowcount or 0


# Singleton instance
crud_notification = CRUDNotification(Notification)
