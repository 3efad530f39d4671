"""Admin console: admin accounts, dashboard, user management and audited deletes."""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, func, or_, select
from sqlalchemy.orm import Session

from socialnet.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from socialnet.core.security import TOKEN_TYPE_ADMIN, create_access_token
from socialnet.crud import crud_admin, crud_comment, crud_post, crud_report, crud_story, crud_user
from socialnet.models.admin import Admin
from socialnet.models.notification import NotificationType
from socialnet.models.post import ModerationStatus, Post
from socialnet.models.report import Report, ReportStatus
from socialnet.models.user import User
from socialnet.schemas.admin import AdminCreate, ManageUserRequest
from socialnet.services.deletion_service import CascadeResult, deletion_service
from socialnet.services.moderation_service import moderation_service
from socialnet.services.notification_service import notification_service

logger = logging.getLogger(__name__)


class AdminService:
    """
    Privileged operations. Every mutation goes through ``_audit`` so the
    audit log holds one entry per admin action.
    """

    def __init__(self, deleter=None, moderator=None, notifier=None):
        self.deleter = deleter or deletion_service
        self.moderator = moderator or moderation_service
        self.notifier = notifier or notification_service

    def _audit(self, db: Session, admin: Admin, action: str, target_type: str,
               target_id: Any = None, details: Optional[Dict[str, Any]] = None,
               ip_address: Optional[str] = None) -> None:
        self.moderator.log_audit_action(
            db,
            admin_id=admin.id,
            action=action,
            target_type=target_type,
            target_id=str(target_id) if target_id is not None else None,
            details=details,
            ip_address=ip_address,
        )

    # ----- Admin accounts -----
    def create_admin(self, db: Session, admin_in: AdminCreate, creator: Optional[Admin] = None,
                     ip_address: Optional[str] = None) -> Admin:
        if crud_admin.get_by_username_or_email(db, username=admin_in.username, email=admin_in.email):
            raise ConflictError("Admin with this username or email already exists")
        if admin_in.role == "super_admin" and creator is not None and creator.role != "super_admin":
            raise ForbiddenError("Only a super admin can create another super admin")

        admin = crud_admin.create_admin(db, admin_in=admin_in)
        logger.info(f"Admin created: id={admin.id}, role={admin.role}")
        if creator is not None:
            self._audit(db, creator, "create_admin", "admin", admin.id,
                        {"username": admin.username, "role": admin.role}, ip_address)
        return admin

    def login(self, db: Session, *, identifier: str, password: str) -> Tuple[Admin, str]:
        admin = crud_admin.authenticate(db, identifier=identifier, password=password)
        if not admin:
            raise UnauthorizedError("Incorrect username/email or password")
        if not admin.is_active:
            raise ForbiddenError("Admin account is disabled")

        admin = crud_admin.update(db, db_obj=admin, obj_in={"last_login_at": datetime.utcnow()})
        token = create_access_token({"sub": str(admin.id), "type": TOKEN_TYPE_ADMIN})
        logger.info(f"Admin logged in: id={admin.id}")
        return admin, token

    # ----- Dashboard -----
    def get_dashboard_stats(self, db: Session) -> Dict[str, int]:
        now = datetime.utcnow()
        return {
            "total_users": crud_user.count(db),
            "active_users": crud_user.count(db, User.is_active == True),
            "suspended_users": crud_user.count(db, User.suspended_until > now),
            "total_posts": crud_post.count(db),
            "total_comments": crud_comment.count(db),
            "active_stories": crud_story.count_active(db, now=now),
            "pending_reports": crud_report.count(db, Report.status == ReportStatus.PENDING.value),
            "new_users_last_7_days": crud_user.count(db, User.created_at >= now - timedelta(days=7)),
        }

    def list_users(self, db: Session, *, query: Optional[str] = None,
                   skip: int = 0, limit: int = 20) -> Tuple[List[User], int]:
        stmt = select(User)
        if query:
            needle = query.lower()
            stmt = stmt.where(or_(
                func.lower(User.username).contains(needle, autoescape=True),
                func.lower(User.email).contains(needle, autoescape=True),
                func.lower(User.full_name).contains(needle, autoescape=True),
            ))
        stmt = stmt.order_by(desc(User.created_at), desc(User.id))
        return crud_user.paginate(db, stmt, skip=skip, limit=limit)

    def list_posts(self, db: Session, *, moderation_status: Optional[str] = None,
                   skip: int = 0, limit: int = 20) -> Tuple[List[Post], int]:
        """Every post, rejected ones included, for the moderation queue."""
        if moderation_status and moderation_status not in {s.value for s in ModerationStatus}:
            raise ValidationError(f"Unknown moderation status: {moderation_status}")
        return crud_post.get_all(db, moderation_status=moderation_status, skip=skip, limit=limit)

    # ----- User management -----
    def manage_user(self, db: Session, admin: Admin, request: ManageUserRequest,
                    ip_address: Optional[str] = None) -> User:
        user = crud_user.get(db, request.user_id)
        if not user:
            raise NotFoundError("User not found")

        if request.action == "suspend":
            days = request.duration_days or 7
            changes = {"suspended_until": datetime.utcnow() + timedelta(days=days)}
        elif request.action == "activate":
            changes = {"is_active": True, "suspended_until": None, "deactivation_reason": None}
        else:
            changes = {"is_active": False, "deactivation_reason": request.reason or "Deactivated by admin"}

        user = crud_user.update(db, db_obj=user, obj_in=changes)
        self._audit(db, admin, f"{request.action}_user", "user", user.id,
                    {"reason": request.reason, "duration_days": request.duration_days}, ip_address)
        logger.info(f"Admin {admin.id} applied {request.action} to user {user.id}")
        return user

    # ----- Audited deletes and moderation -----
    def delete_user(self, db: Session, admin: Admin, user_id: int,
                    ip_address: Optional[str] = None) -> CascadeResult:
        result = self.deleter.delete_user(db, user_id)
        self._audit(db, admin, "delete_user", "user", user_id,
                    {"deleted": result.deleted, "media_failures": len(result.media_failures)}, ip_address)
        return result

    def delete_post(self, db: Session, admin: Admin, post_id: int,
                    ip_address: Optional[str] = None) -> CascadeResult:
        result = self.deleter.delete_post(db, post_id)
        self._audit(db, admin, "delete_post", "post", post_id,
                    {"deleted": result.deleted, "media_failures": len(result.media_failures)}, ip_address)
        return result

    def delete_comment(self, db: Session, admin: Admin, comment_id: int,
                       ip_address: Optional[str] = None) -> CascadeResult:
        result = self.deleter.delete_comment(db, comment_id)
        self._audit(db, admin, "delete_comment", "comment", comment_id,
                    {"deleted": result.deleted}, ip_address)
        return result

    def moderate_content(self, db: Session, admin: Admin, *, content_id: int, content_type: str,
                         action: str, ip_address: Optional[str] = None):
        content = self.moderator.moderate_content(
            db, content_id=content_id, content_type=content_type, action=action
        )
        self._audit(db, admin, f"moderate_{content_type}", content_type, content_id,
                    {"action": action, "status": content.moderation_status}, ip_address)
        return content

    def send_system_notification(self, db: Session, admin: Admin, *, recipient_ids: List[int],
                                 content: str, ip_address: Optional[str] = None) -> int:
        existing = [uid for uid in recipient_ids if crud_user.get(db, uid)]
        created = self.notifier.notify_many(
            db,
            sender_id=None,
            recipient_ids=existing,
            notification_type=NotificationType.SYSTEM.value,
            content=content,
        )
        self._audit(db, admin, "send_system_notification", "notification", None,
                    {"recipients": len(created)}, ip_address)
        return len(created)


# Singleton instance
admin_service = AdminService()
