"""Content reports, moderation status changes and the admin audit trail."""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from sqlalchemy import update
from sqlalchemy.orm import Session

from socialnet.core.exceptions import NotFoundError, ValidationError
from socialnet.crud import crud_audit_log, crud_report
from socialnet.models.audit_log import AuditLog
from socialnet.models.comment import Comment
from socialnet.models.post import ModerationStatus, Post
from socialnet.models.report import Report, ReportStatus

logger = logging.getLogger(__name__)


class ContentKind(str, Enum):
    POST = "post"
    COMMENT = "comment"


class ContentModerator:
    """Moderation access to one kind of content."""

    def __init__(self, model: Type[Union[Post, Comment]]):
        self.model = model

    def find(self, db: Session, content_id: int) -> Optional[Union[Post, Comment]]:
        return db.get(self.model, content_id)

    def set_status(self, db: Session, content: Union[Post, Comment], status: str) -> Union[Post, Comment]:
        content.moderation_status = status
        try:
            db.add(content)
            db.commit()
            db.refresh(content)
        except Exception:
            db.rollback()
            raise
        return content


MODERATORS = {
    ContentKind.POST: ContentModerator(Post),
    ContentKind.COMMENT: ContentModerator(Comment),
}

# Moderation action -> resulting status
MODERATION_ACTIONS = {
    "approve": ModerationStatus.APPROVED.value,
    "reject": ModerationStatus.REJECTED.value,
    "flag": ModerationStatus.FLAGGED.value,
}


class ModerationService:
    """Reports queue, direct moderation and append-only audit logging."""

    # ----- Reports -----
    def report_content(
        self,
        db: Session,
        *,
        reporter_id: int,
        content_id: str,
        content_type: str,
        reason: str,
        severity: str = "medium",
    ) -> Report:
        """Queue a report with status pending."""
        report = crud_report.create(db, obj_in={
            "content_id": str(content_id),
            "content_type": content_type,
            "reporter_id": reporter_id,
            "reason": reason,
            "severity": severity,
            "status": ReportStatus.PENDING.value,
        })
        logger.info(
            f"Report created: id={report.id}, {content_type}={content_id}, "
            f"severity={severity}, reporter_id={reporter_id}"
        )
        return report

    def get_pending_reports(self, db: Session, *, page: int = 1, limit: int = 20) -> Tuple[List[Report], int]:
        return crud_report.get_pending(db, skip=(page - 1) * limit, limit=limit)

    def get_report_stats(self, db: Session) -> Dict[str, Any]:
        return {
            "total": crud_report.count(db),
            "by_status": crud_report.count_by(db, Report.status),
            "by_severity": crud_report.count_by(db, Report.severity),
            "by_content_type": crud_report.count_by(db, Report.content_type),
        }

    def handle_report(
        self,
        db: Session,
        *,
        report_id: int,
        action: str,
        admin_id: int,
        notes: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Report:
        """
        Resolve a report and record the decision in the audit log.

        ``approve`` resolves the report; any other action rejects it.

        Raises:
            NotFoundError: If no report has this id.
        """
        status = ReportStatus.RESOLVED.value if action == "approve" else ReportStatus.REJECTED.value
        stmt = (
            update(Report)
            .where(Report.id == report_id)
            .values(
                status=status,
                handled_by=admin_id,
                handled_at=datetime.utcnow(),
                moderator_notes=notes,
                updated_at=datetime.utcnow(),
            )
        )
        try:
            result = db.execute(stmt)
            db.commit()
        except Exception:
            db.rollback()
            raise
        if not result.rowcount:
            raise NotFoundError("Report not found")

        report = crud_report.get(db, report_id)
        db.refresh(report)
        self.log_audit_action(
            db,
            admin_id=admin_id,
            action=f"report_handled_{action}",
            target_type="report",
            target_id=str(report_id),
            details={
                "status": status,
                "notes": notes,
                "content_id": report.content_id,
                "content_type": report.content_type,
            },
            ip_address=ip_address,
        )
        logger.info(f"Report {report_id} handled by admin_id={admin_id}: {action} -> {status}")
        return report

    # ----- Direct moderation -----
    def moderate_content(
        self,
        db: Session,
        *,
        content_id: int,
        content_type: str,
        action: str,
    ) -> Union[Post, Comment]:
        """
        Set the moderation status of a post or comment.

        Raises:
            ValidationError: Unsupported content type or action.
            NotFoundError: No content of that type has this id.
        """
        try:
            kind = ContentKind(content_type)
        except ValueError as e:
            raise ValidationError(f"Unsupported content type: {content_type}") from e

        status = MODERATION_ACTIONS.get(action)
        if status is None:
            raise ValidationError(
                f"Invalid moderation action. Must be one of: {', '.join(MODERATION_ACTIONS)}"
            )

        moderator = MODERATORS[kind]
        content = moderator.find(db, content_id)
        if not content:
            raise NotFoundError(f"{kind.value.capitalize()} not found")

        content = moderator.set_status(db, content, status)
        logger.info(f"Moderated {kind.value} {content_id}: {action} -> {status}")
        return content

    # ----- Audit -----
    def log_audit_action(
        self,
        db: Session,
        *,
        admin_id: int,
        action: str,
        target_type: str,
        target_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        return crud_audit_log.append(
            db,
            admin_id=admin_id,
            action=action,
            target_type=target_type,
            target_id=target_id,
            details=details,
            ip_address=ip_address,
        )

    def get_audit_logs(
        self,
        db: Session,
        *,
        admin_id: Optional[int] = None,
        action: Optional[str] = None,
        target_type: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[AuditLog], int]:
        return crud_audit_log.search(
            db,
            admin_id=admin_id,
            action=action,
            target_type=target_type,
            date_from=date_from,
            date_to=date_to,
            skip=(page - 1) * limit,
            limit=limit,
        )

    def get_audit_stats(self, db: Session, *, days: int = 30) -> Dict[str, Any]:
        since = datetime.utcnow() - timedelta(days=days)
        return {
            "period_days": days,
            "total": crud_audit_log.count(db, AuditLog.timestamp >= since),
            "by_action": crud_audit_log.count_by(db, AuditLog.action, since=since),
            "by_admin": crud_audit_log.count_by(db, AuditLog.admin_id, since=since),
        }


# Singleton instance
moderation_service = ModerationService()
