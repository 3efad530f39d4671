from datetime import datetime, timedelta

import pytest

from socialnet.core.exceptions import NotFoundError, ValidationError
from socialnet.crud import crud_audit_log
from socialnet.models.post import ModerationStatus
from socialnet.schemas.comment import CommentCreate
from socialnet.services.comment_service import comment_service
from socialnet.services.moderation_service import moderation_service


def test_report_then_approve_is_audited(db):
    report = moderation_service.report_content(
        db, reporter_id=1, content_id="post123", content_type="post", reason="spam", severity="high"
    )
    assert report.status == "pending"

    handled = moderation_service.handle_report(
        db, report_id=report.id, action="approve", admin_id=7, notes="removed"
    )

    assert handled.status == "resolved"
    assert handled.handled_by == 7
    assert handled.handled_at is not None
    assert handled.moderator_notes == "removed"

    logs, total = moderation_service.get_audit_logs(db, admin_id=7)
    assert total == 1
    assert logs[0].action == "report_handled_approve"
    assert logs[0].target_type == "report"
    assert logs[0].target_id == str(report.id)
    assert logs[0].details["content_id"] == "post123"


def test_non_approve_action_rejects_report(db):
    report = moderation_service.report_content(
        db, reporter_id=1, content_id="9", content_type="comment", reason="rude"
    )
    handled = moderation_service.handle_report(db, report_id=report.id, action="dismiss", admin_id=3)
    assert handled.status == "rejected"


def test_handle_unknown_report_writes_no_audit(db):
    with pytest.raises(NotFoundError):
        moderation_service.handle_report(db, report_id=404, action="approve", admin_id=1)
    assert crud_audit_log.count(db) == 0


def test_pending_reports_and_stats(db):
    first = moderation_service.report_content(
        db, reporter_id=1, content_id="1", content_type="post", reason="a", severity="low"
    )
    moderation_service.report_content(
        db, reporter_id=2, content_id="2", content_type="comment", reason="b", severity="critical"
    )
    moderation_service.handle_report(db, report_id=first.id, action="approve", admin_id=1)

    pending, total = moderation_service.get_pending_reports(db, page=1, limit=10)
    assert total == 1 and pending[0].content_id == "2"

    stats = moderation_service.get_report_stats(db)
    assert stats["total"] == 2
    assert stats["by_status"] == {"pending": 1, "resolved": 1}
    assert stats["by_content_type"] == {"post": 1, "comment": 1}


@pytest.mark.parametrize("action,status", [
    ("approve", ModerationStatus.APPROVED.value),
    ("reject", ModerationStatus.REJECTED.value),
    ("flag", ModerationStatus.FLAGGED.value),
])
def test_moderate_post(db, make_user, make_post, action, status):
    post = make_post(make_user("alice"))
    moderated = moderation_service.moderate_content(db, content_id=post.id, content_type="post", action=action)
    assert moderated.moderation_status == status


def test_moderate_comment(db, make_user, make_post, push_sink):
    alice = make_user("alice")
    post = make_post(alice)
    comment = comment_service.add_comment(db, post_id=post.id, user_id=alice.id, comment_in=CommentCreate(text="hm"))

    moderated = moderation_service.moderate_content(
        db, content_id=comment.id, content_type="comment", action="flag"
    )
    assert moderated.moderation_status == "flagged"


def test_moderate_rejects_unsupported_input(db, make_user, make_post):
    post = make_post(make_user("alice"))

    with pytest.raises(ValidationError):
        moderation_service.moderate_content(db, content_id=post.id, content_type="user", action="approve")
    with pytest.raises(ValidationError):
        moderation_service.moderate_content(db, content_id=post.id, content_type="post", action="delete")
    with pytest.raises(NotFoundError):
        moderation_service.moderate_content(db, content_id=999, content_type="post", action="approve")
    with pytest.raises(NotFoundError):
        moderation_service.moderate_content(db, content_id=999, content_type="comment", action="approve")


def test_audit_log_is_append_only(db):
    first = moderation_service.log_audit_action(db, admin_id=1, action="ban_user", target_type="user", target_id="5")
    second = moderation_service.log_audit_action(db, admin_id=1, action="ban_user", target_type="user", target_id="5")

    assert first.id != second.id
    logs, total = moderation_service.get_audit_logs(db, admin_id=1)
    assert total == 2
    assert {log.id for log in logs} == {first.id, second.id}


def test_audit_log_filters(db):
    moderation_service.log_audit_action(db, admin_id=1, action="delete_post", target_type="post", target_id="3")
    moderation_service.log_audit_action(db, admin_id=2, action="DELETE_USER", target_type="user", target_id="4")
    moderation_service.log_audit_action(db, admin_id=2, action="suspend_user", target_type="user", target_id="4")

    _, total = moderation_service.get_audit_logs(db, action="delete")
    assert total == 2
    _, total = moderation_service.get_audit_logs(db, admin_id=2, target_type="user")
    assert total == 2
    _, total = moderation_service.get_audit_logs(db, date_from=datetime.utcnow() + timedelta(hours=1))
    assert total == 0
    _, total = moderation_service.get_audit_logs(db, date_to=datetime.utcnow() + timedelta(hours=1))
    assert total == 3

    logs, total = moderation_service.get_audit_logs(db, page=2, limit=2)
    assert total == 3 and len(logs) == 1


def test_audit_stats(db):
    moderation_service.log_audit_action(db, admin_id=1, action="delete_post", target_type="post")
    moderation_service.log_audit_action(db, admin_id=1, action="delete_post", target_type="post")
    moderation_service.log_audit_action(db, admin_id=2, action="suspend_user", target_type="user")

    stats = moderation_service.get_audit_stats(db, days=7)
    assert stats["period_days"] == 7
    assert stats["total"] == 3
    assert stats["by_action"] == {"delete_post": 2, "suspend_user": 1}
    assert stats["by_admin"] == {"1": 2, "2": 1}
