import pytest

from socialnet.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from socialnet.core.security import TOKEN_TYPE_ADMIN, get_token_subject
from socialnet.crud import crud_audit_log, crud_post, crud_user
from socialnet.models.post import ModerationStatus
from socialnet.schemas.admin import AdminCreate, ManageUserRequest
from socialnet.services.admin_service import admin_service
from socialnet.services.moderation_service import moderation_service


def admin_in(username, role="admin"):
    return AdminCreate(username=username, email=f"{username}@admin.example.com", password="adminpass123", role=role)


def test_only_super_admin_creates_super_admin(db, make_admin):
    regular = make_admin("regular")
    root = make_admin("root", role="super_admin")

    with pytest.raises(ForbiddenError):
        admin_service.create_admin(db, admin_in("sneaky", role="super_admin"), creator=regular)

    created = admin_service.create_admin(db, admin_in("deputy", role="super_admin"), creator=root)
    assert created.role == "super_admin"
    assert created.permissions["can_manage_system"] is True

    with pytest.raises(ConflictError):
        admin_service.create_admin(db, admin_in("deputy"), creator=root)

    logs, total = moderation_service.get_audit_logs(db, admin_id=root.id, action="create_admin")
    assert total == 1 and logs[0].target_id == str(created.id)


def test_admin_login(db, make_admin):
    admin = make_admin("moderator")

    logged_in, token = admin_service.login(db, identifier="moderator@admin.example.com", password="adminpass123")
    assert logged_in.id == admin.id
    assert get_token_subject(token, TOKEN_TYPE_ADMIN) == admin.id

    with pytest.raises(UnauthorizedError):
        admin_service.login(db, identifier="moderator", password="wrong-password")


def test_manage_user_is_audited(db, make_admin, make_user):
    admin = make_admin()
    alice = make_user("alice")

    suspended = admin_service.manage_user(
        db, admin, ManageUserRequest(user_id=alice.id, action="suspend", duration_days=3), ip_address="10.0.0.1"
    )
    assert suspended.is_suspended

    activated = admin_service.manage_user(db, admin, ManageUserRequest(user_id=alice.id, action="activate"))
    assert activated.suspended_until is None and activated.is_active

    deactivated = admin_service.manage_user(
        db, admin, ManageUserRequest(user_id=alice.id, action="deactivate", reason="spam")
    )
    assert deactivated.is_active is False
    assert deactivated.deactivation_reason == "spam"

    logs, total = moderation_service.get_audit_logs(db, admin_id=admin.id)
    assert total == 3
    assert {log.action for log in logs} == {"suspend_user", "activate_user", "deactivate_user"}
    assert any(log.ip_address == "10.0.0.1" for log in logs)

    with pytest.raises(NotFoundError):
        admin_service.manage_user(db, admin, ManageUserRequest(user_id=999, action="suspend"))


def test_dashboard_stats(db, make_admin, make_user, make_post):
    alice = make_user("alice")
    make_user("bob")
    make_post(alice)
    moderation_service.report_content(db, reporter_id=alice.id, content_id="1", content_type="post", reason="x")

    stats = admin_service.get_dashboard_stats(db)
    assert stats["total_users"] == 2
    assert stats["active_users"] == 2
    assert stats["total_posts"] == 1
    assert stats["pending_reports"] == 1
    assert stats["new_users_last_7_days"] == 2


def test_failed_delete_writes_no_audit(db, make_admin, media_store):
    admin = make_admin()
    with pytest.raises(NotFoundError):
        admin_service.delete_post(db, admin, 4242)
    assert crud_audit_log.count(db) == 0


def test_system_notification_skips_unknown_users(db, make_admin, make_user, push_sink):
    admin = make_admin()
    alice = make_user("alice")

    sent = admin_service.send_system_notification(db, admin, recipient_ids=[alice.id, 500], content="Hello")

    assert sent == 1
    assert crud_user.get(db, 500) is None


def test_list_posts_includes_rejected(db, make_user, make_post):
    alice = make_user("alice")
    kept = make_post(alice, text="fine")
    hidden = make_post(alice, text="bad")
    crud_post.update(db, db_obj=hidden, obj_in={"moderation_status": ModerationStatus.REJECTED.value})

    posts, total = admin_service.list_posts(db)
    assert total == 2
    assert {p.id for p in posts} == {kept.id, hidden.id}

    posts, total = admin_service.list_posts(db, moderation_status="rejected")
    assert total == 1 and posts[0].id == hidden.id

    with pytest.raises(ValidationError):
        admin_service.list_posts(db, moderation_status="hidden")


def test_list_users_escapes_wildcards(db, make_user):
    exact = make_user("a_b")
    make_user("axb")

    users, total = admin_service.list_users(db, query="a_b")
    assert total == 1 and users[0].id == exact.id
