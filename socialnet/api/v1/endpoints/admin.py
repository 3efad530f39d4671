"""Admin console endpoints: accounts, dashboard, users, moderation, reports and audit."""

from dataclasses import asdict
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from socialnet.api.deps import get_client_ip, get_current_admin, get_db, require_admin_permission
from socialnet.models.admin import Admin
from socialnet.schemas.admin import (
    AdminCreate,
    AdminLogin,
    AdminResponse,
    AuditLogCreate,
    AuditLogListResponse,
    AuditLogResponse,
    AuditStats,
    CascadeResultResponse,
    DashboardStats,
    ManageUserRequest,
    ModerateContentRequest,
    ReportHandle,
    ReportListResponse,
    ReportResponse,
    ReportStats,
)
from socialnet.schemas.notification import SystemNotificationCreate
from socialnet.schemas.post import PostListResponse, PostResponse
from socialnet.schemas.story import ExpiredStoriesResponse
from socialnet.schemas.user import UserListResponse, UserResponse, UserSummary
from socialnet.services.admin_service import admin_service
from socialnet.services.moderation_service import moderation_service
from socialnet.services.notification_service import notification_service
from socialnet.services.story_service import story_service
from socialnet.services.user_service import user_service

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)


def _cascade_response(result) -> CascadeResultResponse:
    return CascadeResultResponse(**asdict(result))


# ============================================
# AUTH & ACCOUNTS
# ============================================

@router.post(
    "/login",
    response_model=dict,
    summary="Admin login",
)
def admin_login(
    credentials: AdminLogin,
    db: Session = Depends(get_db),
) -> dict:
    admin, access_token = admin_service.login(db, identifier=credentials.identifier, password=credentials.password)
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "admin": AdminResponse.model_validate(admin),
    }


@router.post(
    "/token",
    response_model=dict,
    summary="Admin OAuth2 token (form)",
)
def admin_login_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> dict:
    _, access_token = admin_service.login(db, identifier=form_data.username, password=form_data.password)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get(
    "/me",
    response_model=AdminResponse,
    summary="Current admin profile",
)
def get_admin_me(
    current_admin: Admin = Depends(get_current_admin),
) -> AdminResponse:
    return AdminResponse.model_validate(current_admin)


@router.post(
    "/admins",
    response_model=AdminResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create admin account",
)
def create_admin(
    admin_in: AdminCreate,
    request: Request,
    current_admin: Admin = Depends(require_admin_permission("can_manage_system")),
    db: Session = Depends(get_db),
) -> AdminResponse:
    admin = admin_service.create_admin(db, admin_in, creator=current_admin, ip_address=get_client_ip(request))
    return AdminResponse.model_validate(admin)


@router.get(
    "/dashboard",
    response_model=DashboardStats,
    summary="Dashboard statistics",
)
def get_dashboard(
    current_admin: Admin = Depends(require_admin_permission("can_view_analytics")),
    db: Session = Depends(get_db),
) -> DashboardStats:
    return DashboardStats(**admin_service.get_dashboard_stats(db))


# ============================================
# USERS
# ============================================

@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List or search users",
)
def list_users(
    q: Optional[str] = Query(None, max_length=100),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_admin: Admin = Depends(require_admin_permission("can_manage_users")),
    db: Session = Depends(get_db),
) -> UserListResponse:
    users, total = admin_service.list_users(db, query=q, skip=skip, limit=limit)
    return UserListResponse(users=[UserSummary.model_validate(u) for u in users], total=total)


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="User details",
)
def get_user(
    user_id: int,
    current_admin: Admin = Depends(require_admin_permission("can_manage_users")),
    db: Session = Depends(get_db),
) -> UserResponse:
    return UserResponse(**user_service.get_profile(db, user_id))


@router.post(
    "/users/manage",
    response_model=UserResponse,
    summary="Suspend, activate or deactivate a user",
)
def manage_user(
    manage_in: ManageUserRequest,
    request: Request,
    current_admin: Admin = Depends(require_admin_permission("can_manage_users")),
    db: Session = Depends(get_db),
) -> UserResponse:
    user = admin_service.manage_user(db, current_admin, manage_in, ip_address=get_client_ip(request))
    return UserResponse(**user_service.get_profile(db, user.id))


@router.delete(
    "/users/{user_id}",
    response_model=CascadeResultResponse,
    summary="Delete a user and all their content",
)
def delete_user(
    user_id: int,
    request: Request,
    current_admin: Admin = Depends(require_admin_permission("can_manage_users")),
    db: Session = Depends(get_db),
) -> CascadeResultResponse:
    result = admin_service.delete_user(db, current_admin, user_id, ip_address=get_client_ip(request))
    return _cascade_response(result)


# ============================================
# CONTENT
# ============================================

@router.get(
    "/posts",
    response_model=PostListResponse,
    summary="List posts for moderation",
)
def list_posts(
    moderation_status: Optional[str] = Query(None, description="pending, approved, rejected or flagged"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_admin: Admin = Depends(require_admin_permission("can_manage_content")),
    db: Session = Depends(get_db),
) -> PostListResponse:
    posts, total = admin_service.list_posts(
        db, moderation_status=moderation_status, skip=skip, limit=limit
    )
    return PostListResponse(
        posts=[PostResponse.model_validate(p) for p in posts],
        total=total,
        has_more=(skip + len(posts) < total),
    )


@router.delete(
    "/posts/{post_id}",
    response_model=CascadeResultResponse,
    summary="Delete a post",
)
def delete_post(
    post_id: int,
    request: Request,
    current_admin: Admin = Depends(require_admin_permission("can_manage_content")),
    db: Session = Depends(get_db),
) -> CascadeResultResponse:
    result = admin_service.delete_post(db, current_admin, post_id, ip_address=get_client_ip(request))
    return _cascade_response(result)


@router.delete(
    "/comments/{comment_id}",
    response_model=CascadeResultResponse,
    summary="Delete a comment",
)
def delete_comment(
    comment_id: int,
    request: Request,
    current_admin: Admin = Depends(require_admin_permission("can_manage_content")),
    db: Session = Depends(get_db),
) -> CascadeResultResponse:
    result = admin_service.delete_comment(db, current_admin, comment_id, ip_address=get_client_ip(request))
    return _cascade_response(result)


@router.post(
    "/moderate",
    response_model=dict,
    summary="Approve, reject or flag a post or comment",
)
def moderate_content(
    moderate_in: ModerateContentRequest,
    request: Request,
    current_admin: Admin = Depends(require_admin_permission("can_manage_content")),
    db: Session = Depends(get_db),
) -> dict:
    content = admin_service.moderate_content(
        db,
        current_admin,
        content_id=moderate_in.content_id,
        content_type=moderate_in.content_type,
        action=moderate_in.action,
        ip_address=get_client_ip(request),
    )
    return {
        "content_id": content.id,
        "content_type": moderate_in.content_type,
        "moderation_status": content.moderation_status,
    }


@router.post(
    "/stories/cleanup",
    response_model=ExpiredStoriesResponse,
    summary="Delete expired stories",
)
def cleanup_expired_stories(
    current_admin: Admin = Depends(require_admin_permission("can_manage_content")),
    db: Session = Depends(get_db),
) -> ExpiredStoriesResponse:
    return ExpiredStoriesResponse(deleted_count=story_service.delete_expired(db))


# ============================================
# REPORTS
# ============================================

@router.get(
    "/reports",
    response_model=ReportListResponse,
    summary="Pending reports",
)
def get_pending_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_admin: Admin = Depends(require_admin_permission("can_manage_content")),
    db: Session = Depends(get_db),
) -> ReportListResponse:
    reports, total = moderation_service.get_pending_reports(db, page=page, limit=limit)
    return ReportListResponse(
        reports=[ReportResponse.model_validate(r) for r in reports],
        total=total,
        page=page,
        limit=limit,
    )


@router.get(
    "/reports/stats",
    response_model=ReportStats,
    summary="Report statistics",
)
def get_report_stats(
    current_admin: Admin = Depends(require_admin_permission("can_view_analytics")),
    db: Session = Depends(get_db),
) -> ReportStats:
    return ReportStats(**moderation_service.get_report_stats(db))


@router.post(
    "/reports/{report_id}/handle",
    response_model=ReportResponse,
    summary="Resolve or reject a report",
    description="`approve` resolves the report, any other action rejects it. The decision is audited.",
)
def handle_report(
    report_id: int,
    handle_in: ReportHandle,
    request: Request,
    current_admin: Admin = Depends(require_admin_permission("can_manage_content")),
    db: Session = Depends(get_db),
) -> ReportResponse:
    report = moderation_service.handle_report(
        db,
        report_id=report_id,
        action=handle_in.action,
        admin_id=current_admin.id,
        notes=handle_in.notes,
        ip_address=get_client_ip(request),
    )
    return ReportResponse.model_validate(report)


# ============================================
# AUDIT
# ============================================

@router.get(
    "/audit-logs",
    response_model=AuditLogListResponse,
    summary="Search the audit log",
)
def get_audit_logs(
    admin_id: Optional[int] = Query(None),
    action: Optional[str] = Query(None, max_length=100),
    target_type: Optional[str] = Query(None, max_length=50),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_admin: Admin = Depends(require_admin_permission("can_view_analytics")),
    db: Session = Depends(get_db),
) -> AuditLogListResponse:
    logs, total = moderation_service.get_audit_logs(
        db,
        admin_id=admin_id,
        action=action,
        target_type=target_type,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    return AuditLogListResponse(
        logs=[AuditLogResponse.model_validate(entry) for entry in logs],
        total=total,
        page=page,
        limit=limit,
    )


@router.get(
    "/audit-logs/stats",
    response_model=AuditStats,
    summary="Audit log statistics",
)
def get_audit_stats(
    days: int = Query(30, ge=1, le=365),
    current_admin: Admin = Depends(require_admin_permission("can_view_analytics")),
    db: Session = Depends(get_db),
) -> AuditStats:
    return AuditStats(**moderation_service.get_audit_stats(db, days=days))


@router.post(
    "/audit-logs",
    response_model=AuditLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a manual audit entry",
)
def create_audit_log(
    entry_in: AuditLogCreate,
    request: Request,
    current_admin: Admin = Depends(require_admin_permission("can_manage_system")),
    db: Session = Depends(get_db),
) -> AuditLogResponse:
    entry = moderation_service.log_audit_action(
        db,
        admin_id=current_admin.id,
        action=entry_in.action,
        target_type=entry_in.target_type,
        target_id=entry_in.target_id,
        details=entry_in.details,
        ip_address=get_client_ip(request),
    )
    return AuditLogResponse.model_validate(entry)


# ============================================
# NOTIFICATIONS
# ============================================

@router.post(
    "/notifications/system",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Send a system notification",
)
def send_system_notification(
    notification_in: SystemNotificationCreate,
    request: Request,
    current_admin: Admin = Depends(require_admin_permission("can_manage_system")),
    db: Session = Depends(get_db),
) -> dict:
    sent = admin_service.send_system_notification(
        db,
        current_admin,
        recipient_ids=notification_in.recipient_ids,
        content=notification_in.content,
        ip_address=get_client_ip(request),
    )
    return {"sent": sent}


@router.post(
    "/notifications/cleanup",
    response_model=dict,
    summary="Delete old read notifications",
)
def cleanup_notifications(
    days: Optional[int] = Query(None, ge=1, le=365),
    current_admin: Admin = Depends(require_admin_permission("can_manage_system")),
    db: Session = Depends(get_db),
) -> dict:
    return {"deleted": notification_service.cleanup_old(db, days=days)}
