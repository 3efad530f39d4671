"""Pydantic schemas for the admin console: admins, reports, moderation, audit."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ----- Admin accounts -----
class AdminCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: Literal["admin", "super_admin"] = "admin"
    can_manage_users: bool = True
    can_manage_content: bool = True
    can_view_analytics: bool = True
    can_manage_system: bool = False


class AdminLogin(BaseModel):
    identifier: str
    password: str


class AdminResponse(BaseModel):
    id: int
    username: str
    email: str
    profile_picture_url: Optional[str] = None
    role: str
    permissions: Dict[str, bool]
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DashboardStats(BaseModel):
    total_users: int
    active_users: int
    suspended_users: int
    total_posts: int
    total_comments: int
    active_stories: int
    pending_reports: int
    new_users_last_7_days: int


# ----- User management -----
class ManageUserRequest(BaseModel):
    user_id: int
    action: Literal["suspend", "activate", "deactivate"]
    reason: Optional[str] = Field(None, max_length=500)
    duration_days: Optional[int] = Field(None, ge=1, le=3650)


# ----- Reports -----
class ReportCreate(BaseModel):
    content_id: str = Field(..., min_length=1, max_length=64)
    content_type: Literal["post", "comment", "user"]
    reason: str = Field(..., min_length=1, max_length=2000)
    severity: Literal["low", "medium", "high", "critical"] = "medium"


class ReportHandle(BaseModel):
    action: str = Field(..., min_length=1, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)


class ReportResponse(BaseModel):
    id: int
    content_id: str
    content_type: str
    reporter_id: int
    reason: str
    severity: str
    status: str
    moderator_notes: Optional[str] = None
    handled_by: Optional[int] = None
    handled_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportListResponse(BaseModel):
    reports: List[ReportResponse]
    total: int
    page: int
    limit: int


class ReportStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_severity: Dict[str, int]
    by_content_type: Dict[str, int]


# ----- Moderation -----
class ModerateContentRequest(BaseModel):
    content_id: int
    content_type: str
    action: str


# ----- Audit -----
class AuditLogCreate(BaseModel):
    action: str = Field(..., min_length=1, max_length=100)
    target_type: str = Field(..., min_length=1, max_length=50)
    target_id: Optional[str] = Field(None, max_length=64)
    details: Dict[str, Any] = Field(default_factory=dict)


class AuditLogResponse(BaseModel):
    id: int
    admin_id: int
    action: str
    target_type: str
    target_id: Optional[str] = None
    details: Dict[str, Any]
    ip_address: Optional[str] = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    logs: List[AuditLogResponse]
    total: int
    page: int
    limit: int


class AuditStats(BaseModel):
    period_days: int
    total: int
    by_action: Dict[str, int]
    by_admin: Dict[str, int]


# ----- Cascades -----
class CascadeResultResponse(BaseModel):
    root_type: str
    root_id: int
    completed_steps: List[str]
    deleted: Dict[str, int]
    media_failures: List[str]
