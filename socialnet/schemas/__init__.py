from .user import (
	UserCreate,
	UserUpdate,
	UserLogin,
	UserSummary,
	UserResponse,
	UserListResponse,
	TokenResponse,
	FollowResponse,
	DeactivateRequest,
	DeviceTokenRequest,
	PrivacySettingsUpdate,
	PrivacySettingsResponse,
)
from .post import (
	PostCreate,
	PostUpdate,
	PostResponse,
	PostListResponse,
	FeedResponse,
	PostLikeResponse,
	PostShareRequest,
	PostSaveResponse,
)
from .comment import (
	CommentCreate,
	CommentUpdate,
	CommentResponse,
	CommentListResponse,
	CommentLikeResponse,
	CommentStatsResponse,
)
from .story import (
	StoryCreate,
	StoryResponse,
	StoryListResponse,
	StoryViewResponse,
	ExpiredStoriesResponse,
)
from .notification import (
	NotificationResponse,
	NotificationListResponse,
	UnreadCountResponse,
	MarkAllReadResponse,
	SystemNotificationCreate,
)
from .media import MediaUploadResponse
from .admin import (
	AdminCreate,
	AdminLogin,
	AdminResponse,
	DashboardStats,
	ManageUserRequest,
	ReportCreate,
	ReportHandle,
	ReportResponse,
	ReportListResponse,
	ReportStats,
	ModerateContentRequest,
	AuditLogCreate,
	AuditLogResponse,
	AuditLogListResponse,
	AuditStats,
	CascadeResultResponse,
)

__all__ = [
	"UserCreate",
	"UserUpdate",
	"UserLogin",
	"UserSummary",
	"UserResponse",
	"UserListResponse",
	"TokenResponse",
	"FollowResponse",
	"DeactivateRequest",
	"DeviceTokenRequest",
	"PrivacySettingsUpdate",
	"PrivacySettingsResponse",
	"PostCreate",
	"PostUpdate",
	"PostResponse",
	"PostListResponse",
	"FeedResponse",
	"PostLikeResponse",
	"PostShareRequest",
	"PostSaveResponse",
	"CommentCreate",
	"CommentUpdate",
	"CommentResponse",
	"CommentListResponse",
	"CommentLikeResponse",
	"CommentStatsResponse",
	"StoryCreate",
	"StoryResponse",
	"StoryListResponse",
	"StoryViewResponse",
	"ExpiredStoriesResponse",
	"NotificationResponse",
	"NotificationListResponse",
	"UnreadCountResponse",
	"MarkAllReadResponse",
	"SystemNotificationCreate",
	"AdminCreate",
	"AdminLogin",
	"AdminResponse",
	"DashboardStats",
	"ManageUserRequest",
	"ReportCreate",
	"ReportHandle",
	"ReportResponse",
	"ReportListResponse",
	"ReportStats",
	"ModerateContentRequest",
	"AuditLogCreate",
	"AuditLogResponse",
	"AuditLogListResponse",
	"AuditStats",
	"CascadeResultResponse",
	"MediaUploadResponse",
]
