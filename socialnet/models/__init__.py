"""
SQLAlchemy Models for SocialNet
"""

from ..database import Base
from .user import User, user_blocks, user_follows
from .post import ModerationStatus, Post, post_likers, post_saves
from .comment import Comment, comment_likers
from .like import Like
from .story import Story, StoryContentType, story_views
from .notification import Notification, NotificationType
from .report import Report, ReportSeverity, ReportStatus
from .audit_log import AuditLog
from .admin import Admin

# Export all models
__all__ = [
    "Base",
    "User",
    "user_follows",
    "user_blocks",
    "Post",
    "post_likers",
    "post_saves",
    "ModerationStatus",
    "Comment",
    "comment_likers",
    "Like",
    "Story",
    "StoryContentType",
    "story_views",
    "Notification",
    "NotificationType",
    "Report",
    "ReportSeverity",
    "ReportStatus",
    "AuditLog",
    "Admin",
]
