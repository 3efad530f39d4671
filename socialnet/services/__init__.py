"""Service singletons for SocialNet."""

from .admin_service import admin_service, AdminService
from .comment_service import comment_service, CommentService
from .deletion_service import CascadeError, CascadeResult, CommentDeletePolicy, deletion_service, DeletionService
from .feed_service import feed_service, FeedService
from .firebase_service import firebase_service, FirebaseService
from .media_service import media_service, MediaService
from .moderation_service import ContentKind, moderation_service, ModerationService
from .notification_service import notification_service, NotificationService
from .post_service import post_service, PostService
from .story_service import story_service, StoryService
from .user_service import user_service, UserService

__all__ = [
    "admin_service",
    "AdminService",
    "CascadeError",
    "CascadeResult",
    "CommentDeletePolicy",
    "comment_service",
    "CommentService",
    "ContentKind",
    "deletion_service",
    "DeletionService",
    "feed_service",
    "FeedService",
    "firebase_service",
    "FirebaseService",
    "media_service",
    "MediaService",
    "moderation_service",
    "ModerationService",
    "notification_service",
    "NotificationService",
    "post_service",
    "PostService",
    "story_service",
    "StoryService",
    "user_service",
    "UserService",
]
