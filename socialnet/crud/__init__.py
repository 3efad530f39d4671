"""CRUD singletons for SocialNet models."""

from .base import CRUDBase
from .admin import crud_admin
from .audit_log import crud_audit_log
from .comment import crud_comment
from .like import crud_like
from .notification import crud_notification
from .post import crud_post
from .report import crud_report
from .story import crud_story
from .user import crud_user

__all__ = [
    "CRUDBase",
    "crud_admin",
    "crud_audit_log",
    "crud_comment",
    "crud_like",
    "crud_notification",
    "crud_post",
    "crud_report",
    "crud_story",
    "crud_user",
]
