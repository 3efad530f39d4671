"""API v1 router aggregator."""

from fastapi import APIRouter

from socialnet.api.v1.endpoints import (
    admin,
    auth,
    comments,
    media,
    notifications,
    posts,
    reports,
    stories,
    users,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(posts.router)
api_router.include_router(comments.router)
api_router.include_router(stories.router)
api_router.include_router(notifications.router)
api_router.include_router(media.router)
api_router.include_router(reports.router)
api_router.include_router(admin.router)

__all__ = ["api_router"]
