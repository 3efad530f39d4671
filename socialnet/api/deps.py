"""FastAPI dependency injection functions for authentication and database access."""

import logging
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from socialnet.core.exceptions import ForbiddenError, UnauthorizedError
from socialnet.core.security import TOKEN_TYPE_ADMIN, TOKEN_TYPE_USER, get_token_subject
from socialnet.crud import crud_admin, crud_user
from socialnet.database import get_db
from socialnet.models.admin import ADMIN_PERMISSIONS, Admin
from socialnet.models.user import User

logger = logging.getLogger(__name__)

# OAuth2 Bearer token schemes
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")
admin_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/admin/token", scheme_name="AdminBearer")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get current authenticated user from JWT token.

    Raises:
        UnauthorizedError: if token is invalid, not a user token, or user not found
    """
    user_id = get_token_subject(token, expected_type=TOKEN_TYPE_USER)
    if user_id is None:
        logger.warning("[AUTH] Rejected user token")
        raise UnauthorizedError()

    user = crud_user.get(db, user_id)
    if user is None:
        logger.warning(f"[AUTH] User not found for id: {user_id}")
        raise UnauthorizedError()

    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Dependency to verify current user is active and not suspended.

    Raises:
        ForbiddenError: if user is deactivated or suspended
    """
    if not current_user.is_active:
        raise ForbiddenError("Inactive user")
    if current_user.is_suspended:
        raise ForbiddenError("Account suspended")
    return current_user


def get_current_admin(
    token: str = Depends(admin_oauth2_scheme),
    db: Session = Depends(get_db)
) -> Admin:
    """Dependency to get the authenticated, active admin."""
    admin_id = get_token_subject(token, expected_type=TOKEN_TYPE_ADMIN)
    if admin_id is None:
        logger.warning("[AUTH] Rejected admin token")
        raise UnauthorizedError()

    admin = crud_admin.get(db, admin_id)
    if admin is None:
        raise UnauthorizedError()
    if not admin.is_active:
        raise ForbiddenError("Inactive admin")
    return admin


def require_admin_permission(permission: str) -> Callable:
    """
    Factory function to create a permission-checking admin dependency.

    Example:
        @router.get("/admin/users")
        def list_users(admin: Admin = Depends(require_admin_permission("can_manage_users"))):
            ...
    """
    if permission not in ADMIN_PERMISSIONS:
        raise ValueError(f"Unknown admin permission: {permission}")

    def permission_checker(
        current_admin: Admin = Depends(get_current_admin)
    ) -> Admin:
        if not current_admin.has_permission(permission):
            raise ForbiddenError(f"Not enough permissions. Required: {permission}")
        return current_admin

    return permission_checker


def get_client_ip(request: Request) -> Optional[str]:
    """Client address, honoring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


__all__ = [
    "oauth2_scheme",
    "admin_oauth2_scheme",
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_current_admin",
    "require_admin_permission",
    "get_client_ip",
]
