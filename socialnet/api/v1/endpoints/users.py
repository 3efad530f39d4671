"""User profile, search and social graph endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from socialnet.api.deps import get_current_active_user, get_db
from socialnet.models.user import User
from socialnet.schemas.post import PostListResponse, PostResponse
from socialnet.schemas.user import (
    DeactivateRequest,
    DeviceTokenRequest,
    FollowResponse,
    PrivacySettingsResponse,
    PrivacySettingsUpdate,
    UserListResponse,
    UserResponse,
    UserSummary,
    UserUpdate,
)
from socialnet.services.post_service import post_service
from socialnet.services.user_service import user_service

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


@router.get(
    "/search",
    response_model=UserListResponse,
    summary="Search users by username or full name",
)
def search_users(
    q: str = Query(..., min_length=1, max_length=100),
    skip: int = Query(0, ge=0),
    limit: int = Query(25, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> UserListResponse:
    users, total = user_service.search(db, query=q, requester_id=current_user.id, skip=skip, limit=limit)
    return UserListResponse(users=[UserSummary.model_validate(u) for u in users], total=total)


@router.get(
    "/suggested",
    response_model=List[UserSummary],
    summary="Suggested users to follow",
)
def suggested_users(
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> List[UserSummary]:
    users = user_service.get_suggested(db, user_id=current_user.id, limit=limit)
    return [UserSummary.model_validate(u) for u in users]


@router.put(
    "/me",
    response_model=UserResponse,
    summary="Update own profile",
)
def update_me(
    user_in: UserUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    user = user_service.update_profile(db, current_user, user_in)
    return UserResponse(**user_service.get_profile(db, user.id))


@router.post(
    "/me/deactivate",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate own account",
)
def deactivate_me(
    request: DeactivateRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> None:
    user_service.deactivate(db, current_user, request.reason)


@router.put(
    "/me/device-token",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Register push notification token",
)
def register_device_token(
    request: DeviceTokenRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> None:
    user_service.register_device_token(db, current_user, request.token)


@router.get(
    "/me/privacy",
    response_model=PrivacySettingsResponse,
    summary="Own privacy settings",
)
def get_privacy_settings(
    current_user: User = Depends(get_current_active_user),
) -> PrivacySettingsResponse:
    return PrivacySettingsResponse(**user_service.get_privacy_settings(current_user))


@router.put(
    "/me/privacy",
    response_model=PrivacySettingsResponse,
    summary="Update own privacy settings",
    description="""
    Each of `profile`, `posts` and `friends_list` is `public`, `friends`
    (mutual followers only) or `private` (only you).
    """,
)
def update_privacy_settings(
    settings_in: PrivacySettingsUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PrivacySettingsResponse:
    return PrivacySettingsResponse(**user_service.update_privacy_settings(db, current_user, settings_in))


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user profile",
)
def get_user(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    return UserResponse(**user_service.get_profile(db, user_id, viewer_id=current_user.id))


@router.get(
    "/{user_id}/posts",
    response_model=PostListResponse,
    summary="Posts of a user",
)
def get_user_posts(
    user_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostListResponse:
    posts, total = post_service.get_user_posts(
        db, user_id=user_id, viewer_id=current_user.id, skip=skip, limit=limit
    )
    return PostListResponse(
        posts=[PostResponse.model_validate(p) for p in posts],
        total=total,
        has_more=(skip + len(posts) < total),
    )


@router.post(
    "/{user_id}/follow",
    response_model=FollowResponse,
    summary="Follow or unfollow a user",
)
def toggle_follow(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> FollowResponse:
    action, follower_count = user_service.toggle_follow(db, follower_id=current_user.id, target_id=user_id)
    return FollowResponse(target_id=user_id, action=action, follower_count=follower_count)


@router.get(
    "/{user_id}/followers",
    response_model=List[UserSummary],
    summary="Followers of a user",
)
def get_followers(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> List[UserSummary]:
    users = user_service.get_followers(db, user_id, viewer_id=current_user.id)
    return [UserSummary.model_validate(u) for u in users]


@router.get(
    "/{user_id}/following",
    response_model=List[UserSummary],
    summary="Users followed by a user",
)
def get_following(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> List[UserSummary]:
    users = user_service.get_following(db, user_id, viewer_id=current_user.id)
    return [UserSummary.model_validate(u) for u in users]


@router.post(
    "/{user_id}/block",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Block a user",
)
def block_user(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> None:
    user_service.block(db, blocker_id=current_user.id, target_id=user_id)


@router.delete(
    "/{user_id}/block",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unblock a user",
)
def unblock_user(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> None:
    user_service.unblock(db, blocker_id=current_user.id, target_id=user_id)
