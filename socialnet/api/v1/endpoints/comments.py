"""Comment endpoints (creation lives under /posts/{post_id}/comments)."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from socialnet.api.deps import get_current_active_user, get_db
from socialnet.models.user import User
from socialnet.schemas.comment import (
    CommentLikeResponse,
    CommentListResponse,
    CommentResponse,
    CommentUpdate,
)
from socialnet.services.comment_service import comment_service

router = APIRouter(
    prefix="/comments",
    tags=["Comments"],
)


@router.get(
    "/{comment_id}/replies",
    response_model=CommentListResponse,
    summary="Replies to a comment",
)
def list_replies(
    comment_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> CommentListResponse:
    replies, total = comment_service.list_replies(db, comment_id=comment_id, skip=skip, limit=limit)
    return CommentListResponse(comments=[CommentResponse.model_validate(c) for c in replies], total=total)


@router.put(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Edit own comment",
)
def update_comment(
    comment_id: int,
    comment_in: CommentUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> CommentResponse:
    comment = comment_service.update_comment(
        db, comment_id=comment_id, user_id=current_user.id, comment_in=comment_in
    )
    return CommentResponse.model_validate(comment)


@router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a comment",
    description="Allowed for the comment author and the post owner. Replies follow the configured delete policy.",
)
def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> None:
    comment_service.delete_comment(db, comment_id=comment_id, user_id=current_user.id)


@router.post(
    "/{comment_id}/like",
    response_model=CommentLikeResponse,
    summary="Like or unlike a comment",
)
def toggle_comment_like(
    comment_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> CommentLikeResponse:
    action, comment = comment_service.toggle_like(db, comment_id=comment_id, user_id=current_user.id)
    return CommentLikeResponse(comment_id=comment.id, action=action, like_count=comment.like_count)
