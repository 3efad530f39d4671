"""Post, feed and like endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from socialnet.api.deps import get_current_active_user, get_db
from socialnet.config import settings
from socialnet.models.user import User
from socialnet.schemas.comment import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    CommentStatsResponse,
)
from socialnet.schemas.post import (
    FeedResponse,
    PostCreate,
    PostLikeResponse,
    PostListResponse,
    PostResponse,
    PostSaveResponse,
    PostShareRequest,
    PostUpdate,
)
from socialnet.services.comment_service import comment_service
from socialnet.services.feed_service import feed_service
from socialnet.services.post_service import post_service

router = APIRouter(
    prefix="/posts",
    tags=["Posts"],
)


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new post",
    description="""
    Publish a post with text and/or media URLs (upload files through `/media/upload` first).

    Followers receive a `new_post` notification, mentioned users a `mention` one.
    """,
)
def create_post(
    post_in: PostCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostResponse:
    post = post_service.create_post(db, author_id=current_user.id, post_in=post_in)
    return PostResponse.model_validate(post)


@router.get(
    "/feed",
    response_model=FeedResponse,
    summary="Home feed",
    description="""
    Blend of recent posts from followed users (60%), random posts from other
    users (35%) and the caller's own posts (5%), shuffled on every request.
    """,
)
def get_feed(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.FEED_DEFAULT_LIMIT, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> FeedResponse:
    posts = feed_service.get_feed(db, user_id=current_user.id, page=page, limit=limit)
    return FeedResponse(posts=[PostResponse.model_validate(p) for p in posts], page=page, limit=limit)


@router.get(
    "/feed/following",
    response_model=PostListResponse,
    summary="Chronological feed of followed users",
)
def get_following_feed(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostListResponse:
    posts, total = feed_service.get_following_feed(db, user_id=current_user.id, skip=skip, limit=limit)
    return PostListResponse(
        posts=[PostResponse.model_validate(p) for p in posts],
        total=total,
        has_more=(skip + len(posts) < total),
    )


@router.get(
    "/popular",
    response_model=List[PostResponse],
    summary="Most liked and commented posts",
)
def get_popular_posts(
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> List[PostResponse]:
    return [PostResponse.model_validate(p) for p in post_service.get_popular(db, limit=limit)]


@router.get(
    "/search",
    response_model=PostListResponse,
    summary="Search posts by text",
)
def search_posts(
    q: str = Query(..., min_length=1, max_length=100),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostListResponse:
    posts, total = post_service.search(db, query=q, skip=skip, limit=limit)
    return PostListResponse(
        posts=[PostResponse.model_validate(p) for p in posts],
        total=total,
        has_more=(skip + len(posts) < total),
    )


@router.get(
    "/saved",
    response_model=PostListResponse,
    summary="Posts bookmarked by the caller",
)
def get_saved_posts(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostListResponse:
    posts, total = post_service.get_saved_posts(db, user_id=current_user.id, skip=skip, limit=limit)
    return PostListResponse(
        posts=[PostResponse.model_validate(p) for p in posts],
        total=total,
        has_more=(skip + len(posts) < total),
    )


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    summary="Get post",
)
def get_post(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostResponse:
    return PostResponse.model_validate(post_service.get_post(db, post_id))


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    summary="Update own post",
)
def update_post(
    post_id: int,
    post_in: PostUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostResponse:
    post = post_service.update_post(db, post_id=post_id, user_id=current_user.id, post_in=post_in)
    return PostResponse.model_validate(post)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete own post",
    description="Deletes the post with its comments, likes, notifications and hosted media.",
)
def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> None:
    post_service.delete_post(db, post_id=post_id, user_id=current_user.id)


@router.post(
    "/{post_id}/like",
    response_model=PostLikeResponse,
    summary="Like or unlike a post",
)
def toggle_like(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostLikeResponse:
    like, post = post_service.toggle_like(db, post_id=post_id, user_id=current_user.id)
    return PostLikeResponse(
        post_id=post.id,
        is_liked=like.is_liked,
        like_count=post.like_count,
        message="Post liked" if like.is_liked else "Post unliked",
    )


@router.post(
    "/{post_id}/save",
    response_model=PostSaveResponse,
    summary="Bookmark or un-bookmark a post",
)
def toggle_save(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostSaveResponse:
    action, post = post_service.toggle_save(db, post_id=post_id, user_id=current_user.id)
    return PostSaveResponse(post_id=post.id, action=action, save_count=post.save_count)


@router.post(
    "/{post_id}/share",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Share a post",
    description="Publishes a new post pointing at the original and notifies its author.",
)
def share_post(
    post_id: int,
    share_in: Optional[PostShareRequest] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> PostResponse:
    text = share_in.text if share_in else None
    share = post_service.share_post(db, post_id=post_id, user_id=current_user.id, text=text)
    return PostResponse.model_validate(share)


@router.get(
    "/{post_id}/comments",
    response_model=CommentListResponse,
    summary="Top-level comments of a post",
)
def list_comments(
    post_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> CommentListResponse:
    comments, total = comment_service.list_comments(db, post_id=post_id, skip=skip, limit=limit)
    return CommentListResponse(comments=[CommentResponse.model_validate(c) for c in comments], total=total)


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
)
def add_comment(
    post_id: int,
    comment_in: CommentCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> CommentResponse:
    comment = comment_service.add_comment(db, post_id=post_id, user_id=current_user.id, comment_in=comment_in)
    return CommentResponse.model_validate(comment)


@router.get(
    "/{post_id}/comments/popular",
    response_model=List[CommentResponse],
    summary="Most liked comments of a post",
)
def popular_comments(
    post_id: int,
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> List[CommentResponse]:
    comments = comment_service.get_popular_comments(db, post_id=post_id, limit=limit)
    return [CommentResponse.model_validate(c) for c in comments]


@router.get(
    "/{post_id}/comments/stats",
    response_model=CommentStatsResponse,
    summary="Comment and reply counts of a post",
)
def comment_stats(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> CommentStatsResponse:
    stats = comment_service.get_comment_stats(db, post_id=post_id)
    return CommentStatsResponse(
        post_id=stats["post_id"],
        total_comments=stats["total_comments"],
        total_replies=stats["total_replies"],
        popular_comments=[CommentResponse.model_validate(c) for c in stats["popular_comments"]],
    )
