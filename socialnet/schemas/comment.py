"""Pydantic schemas for Comment."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from socialnet.models.comment import MAX_COMMENT_TEXT_LENGTH
from socialnet.schemas.user import UserSummary


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=MAX_COMMENT_TEXT_LENGTH)
    parent_comment_id: Optional[int] = Field(None, gt=0)
    images: List[str] = Field(default_factory=list, max_length=4)
    videos: List[str] = Field(default_factory=list, max_length=1)


class CommentUpdate(BaseModel):
    text: str = Field(..., min_length=1, max_length=MAX_COMMENT_TEXT_LENGTH)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    author_user_id: int
    author: Optional[UserSummary] = None
    parent_comment_id: Optional[int] = None
    text: str
    images: List[str] = []
    videos: List[str] = []
    like_count: int
    moderation_status: str
    is_edited: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentListResponse(BaseModel):
    comments: List[CommentResponse]
    total: int


class CommentLikeResponse(BaseModel):
    comment_id: int
    action: str
    like_count: int


class CommentStatsResponse(BaseModel):
    post_id: int
    total_comments: int
    total_replies: int
    popular_comments: List[CommentResponse]
