"""Pydantic schemas for Post."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from socialnet.models.post import MAX_POST_IMAGES, MAX_POST_TEXT_LENGTH, MAX_POST_VIDEOS
from socialnet.schemas.user import UserSummary


class PostCreate(BaseModel):
    """Schema for creating a new post."""
    text: Optional[str] = Field(None, max_length=MAX_POST_TEXT_LENGTH)
    images: List[str] = Field(default_factory=list, max_length=MAX_POST_IMAGES)
    videos: List[str] = Field(default_factory=list, max_length=MAX_POST_VIDEOS)
    mentions: List[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def require_content(self):
        if not (self.text and self.text.strip()) and not self.images and not self.videos:
            raise ValueError("A post needs text or at least one media item")
        return self


class PostUpdate(BaseModel):
    """Schema for updating a post."""
    text: Optional[str] = Field(None, max_length=MAX_POST_TEXT_LENGTH)
    images: Optional[List[str]] = Field(None, max_length=MAX_POST_IMAGES)
    videos: Optional[List[str]] = Field(None, max_length=MAX_POST_VIDEOS)


class PostResponse(BaseModel):
    """Schema for Post response."""
    id: int
    author_user_id: int
    author: Optional[UserSummary] = None
    text: Optional[str] = None
    images: List[str] = []
    videos: List[str] = []
    liker_ids: List[int] = []
    shared_post_id: Optional[int] = None
    is_share: bool = False
    like_count: int
    comment_count: int
    save_count: int = 0
    share_count: int = 0
    moderation_status: str
    is_edited: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostListResponse(BaseModel):
    """Response for listing posts."""
    posts: List[PostResponse]
    total: int
    has_more: bool = Field(..., description="Whether there are more posts to load")


class FeedResponse(BaseModel):
    posts: List[PostResponse]
    page: int
    limit: int


class PostShareRequest(BaseModel):
    """Optional caption for a share."""
    text: Optional[str] = Field(None, max_length=MAX_POST_TEXT_LENGTH)


class PostSaveResponse(BaseModel):
    post_id: int
    action: str
    save_count: int


class PostLikeResponse(BaseModel):
    """Response for like action."""
    post_id: int
    is_liked: bool
    like_count: int
    message: str
