"""Pydantic schemas for Story."""

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from socialnet.schemas.user import UserSummary


class StoryCreate(BaseModel):
    """Story from an already hosted media URL."""
    content_type: Literal["image", "video"]
    media_url: str = Field(..., min_length=1, max_length=500)


class StoryResponse(BaseModel):
    id: int
    user_id: int
    user: UserSummary
    content_type: str
    media_url: str
    view_count: int
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StoryListResponse(BaseModel):
    stories: List[StoryResponse]


class StoryViewResponse(BaseModel):
    story_id: int
    view_count: int


class ExpiredStoriesResponse(BaseModel):
    deleted_count: int
