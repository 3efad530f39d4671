"""Pydantic schemas for `User` domain objects."""

import re
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{3,30}$")
PHONE_PATTERN = re.compile(r"^\+?\d{8,15}$")


def _check_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not PHONE_PATTERN.match(v):
        raise ValueError("Phone must be 8-15 digits, optional leading '+'")
    return v


class UserCreate(BaseModel):
    username: str
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    full_name: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username must be 3-30 letters, digits or underscores")
        return v

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "username": "alice",
            "email": "alice@example.com",
            "password": "StrongPass!234",
            "full_name": "Alice Martin",
            "phone_number": "+33612345678",
        }
    })


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = Field(None, max_length=1000)
    profile_picture_url: Optional[str] = Field(None, max_length=500)
    phone_number: Optional[str] = None

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)


class UserLogin(BaseModel):
    identifier: str = Field(..., description="Username or email")
    password: str

    model_config = ConfigDict(json_schema_extra={
        "example": {"identifier": "alice", "password": "StrongPass!234"}
    })


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int


class UserSummary(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    profile_picture_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    email: str
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool
    suspended_until: Optional[datetime] = None
    follower_count: int = 0
    following_count: int = 0
    post_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FollowResponse(BaseModel):
    target_id: int
    action: str
    follower_count: int


class DeactivateRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class DeviceTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=500)


class UserListResponse(BaseModel):
    users: List[UserSummary]
    total: int


PrivacyLevel = Literal["public", "friends", "private"]


class PrivacySettingsUpdate(BaseModel):
    """Only the given settings change."""
    profile: Optional[PrivacyLevel] = None
    posts: Optional[PrivacyLevel] = None
    friends_list: Optional[PrivacyLevel] = None


class PrivacySettingsResponse(BaseModel):
    profile: PrivacyLevel
    posts: PrivacyLevel
    friends_list: PrivacyLevel
