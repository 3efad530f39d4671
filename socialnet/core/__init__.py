"""Core module exports."""

from .security import (
    create_access_token,
    decode_token,
    get_password_hash,
    get_token_subject,
    verify_password,
    ALGORITHM,
    ACCESS_TOKEN_EXPIRE_DAYS,
    TOKEN_TYPE_ADMIN,
    TOKEN_TYPE_USER,
)

__all__ = [
    "create_access_token",
    "decode_token",
    "get_password_hash",
    "get_token_subject",
    "verify_password",
    "ALGORITHM",
    "ACCESS_TOKEN_EXPIRE_DAYS",
    "TOKEN_TYPE_ADMIN",
    "TOKEN_TYPE_USER",
]
