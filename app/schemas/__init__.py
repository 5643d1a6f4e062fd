"""Pydantic schemas for API request/response validation."""

from app.schemas.auth import (
    LoginRequest,
    LoginResult,
    RefreshTokenRequest,
    SuccessResponse,
    TokenPair,
)
from app.schemas.user import (
    UserCreate,
    UserDetail,
    UserListResponse,
    UserResponse,
    UserSummary,
    UserUpdate,
)

__all__ = [
    "LoginRequest",
    "LoginResult",
    "RefreshTokenRequest",
    "SuccessResponse",
    "TokenPair",
    "UserCreate",
    "UserDetail",
    "UserListResponse",
    "UserResponse",
    "UserSummary",
    "UserUpdate",
]
