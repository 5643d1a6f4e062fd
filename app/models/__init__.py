"""Database models."""

from app.models.user import User, UserRole
from app.models.refresh_token import RefreshToken

__all__ = [
    "User",
    "UserRole",
    "RefreshToken",
]
