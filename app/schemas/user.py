"""User schemas for API validation."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.models.user import UserRole


class CamelModel(BaseModel):
    """Serializes field names as camelCase; accepts either form on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AssignableRole(str, Enum):
    """Roles that can be granted through the API. SUPER_ADMIN is seeded only."""
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"


class UserSummary(CamelModel):
    """Public view of a user. Never carries the password hash."""
    id: str
    email: str
    name: str
    role: UserRole


class UserDetail(UserSummary):
    """User as listed by admins."""
    is_active: bool = Field(serialization_alias="active")
    created_at: datetime


class UserCreate(CamelModel):
    """Schema for creating a user (admin only)."""
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    role: AssignableRole


class UserUpdate(CamelModel):
    """Partial update of a user (admin only)."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=72)
    role: Optional[AssignableRole] = None
    active: Optional[bool] = None


class UserResponse(BaseModel):
    user: UserDetail


class UserListResponse(BaseModel):
    users: List[UserDetail]
