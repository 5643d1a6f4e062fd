"""Admin user management endpoints."""

from fastapi import APIRouter, status

from app.core.dependencies import CurrentUser, DbSession
from app.schemas.auth import SuccessResponse
from app.schemas.user import (
    UserCreate,
    UserDetail,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from app.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(current_user: CurrentUser, db: DbSession):
    """List all users, newest first."""
    users = await UserService.list_users(db, current_user)
    return UserListResponse(users=[UserDetail.model_validate(u) for u in users])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(data: UserCreate, current_user: CurrentUser, db: DbSession):
    """
    Create a user.

    ADMIN and SUPER_ADMIN only; creating an ADMIN requires SUPER_ADMIN.
    """
    user = await UserService.create_user(db, current_user, data)
    return UserResponse(user=UserDetail.model_validate(user))


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, data: UserUpdate, current_user: CurrentUser, db: DbSession):
    user = await UserService.update_user(db, current_user, user_id, data)
    return UserResponse(user=UserDetail.model_validate(user))


@router.delete("/{user_id}", response_model=SuccessResponse)
async def deactivate_user(user_id: str, current_user: CurrentUser, db: DbSession):
    """Deactivate a user (soft delete)."""
    await UserService.deactivate_user(db, current_user, user_id)
    return SuccessResponse()
