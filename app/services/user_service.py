"""
User administration: list, create, update and deactivate users.

Rules:
- only SUPER_ADMIN and ADMIN manage users
- only SUPER_ADMIN creates ADMINs or promotes users to ADMIN
- deactivation is a soft delete, and nobody deactivates themselves
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError, UserExistsError
from app.models.user import User, UserRole
from app.schemas.user import AssignableRole, UserCreate, UserUpdate
from app.services import password_service

logger = logging.getLogger(__name__)

USER_MANAGERS = (UserRole.SUPER_ADMIN, UserRole.ADMIN)


class UserService:
    """Admin-facing user management."""

    @staticmethod
    def ensure_can_manage(actor: User) -> None:
        if actor.role not in USER_MANAGERS:
            raise ForbiddenError()

    @staticmethod
    def _ensure_can_grant(actor: User, role: Optional[AssignableRole], verb: str) -> None:
        if role == AssignableRole.ADMIN and actor.role != UserRole.SUPER_ADMIN:
            raise ForbiddenError(f"Only SUPER_ADMIN can {verb} ADMIN users")

    # ─── Lookups ────────────────────────────────
    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_users(db: AsyncSession, actor: User) -> List[User]:
        UserService.ensure_can_manage(actor)
        result = await db.execute(select(User).order_by(User.created_at.desc()))
        return list(result.scalars().all())

    # ─── Create ─────────────────────────────────
    @staticmethod
    async def create_user(db: AsyncSession, actor: User, data: UserCreate) -> User:
        UserService.ensure_can_manage(actor)
        UserService._ensure_can_grant(actor, data.role, "create")

        email = data.email.lower()
        if await UserService.get_user_by_email(db, email):
            raise UserExistsError()

        user = User(
            email=email,
            hashed_password=password_service.hash_password(data.password),
            name=data.name,
            role=UserRole(data.role.value),
            is_active=True,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"User {actor.id[:8]}... created {user.role.value} user {user.id[:8]}...")
        return user

    # ─── Update ─────────────────────────────────
    @staticmethod
    async def update_user(db: AsyncSession, actor: User, user_id: str, data: UserUpdate) -> User:
        UserService.ensure_can_manage(actor)
        UserService._ensure_can_grant(actor, data.role, "assign")

        user = await UserService.get_user_by_id(db, user_id)
        if not user:
            raise NotFoundError("User not found")

        if data.email is not None and data.email.lower() != user.email:
            if await UserService.get_user_by_email(db, data.email):
                raise UserExistsError()
            user.email = data.email.lower()
        if data.name is not None:
            user.name = data.name
        if data.password is not None:
            user.hashed_password = password_service.hash_password(data.password)
        if data.role is not None:
            user.role = UserRole(data.role.value)
        if data.active is not None:
            user.is_active = data.active

        await db.flush()
        await db.refresh(user)
        return user

    # ─── Deactivate ─────────────────────────────
    @staticmethod
    async def deactivate_user(db: AsyncSession, actor: User, user_id: str) -> None:
        UserService.ensure_can_manage(actor)

        if user_id == actor.id:
            raise BadRequestError("Cannot deactivate yourself", code="CANNOT_DEACTIVATE_SELF")

        user = await UserService.get_user_by_id(db, user_id)
        if not user:
            raise NotFoundError("User not found")

        user.is_active = False
        await db.flush()
        logger.info(f"User {actor.id[:8]}... deactivated user {user.id[:8]}...")
