#!/usr/bin/env python3
"""
Create the first SUPER_ADMIN account.

Usage:
    SUPER_ADMIN_EMAIL=you@example.com SUPER_ADMIN_PASSWORD=secret python seed_super_admin.py

Does nothing if a user with that email already exists.
"""

import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.db.session import AsyncSessionLocal, close_db, init_db
from app.models.user import User, UserRole
from app.services import password_service
from app.services.session_service import mask_email
from app.services.user_service import UserService

logger = logging.getLogger("wms.seed")


async def seed_super_admin(db: AsyncSession, email: str, password: str, name: str) -> bool:
    """Insert the SUPER_ADMIN user. Returns False when the email is taken."""
    email = email.strip().lower()
    if await UserService.get_user_by_email(db, email):
        logger.info(f"Super admin already exists: {mask_email(email)}")
        return False

    db.add(
        User(
            email=email,
            hashed_password=password_service.hash_password(password),
            name=name,
            role=UserRole.SUPER_ADMIN,
            is_active=True,
        )
    )
    await db.flush()
    logger.info(f"Super admin created: {mask_email(email)}")
    return True


async def main(settings: Settings) -> int:
    if not settings.super_admin_email or not settings.super_admin_password:
        logger.error("Missing SUPER_ADMIN_EMAIL or SUPER_ADMIN_PASSWORD")
        return 1

    await init_db()
    try:
        async with AsyncSessionLocal() as db:
            await seed_super_admin(
                db,
                settings.super_admin_email,
                settings.super_admin_password,
                settings.super_admin_name,
            )
            await db.commit()
    finally:
        await close_db()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)-8s | %(message)s")
    sys.exit(asyncio.run(main(get_settings())))
