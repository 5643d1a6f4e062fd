"""
Persistence for refresh tokens.

Rows are keyed by the SHA-256 of the raw token. Revocation is a conditional
``UPDATE ... WHERE revoked_at IS NULL`` so that of two callers racing on the
same row, exactly one observes the transition.
"""

import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictError
from app.models.refresh_token import RefreshToken

logger = logging.getLogger(__name__)


def hash_token(raw_token: str) -> str:
    """One-way digest stored in place of the raw token."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


class RefreshTokenStore:
    """Refresh token rows for one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(self, token_hash: str, user_id: str, expires_at: datetime) -> RefreshToken:
        """Insert a new row. Raises ConflictError if the hash already exists."""
        row = RefreshToken(token_hash=token_hash, user_id=user_id, expires_at=expires_at)
        try:
            # SAVEPOINT keeps the caller's transaction usable after a collision
            async with self.db.begin_nested():
                self.db.add(row)
        except IntegrityError:
            logger.warning(f"Refresh token hash collision for user {user_id[:8]}...")
            raise ConflictError("Refresh token hash already exists")
        return row

    async def lookup(self, token_hash: str) -> Optional[RefreshToken]:
        """Row for ``token_hash`` with its user loaded, or None."""
        result = await self.db.execute(
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .options(selectinload(RefreshToken.user))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def revoke(self, row_id: str) -> bool:
        """
        Mark a row revoked.

        Returns True when this call moved the row from unrevoked to revoked,
        False when it was already revoked (or gone). Never raises for either.
        """
        result = await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.id == row_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def revoke_all_by_token_hash(self, token_hash: str) -> int:
        """Revoke every unrevoked row with this hash. Returns the number changed."""
        result = await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.token_hash == token_hash, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
