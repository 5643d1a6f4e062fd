"""
Login, refresh-token rotation and logout.

Refresh tokens are single use: every successful refresh revokes the presented
row and records a new one in the same transaction, revoke first. Internal
failure reasons are attached to the raised error for logging; clients only
ever see the fixed code and message of each error type.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AccountDisabledError,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from app.models.refresh_token import as_utc
from app.models.user import User
from app.schemas.auth import LoginResult, TokenPair
from app.schemas.user import UserSummary
from app.services import password_service
from app.services.refresh_token_store import RefreshTokenStore, hash_token
from app.services.token_service import TokenClaims, TokenService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

# Attempts at recording a refresh token before giving up on hash collisions
MAX_RECORD_ATTEMPTS = 3


def mask_email(email: str) -> str:
    return f"{email[:3]}***"


class SessionService:
    """Session operations bound to one database session and token issuer."""

    def __init__(self, db: AsyncSession, tokens: TokenService):
        self.db = db
        self.tokens = tokens
        self.store = RefreshTokenStore(db)

    # ─── Login ──────────────────────────────────
    async def login(self, email: str, password: str) -> LoginResult:
        user = await UserService.get_user_by_email(self.db, email)

        if user is None:
            password_service.verify_dummy(password)
            logger.info(f"Login failed for {mask_email(email)}: unknown email")
            raise InvalidCredentialsError(reason="user_not_found")

        if not user.hashed_password:
            password_service.verify_dummy(password)
            logger.info(f"Login failed for user {user.id[:8]}...: no password set")
            raise InvalidCredentialsError(reason="no_password")

        if not password_service.verify_password(password, user.hashed_password):
            logger.info(f"Login failed for user {user.id[:8]}...: wrong password")
            raise InvalidCredentialsError(reason="wrong_password")

        # Checked only after the password matched
        if not user.is_active:
            logger.info(f"Login refused for disabled user {user.id[:8]}...")
            raise AccountDisabledError(reason="inactive")

        user.last_login = datetime.now(timezone.utc)
        pair = await self._issue_pair(user)

        logger.info(f"User {user.id[:8]}... logged in")
        return LoginResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=UserSummary.model_validate(user),
        )

    # ─── Refresh (rotation) ─────────────────────
    async def refresh(self, raw_refresh_token: str) -> TokenPair:
        claims = self.tokens.verify_refresh_token(raw_refresh_token)

        row = await self.store.lookup(hash_token(raw_refresh_token))
        if row is None:
            raise InvalidTokenError(reason="not_found")

        if row.revoked_at is not None:
            logger.warning(f"Revoked refresh token presented for user {row.user_id[:8]}...")
            raise InvalidTokenError(reason="revoked")

        if as_utc(row.expires_at) <= datetime.now(timezone.utc):
            raise InvalidTokenError(reason="expired")

        if row.user_id != claims.user_id:
            raise InvalidTokenError(reason="subject_mismatch")

        user = row.user
        if user is None or not user.is_active:
            raise InvalidTokenError(reason="account_disabled")

        # Conditional update: a concurrent refresh with the same token loses here
        if not await self.store.revoke(row.id):
            logger.warning(f"Refresh token for user {row.user_id[:8]}... was rotated concurrently")
            raise InvalidTokenError(reason="already_rotated")

        pair = await self._issue_pair(user)
        logger.info(f"Rotated refresh token for user {user.id[:8]}...")
        return pair

    # ─── Logout ─────────────────────────────────
    async def logout(self, raw_refresh_token: str) -> None:
        """Revoke the token if it is known. Reports nothing about whether it was."""
        revoked = await self.store.revoke_all_by_token_hash(hash_token(raw_refresh_token))
        logger.debug(f"Logout revoked {revoked} refresh token row(s)")

    # ─── Helpers ────────────────────────────────
    async def _issue_pair(self, user: User) -> TokenPair:
        """Mint an access/refresh pair and persist the refresh token's hash."""
        claims = TokenClaims(user_id=user.id, email=user.email, role=user.role)
        access_token = self.tokens.issue_access_token(claims)

        for _ in range(MAX_RECORD_ATTEMPTS):
            refresh_token = self.tokens.issue_refresh_token(claims)
            expires_at = datetime.now(timezone.utc) + self.tokens.config.refresh_ttl
            try:
                await self.store.record(hash_token(refresh_token), user.id, expires_at)
            except ConflictError:
                continue
            return TokenPair(access_token=access_token, refresh_token=refresh_token)

        # ConflictError never reaches clients; this surfaces as a plain 500
        raise RuntimeError(f"Could not record a unique refresh token after {MAX_RECORD_ATTEMPTS} attempts")
