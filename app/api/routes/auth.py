"""Authentication endpoints."""

import logging

from fastapi import APIRouter, Depends

from app.core.dependencies import CurrentUser, Sessions
from app.core.rate_limiter import limit_login
from app.schemas.auth import (
    LoginRequest,
    LoginResult,
    RefreshTokenRequest,
    SuccessResponse,
    TokenPair,
)
from app.schemas.user import UserSummary

logger = logging.getLogger(__name__)
router = APIRouter()


# ─────────────────────────────────────────────
# Login
# ─────────────────────────────────────────────

@router.post("/login", response_model=LoginResult, dependencies=[Depends(limit_login)])
async def login(credentials: LoginRequest, sessions: Sessions):
    """
    Authenticate with email and password.
    Returns an access token, a refresh token and the user summary.
    """
    return await sessions.login(credentials.email, credentials.password)


# ─────────────────────────────────────────────
# Refresh Token (Rotation)
# ─────────────────────────────────────────────

@router.post("/refresh", response_model=TokenPair)
async def refresh(body: RefreshTokenRequest, sessions: Sessions):
    """
    Exchange a refresh token for a new access + refresh token pair.
    The presented refresh token stops working.
    """
    return await sessions.refresh(body.refresh_token)


# ─────────────────────────────────────────────
# Logout
# ─────────────────────────────────────────────

@router.post("/logout", response_model=SuccessResponse)
async def logout(body: RefreshTokenRequest, sessions: Sessions):
    """Revoke a refresh token. Succeeds whether or not the token was valid."""
    await sessions.logout(body.refresh_token)
    return SuccessResponse()


# ─────────────────────────────────────────────
# Current User
# ─────────────────────────────────────────────

@router.get("/me", response_model=UserSummary)
async def get_me(current_user: CurrentUser):
    """Return the authenticated user's summary."""
    return current_user
