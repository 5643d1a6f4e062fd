"""FastAPI dependencies shared by the route modules."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import UnauthorizedError
from app.db.session import get_db
from app.models.user import User
from app.services.session_service import SessionService
from app.services.token_service import TokenService
from app.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]


@lru_cache()
def get_token_service() -> TokenService:
    """Process-wide token issuer, configured once from settings."""
    return TokenService(get_settings().token_config())


Tokens = Annotated[TokenService, Depends(get_token_service)]


def get_session_service(db: DbSession, tokens: Tokens) -> SessionService:
    return SessionService(db, tokens)


Sessions = Annotated[SessionService, Depends(get_session_service)]


async def get_current_user(
    db: DbSession,
    tokens: Tokens,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """Resolve the active user behind a Bearer access token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError()

    claims = tokens.verify_access_token(credentials.credentials)
    user = await UserService.get_user_by_id(db, claims.user_id)
    if not user or not user.is_active:
        raise UnauthorizedError("Invalid or expired access token", reason="user_unavailable")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
