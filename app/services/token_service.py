"""JWT issuing and verification for access and refresh tokens."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.exceptions import InvalidTokenError, UnauthorizedError

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenConfig:
    """Signing configuration. Access and refresh tokens use separate secrets."""
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    issuer: str = "wms-api"
    access_ttl_minutes: int = 15
    refresh_ttl_days: int = 7

    @property
    def access_ttl(self) -> timedelta:
        return timedelta(minutes=self.access_ttl_minutes)

    @property
    def refresh_ttl(self) -> timedelta:
        return timedelta(days=self.refresh_ttl_days)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by both token kinds."""
    user_id: str
    email: str
    role: str
    token_type: str = ACCESS
    jti: Optional[str] = None
    expires_at: Optional[datetime] = None


class TokenService:
    """Mints and verifies signed tokens with an explicit TokenConfig."""

    def __init__(self, config: TokenConfig):
        self.config = config

    # ─── Issue ──────────────────────────────────
    def issue_access_token(self, claims: TokenClaims) -> str:
        return self._encode(claims, ACCESS, self.config.access_secret, self.config.access_ttl)

    def issue_refresh_token(self, claims: TokenClaims) -> str:
        return self._encode(claims, REFRESH, self.config.refresh_secret, self.config.refresh_ttl)

    # ─── Verify ─────────────────────────────────
    def verify_refresh_token(self, token: str) -> TokenClaims:
        """Decode a refresh token. Any failure raises InvalidTokenError."""
        try:
            return self._decode(token, REFRESH, self.config.refresh_secret)
        except ExpiredSignatureError:
            raise InvalidTokenError(reason="jwt_expired")
        except (JWTError, KeyError, ValueError):
            raise InvalidTokenError(reason="jwt_invalid")

    def verify_access_token(self, token: str) -> TokenClaims:
        try:
            return self._decode(token, ACCESS, self.config.access_secret)
        except (JWTError, KeyError, ValueError):
            raise UnauthorizedError("Invalid or expired access token", reason="access_token_invalid")

    # ─── Internals ──────────────────────────────
    def _encode(self, claims: TokenClaims, token_type: str, secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        role = claims.role.value if isinstance(claims.role, Enum) else str(claims.role)
        payload: Dict[str, Any] = {
            "iss": self.config.issuer,
            "sub": str(claims.user_id),
            "email": claims.email,
            "role": role,
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

    def _decode(self, token: str, token_type: str, secret: str) -> TokenClaims:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[self.config.algorithm],
            issuer=self.config.issuer,
        )
        if payload.get("type") != token_type:
            raise JWTError(f"expected {token_type} token")
        return TokenClaims(
            user_id=payload["sub"],
            email=payload["email"],
            role=payload["role"],
            token_type=token_type,
            jti=payload.get("jti"),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
