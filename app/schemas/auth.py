"""Request and response bodies for the auth endpoints."""

from pydantic import EmailStr, Field

from app.schemas.user import CamelModel, UserSummary


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class LoginResult(TokenPair):
    user: UserSummary


class SuccessResponse(CamelModel):
    success: bool = True
