"""API routes package."""

from fastapi import APIRouter

from app.api.routes import (
    admin_users,
    auth,
    health,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(admin_users.router, prefix="/admin/users", tags=["Admin Users"])
