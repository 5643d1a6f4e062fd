"""Application configuration settings."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.services.token_service import TokenConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "WMS API"
    app_env: str = "development"
    debug: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./wms.db"

    # JWT Authentication (access and refresh tokens use distinct secrets)
    jwt_access_secret: str = "change-me-access-secret"
    jwt_refresh_secret: str = "change-me-refresh-secret"
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "wms-api"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    # Rate limiting (auth endpoints)
    login_rate_limit: int = 5
    login_rate_window_seconds: int = 60
    # Take the client IP from X-Forwarded-For / X-Real-IP. Enable only behind
    # a proxy that overwrites these headers.
    trust_proxy_headers: bool = False

    # CORS
    cors_origins: str = "http://localhost:5173"

    # Security
    allowed_hosts: str = "*"

    # First SUPER_ADMIN account (seed_super_admin.py)
    super_admin_email: Optional[str] = None
    super_admin_password: Optional[str] = None
    super_admin_name: str = "Super Admin"

    @property
    def allowed_hosts_list(self) -> List[str]:
        """Get allowed hosts as a list."""
        return [host.strip() for host in self.allowed_hosts.split(",")]

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def environment(self) -> str:
        """Alias for app_env."""
        return self.app_env

    def token_config(self) -> TokenConfig:
        """Build the token issuer configuration from these settings."""
        return TokenConfig(
            access_secret=self.jwt_access_secret,
            refresh_secret=self.jwt_refresh_secret,
            algorithm=self.jwt_algorithm,
            issuer=self.jwt_issuer,
            access_ttl_minutes=self.access_token_expire_minutes,
            refresh_ttl_days=self.refresh_token_expire_days,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
