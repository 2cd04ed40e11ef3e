"""
Application configuration using Pydantic Settings.

Environment-specific behavior (cookie security, SPA serving) is controlled by the
ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["development", "production"] = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./parley.db"

    # ===========================================
    # Session (password + JWT cookie)
    # ===========================================
    JWT_SECRET: str = ""
    JWT_ISSUER: str = "parley"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7
    SESSION_COOKIE_NAME: str = "jwt"

    # ===========================================
    # Realtime
    # ===========================================
    # Trust the handshake's userId query parameter when no session token is sent.
    # Off by default: identities come from the verified session token.
    REALTIME_TRUST_HANDSHAKE_USER_ID: bool = False

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 5001
    ALLOWED_ORIGINS: List[str] = Field(default=["http://localhost:5173"])

    # URL for accessing the backend (used to build local storage URLs)
    BASE_URL: str = "http://localhost:5001"

    # Built client bundle, served in production when set
    FRONTEND_DIST_PATH: str = ""

    # ===========================================
    # Storage
    # ===========================================
    # "local": files under STORAGE_BASE_PATH, served from /storage
    # "cloudinary": hosted image service
    STORAGE_PROVIDER: Literal["local", "cloudinary"] = "local"
    STORAGE_BASE_PATH: str = "./storage"
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    CLOUDINARY_FOLDER: str = "parley"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    @property
    def secure_cookies(self) -> bool:
        """Session cookies are HTTPS-only outside development."""
        return self.ENVIRONMENT != "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
