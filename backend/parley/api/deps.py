"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Request

from parley.core.config import Settings, get_settings
from parley.core.exceptions import AuthError, DependencyError
from parley.core.security import decode_access_token
from parley.interfaces.message_repository import IMessageRepository
from parley.interfaces.storage_provider import IStorageProvider
from parley.interfaces.user_repository import IUserRepository
from parley.models.user import UserAccount
from parley.services.auth_service import AuthService
from parley.services.message_service import MessageService
from parley.services.realtime_service import RealtimeGateway, realtime_gateway


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_user_repository() -> IUserRepository:
    """Get user repository instance."""
    from parley.infrastructure.local.user_repository import SqliteUserRepository

    return SqliteUserRepository()


@lru_cache()
def get_message_repository() -> IMessageRepository:
    """Get message repository instance."""
    from parley.infrastructure.local.message_repository import SqliteMessageRepository

    return SqliteMessageRepository()


@lru_cache()
def get_storage_provider() -> IStorageProvider:
    """Get storage provider instance."""
    settings = get_settings()
    if settings.STORAGE_PROVIDER == "cloudinary":
        from parley.infrastructure.hosted.cloudinary_provider import CloudinaryStorageProvider

        return CloudinaryStorageProvider(settings)

    from parley.infrastructure.local.storage_provider import LocalStorageProvider

    return LocalStorageProvider(settings.STORAGE_BASE_PATH, settings.BASE_URL)


def get_realtime_gateway() -> RealtimeGateway:
    """Get the process-wide realtime gateway."""
    return realtime_gateway


# ===========================================
# Services
# ===========================================


def get_auth_service(
    user_repo: IUserRepository = Depends(get_user_repository),
    storage: IStorageProvider = Depends(get_storage_provider),
) -> AuthService:
    return AuthService(user_repo, storage)


def get_message_service(
    message_repo: IMessageRepository = Depends(get_message_repository),
    user_repo: IUserRepository = Depends(get_user_repository),
    gateway: RealtimeGateway = Depends(get_realtime_gateway),
    storage: IStorageProvider = Depends(get_storage_provider),
) -> MessageService:
    return MessageService(message_repo, user_repo, gateway, storage)


# ===========================================
# User Authentication
# ===========================================


def ensure_session_secret(settings: Settings) -> None:
    if not settings.JWT_SECRET:
        raise DependencyError("JWT_SECRET is not configured")


def extract_session_token(
    cookies: dict[str, str],
    authorization: Optional[str],
    settings: Settings,
) -> Optional[str]:
    """Session cookie first, then an ``Authorization: Bearer`` header."""
    token = cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token
    if authorization:
        parts = authorization.strip().split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1].strip():
            return parts[1].strip()
    return None


async def get_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserAccount:
    """
    Get current authenticated user.

    Reads the session cookie (or a bearer token) and loads the account it
    names. Every failure is an AuthError (401).
    """
    settings = get_settings()
    ensure_session_secret(settings)

    token = extract_session_token(
        request.cookies, request.headers.get("authorization"), settings
    )
    if not token:
        raise AuthError("Unauthorized - No Token Provided")

    user_id = decode_access_token(token, settings)
    user = await auth_service.get_user(user_id)
    if not user:
        raise AuthError("User Not Found")
    return user


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

AuthSvc = Annotated[AuthService, Depends(get_auth_service)]
MessageSvc = Annotated[MessageService, Depends(get_message_service)]
CurrentUser = Annotated[UserAccount, Depends(get_current_user)]
