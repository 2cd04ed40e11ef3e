"""
Account operations: signup, login and profile picture updates.

Session tokens are minted by the API layer (they travel in a cookie); this
service only deals with the stored accounts.
"""

from __future__ import annotations

import re
from typing import Optional
from uuid import UUID

from pydantic import ValidationError as SchemaError

from parley.core.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from parley.core.logger import setup_logger
from parley.core.security import hash_password, verify_password
from parley.interfaces.storage_provider import IStorageProvider
from parley.interfaces.user_repository import IUserRepository
from parley.models.user import UserAccount, UserCreate, UserPublic, UserUpdate

logger = setup_logger(__name__)

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid credentials"
PROFILE_FOLDER = "profiles"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    return value.strip().lower()


class AuthService:
    def __init__(self, user_repo: IUserRepository, storage: Optional[IStorageProvider] = None):
        self._user_repo = user_repo
        self._storage = storage

    async def signup(self, full_name: str, email: str, password: str) -> UserPublic:
        full_name = (full_name or "").strip()
        email = normalize_email(email or "")
        if not full_name or not email or not password:
            raise ValidationError("All fields are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if not _EMAIL_RE.match(email):
            raise ValidationError("Invalid email address")

        if await self._user_repo.get_by_email(email):
            raise ConflictError("Email already exists")

        try:
            data = UserCreate(
                full_name=full_name,
                email=email,
                password_hash=hash_password(password),
            )
        except SchemaError as exc:
            raise ValidationError(exc.errors()[0]["msg"]) from exc

        user = await self._user_repo.create(data)
        logger.info(f"New user signed up: {user.id}")
        return user.to_public()

    async def login(self, email: str, password: str) -> UserPublic:
        # Same error for unknown email and wrong password
        user = None
        if email and password:
            user = await self._user_repo.get_by_email(normalize_email(email))
        if not user or not verify_password(password, user.password_hash):
            raise AuthError(INVALID_CREDENTIALS)
        return user.to_public()

    async def get_user(self, user_id: str) -> Optional[UserAccount]:
        """Resolve a session subject to its account; None for unknown or malformed ids."""
        try:
            parsed = UUID(user_id)
        except (TypeError, ValueError):
            return None
        return await self._user_repo.get(parsed)

    async def update_profile(self, user_id: UUID, profile_pic: Optional[str]) -> UserPublic:
        if not profile_pic or not profile_pic.strip():
            raise ValidationError("Profile pic is required")
        if self._storage is None:
            raise ValidationError("Image uploads are not configured")

        url = await self._storage.upload_image(profile_pic, PROFILE_FOLDER)
        try:
            user = await self._user_repo.update(user_id, UserUpdate(profile_pic=url))
        except NotFoundError:
            raise AuthError("User Not Found")
        return user.to_public()
