"""
User repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from parley.models.user import UserAccount, UserCreate, UserUpdate


class IUserRepository(ABC):
    """Abstract interface for user persistence."""

    @abstractmethod
    async def get(self, user_id: UUID) -> Optional[UserAccount]:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        """Get a user by (normalized) email."""
        pass

    @abstractmethod
    async def create(self, data: UserCreate) -> UserAccount:
        """Create a new user. Raises ConflictError if the email is taken."""
        pass

    @abstractmethod
    async def update(self, user_id: UUID, update: UserUpdate) -> UserAccount:
        """Update user profile fields. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    async def list_except(self, user_id: UUID) -> list[UserAccount]:
        """List every user other than the given one."""
        pass
