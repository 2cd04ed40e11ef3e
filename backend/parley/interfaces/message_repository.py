"""
Message repository interface.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from parley.models.message import Message, MessageCreate


class IMessageRepository(ABC):
    """Abstract interface for direct message persistence."""

    @abstractmethod
    async def create(self, data: MessageCreate) -> Message:
        """Insert a message."""
        pass

    @abstractmethod
    async def list_between(self, user_a: UUID, user_b: UUID) -> list[Message]:
        """
        List the conversation between two users, in either direction.

        Ordered by creation time, oldest first.
        """
        pass
