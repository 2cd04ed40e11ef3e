"""Abstract interfaces for infrastructure abstraction."""

from parley.interfaces.message_repository import IMessageRepository
from parley.interfaces.storage_provider import IStorageProvider
from parley.interfaces.user_repository import IUserRepository

__all__ = [
    "IMessageRepository",
    "IStorageProvider",
    "IUserRepository",
]
