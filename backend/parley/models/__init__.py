"""Pydantic models (schemas) for the application."""

from parley.models.message import Message, MessageCreate
from parley.models.user import UserAccount, UserCreate, UserPublic, UserUpdate

__all__ = [
    "Message",
    "MessageCreate",
    "UserAccount",
    "UserCreate",
    "UserPublic",
    "UserUpdate",
]
