"""
Direct message models.

Messages are immutable once stored: there is no update model.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Create a message between two users."""

    sender_id: UUID
    receiver_id: UUID
    text: Optional[str] = Field(None, max_length=10_000)
    image: Optional[str] = Field(None, max_length=2048, description="Uploaded image URL")


class Message(BaseModel):
    """Stored direct message."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sender_id: UUID
    receiver_id: UUID
    text: Optional[str] = None
    image: Optional[str] = None
    created_at: datetime
