"""
User account models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Create a user account."""

    full_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password_hash: str = Field(..., max_length=255)
    profile_pic: str = Field(default="", max_length=2048)


class UserAccount(BaseModel):
    """User account stored in the database."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    email: str
    password_hash: str
    profile_pic: str = ""
    created_at: datetime
    updated_at: datetime

    def to_public(self) -> UserPublic:
        return UserPublic(
            id=self.id,
            full_name=self.full_name,
            email=self.email,
            profile_pic=self.profile_pic,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class UserPublic(BaseModel):
    """User as returned to clients. Never carries the password hash."""

    id: UUID
    full_name: str
    email: str
    profile_pic: str = ""
    created_at: datetime
    updated_at: datetime


class UserUpdate(BaseModel):
    """Update user account fields."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    profile_pic: Optional[str] = Field(None, max_length=2048)
