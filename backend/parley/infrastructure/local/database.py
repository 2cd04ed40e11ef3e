"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator
from uuid import uuid4

from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from parley.core.config import get_settings
from parley.core.exceptions import DependencyError
from parley.core.logger import setup_logger
from parley.utils.datetime_utils import now_utc

logger = setup_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class UserORM(Base):
    """User ORM model."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    profile_pic = Column(String(2048), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class MessageORM(Base):
    """Direct message ORM model."""

    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    sender_id = Column(String(36), nullable=False, index=True)
    receiver_id = Column(String(36), nullable=False, index=True)
    text = Column(Text, nullable=True)
    image = Column(String(2048), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, index=True)

    __table_args__ = (Index("ix_messages_pair", "sender_id", "receiver_id"),)


# ===========================================
# Engine / Sessions
# ===========================================


@lru_cache()
def get_engine() -> AsyncEngine:
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get async session factory."""
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db() -> None:
    """Close pooled connections."""
    await get_engine().dispose()


@asynccontextmanager
async def db_errors(operation: str) -> AsyncIterator[None]:
    """Translate driver/ORM failures into DependencyError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"Database error while trying to {operation}: {exc}")
        raise DependencyError(f"Failed to {operation}") from exc
