"""
SQLite implementation of user repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from parley.core.exceptions import ConflictError, NotFoundError
from parley.infrastructure.local.database import UserORM, db_errors, get_session_factory
from parley.interfaces.user_repository import IUserRepository
from parley.models.user import UserAccount, UserCreate, UserUpdate
from parley.utils.datetime_utils import ensure_utc, now_utc


class SqliteUserRepository(IUserRepository):
    """SQLite implementation of user repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: UserORM) -> UserAccount:
        return UserAccount(
            id=UUID(orm.id),
            full_name=orm.full_name,
            email=orm.email,
            password_hash=orm.password_hash,
            profile_pic=orm.profile_pic or "",
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    async def get(self, user_id: UUID) -> Optional[UserAccount]:
        async with db_errors("load user"), self._session_factory() as session:
            result = await session.execute(
                select(UserORM).where(UserORM.id == str(user_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        async with db_errors("load user by email"), self._session_factory() as session:
            result = await session.execute(
                select(UserORM).where(UserORM.email == email)
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def create(self, data: UserCreate) -> UserAccount:
        async with db_errors("create user"), self._session_factory() as session:
            now = now_utc()
            orm = UserORM(
                id=str(uuid4()),
                full_name=data.full_name,
                email=data.email,
                password_hash=data.password_hash,
                profile_pic=data.profile_pic,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            try:
                await session.commit()
            except IntegrityError as exc:
                # Lost a race with another signup for the same email
                await session.rollback()
                raise ConflictError("Email already exists") from exc
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def update(self, user_id: UUID, update: UserUpdate) -> UserAccount:
        async with db_errors("update user"), self._session_factory() as session:
            result = await session.execute(
                select(UserORM).where(UserORM.id == str(user_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"User {user_id} not found")

            if update.full_name is not None:
                orm.full_name = update.full_name
            if update.profile_pic is not None:
                orm.profile_pic = update.profile_pic

            orm.updated_at = now_utc()
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list_except(self, user_id: UUID) -> list[UserAccount]:
        async with db_errors("list users"), self._session_factory() as session:
            result = await session.execute(
                select(UserORM)
                .where(UserORM.id != str(user_id))
                .order_by(UserORM.full_name.asc())
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
