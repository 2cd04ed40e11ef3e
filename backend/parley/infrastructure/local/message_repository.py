"""
SQLite implementation of message repository.
"""

from uuid import UUID, uuid4

from sqlalchemy import and_, or_, select

from parley.infrastructure.local.database import MessageORM, db_errors, get_session_factory
from parley.interfaces.message_repository import IMessageRepository
from parley.models.message import Message, MessageCreate
from parley.utils.datetime_utils import ensure_utc, now_utc


class SqliteMessageRepository(IMessageRepository):
    """SQLite implementation of message repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: MessageORM) -> Message:
        return Message(
            id=UUID(orm.id),
            sender_id=UUID(orm.sender_id),
            receiver_id=UUID(orm.receiver_id),
            text=orm.text,
            image=orm.image,
            created_at=ensure_utc(orm.created_at),
        )

    async def create(self, data: MessageCreate) -> Message:
        async with db_errors("create message"), self._session_factory() as session:
            now = now_utc()
            orm = MessageORM(
                id=str(uuid4()),
                sender_id=str(data.sender_id),
                receiver_id=str(data.receiver_id),
                text=data.text,
                image=data.image,
                created_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list_between(self, user_a: UUID, user_b: UUID) -> list[Message]:
        a, b = str(user_a), str(user_b)
        async with db_errors("list messages"), self._session_factory() as session:
            result = await session.execute(
                select(MessageORM)
                .where(
                    or_(
                        and_(MessageORM.sender_id == a, MessageORM.receiver_id == b),
                        and_(MessageORM.sender_id == b, MessageORM.receiver_id == a),
                    )
                )
                .order_by(MessageORM.created_at.asc(), MessageORM.id.asc())
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
