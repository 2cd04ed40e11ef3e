"""
Direct message operations.

A message is always stored before the realtime push is attempted, so a
receiver that is offline (or whose socket fails) still finds it on the next
fetch.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from parley.core.exceptions import NotFoundError, ValidationError
from parley.core.logger import setup_logger
from parley.interfaces.message_repository import IMessageRepository
from parley.interfaces.storage_provider import IStorageProvider
from parley.interfaces.user_repository import IUserRepository
from parley.models.message import Message, MessageCreate
from parley.models.user import UserPublic
from parley.services.realtime_service import RealtimeGateway

logger = setup_logger(__name__)

MESSAGE_IMAGE_FOLDER = "messages"


class MessageService:
    def __init__(
        self,
        message_repo: IMessageRepository,
        user_repo: IUserRepository,
        gateway: RealtimeGateway,
        storage: Optional[IStorageProvider] = None,
    ):
        self._message_repo = message_repo
        self._user_repo = user_repo
        self._gateway = gateway
        self._storage = storage

    async def list_users(self, excluding_user_id: UUID) -> list[UserPublic]:
        users = await self._user_repo.list_except(excluding_user_id)
        return [user.to_public() for user in users]

    async def get_messages(self, user_a: UUID, user_b: UUID) -> list[Message]:
        return await self._message_repo.list_between(user_a, user_b)

    async def send_message(
        self,
        sender_id: UUID,
        receiver_id: UUID,
        text: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Message:
        text = text.strip() if text else None
        image = image.strip() if image else None
        if not text and not image:
            raise ValidationError("Message must contain text or an image")

        if not await self._user_repo.get(receiver_id):
            raise NotFoundError("Receiver not found")

        image_url = None
        if image:
            if self._storage is None:
                raise ValidationError("Image uploads are not configured")
            image_url = await self._storage.upload_image(image, MESSAGE_IMAGE_FOLDER)

        message = await self._message_repo.create(
            MessageCreate(
                sender_id=sender_id,
                receiver_id=receiver_id,
                text=text or None,
                image=image_url,
            )
        )

        try:
            await self._gateway.deliver(message)
        except Exception as e:
            logger.warning(f"Realtime delivery of message {message.id} failed: {e}")
        return message
