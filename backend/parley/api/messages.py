"""
Direct message endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from parley.api.deps import CurrentUser, MessageSvc
from parley.models.message import Message
from parley.models.user import UserPublic

router = APIRouter()


class SendMessageRequest(BaseModel):
    text: Optional[str] = Field(None, max_length=10_000)
    image: Optional[str] = Field(None, description="data URL, base64 or http(s) link")


@router.get("/users", response_model=list[UserPublic])
async def list_users_for_sidebar(user: CurrentUser, service: MessageSvc) -> list[UserPublic]:
    """Every user except the caller."""
    return await service.list_users(user.id)


@router.get("/{user_id}", response_model=list[Message])
async def get_messages(user_id: UUID, user: CurrentUser, service: MessageSvc) -> list[Message]:
    """Conversation between the caller and ``user_id``, oldest first."""
    return await service.get_messages(user.id, user_id)


@router.post("/send/{receiver_id}", response_model=Message, status_code=status.HTTP_201_CREATED)
async def send_message(
    receiver_id: UUID,
    data: SendMessageRequest,
    user: CurrentUser,
    service: MessageSvc,
) -> Message:
    return await service.send_message(user.id, receiver_id, text=data.text, image=data.image)
