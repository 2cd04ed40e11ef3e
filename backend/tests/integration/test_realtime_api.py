"""
Integration tests for the realtime WebSocket endpoint.

The Starlette TestClient runs the app on its own event loop thread, so the
repositories here are plain in-memory fakes rather than the SQLite fixtures.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from main import create_app
from parley.api.deps import (
    get_message_repository,
    get_realtime_gateway,
    get_storage_provider,
    get_user_repository,
)
from parley.core.config import get_settings
from parley.core.security import create_access_token
from parley.interfaces.message_repository import IMessageRepository
from parley.interfaces.user_repository import IUserRepository
from parley.models.message import Message, MessageCreate
from parley.models.user import UserAccount, UserCreate, UserUpdate
from parley.services.realtime_service import RealtimeGateway

pytestmark = pytest.mark.integration


class InMemoryUserRepository(IUserRepository):
    def __init__(self) -> None:
        self.users: dict[UUID, UserAccount] = {}

    def add(self, full_name: str, email: str) -> UserAccount:
        now = datetime.now(timezone.utc)
        user = UserAccount(
            id=uuid4(),
            full_name=full_name,
            email=email,
            password_hash="unused",
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        return user

    async def get(self, user_id: UUID) -> Optional[UserAccount]:
        return self.users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        return next((u for u in self.users.values() if u.email == email), None)

    async def create(self, data: UserCreate) -> UserAccount:
        raise NotImplementedError

    async def update(self, user_id: UUID, update: UserUpdate) -> UserAccount:
        raise NotImplementedError

    async def list_except(self, user_id: UUID) -> list[UserAccount]:
        return [u for u in self.users.values() if u.id != user_id]


class InMemoryMessageRepository(IMessageRepository):
    def __init__(self) -> None:
        self.messages: list[Message] = []

    async def create(self, data: MessageCreate) -> Message:
        now = datetime.now(timezone.utc)
        message = Message(id=uuid4(), created_at=now, **data.model_dump())
        self.messages.append(message)
        return message

    async def list_between(self, user_a: UUID, user_b: UUID) -> list[Message]:
        pair = {user_a, user_b}
        return [m for m in self.messages if {m.sender_id, m.receiver_id} == pair]


@pytest.fixture
def users():
    return InMemoryUserRepository()


@pytest.fixture
def realtime():
    return RealtimeGateway()


@pytest.fixture
def client(users, realtime, storage):
    app = create_app()
    messages = InMemoryMessageRepository()
    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_message_repository] = lambda: messages
    app.dependency_overrides[get_storage_provider] = lambda: storage
    app.dependency_overrides[get_realtime_gateway] = lambda: realtime
    with TestClient(app) as client:
        yield client


def _token(user: UserAccount) -> str:
    return create_access_token(str(user.id), get_settings())


def test_presence_broadcast_and_message_push(client, users, realtime):
    alice = users.add("Alice", "alice@example.com")
    bob = users.add("Bob", "bob@example.com")

    with client.websocket_connect(f"/api/realtime/ws?token={_token(alice)}") as alice_ws:
        assert alice_ws.receive_json() == {"event": "getOnlineUsers", "data": [str(alice.id)]}

        with client.websocket_connect(
            "/api/realtime/ws", headers={"cookie": f"jwt={_token(bob)}"}
        ) as bob_ws:
            online = sorted([str(alice.id), str(bob.id)])
            assert bob_ws.receive_json() == {"event": "getOnlineUsers", "data": online}
            assert alice_ws.receive_json() == {"event": "getOnlineUsers", "data": online}

            response = client.post(
                f"/api/messages/send/{alice.id}",
                json={"text": "hi"},
                headers={"cookie": f"jwt={_token(bob)}"},
            )
            assert response.status_code == 201

            pushed = alice_ws.receive_json()
            assert pushed["event"] == "newMessage"
            assert pushed["data"] == response.json()
            assert pushed["data"]["sender_id"] == str(bob.id)

        # Bob left
        assert alice_ws.receive_json() == {"event": "getOnlineUsers", "data": [str(alice.id)]}

    assert realtime.connection_count == 0
    assert realtime.registry.snapshot() == set()


def test_connection_without_token_is_anonymous(client, users, realtime):
    alice = users.add("Alice", "alice@example.com")

    with client.websocket_connect(f"/api/realtime/ws?userId={alice.id}") as anon_ws:
        assert anon_ws.receive_json() == {"event": "getOnlineUsers", "data": []}
        assert realtime.registry.lookup(str(alice.id)) is None

        with client.websocket_connect(f"/api/realtime/ws?token={_token(alice)}"):
            assert anon_ws.receive_json() == {"event": "getOnlineUsers", "data": [str(alice.id)]}


def test_trusted_handshake_user_id(client, users, realtime, monkeypatch):
    monkeypatch.setattr(get_settings(), "REALTIME_TRUST_HANDSHAKE_USER_ID", True)

    with client.websocket_connect("/api/realtime/ws?userId=legacy-user") as ws:
        assert ws.receive_json() == {"event": "getOnlineUsers", "data": ["legacy-user"]}


def test_spoofed_user_id_is_refused(client, users):
    alice = users.add("Alice", "alice@example.com")
    mallory = users.add("Mallory", "mallory@example.com")

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(
            f"/api/realtime/ws?token={_token(mallory)}&userId={alice.id}"
        ) as ws:
            ws.receive_json()

    assert exc_info.value.code == 1008


def test_invalid_token_is_refused(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/api/realtime/ws?token=garbage") as ws:
            ws.receive_json()

    assert exc_info.value.code == 1008


def test_ping_pong(client, users):
    alice = users.add("Alice", "alice@example.com")

    with client.websocket_connect(f"/api/realtime/ws?token={_token(alice)}") as ws:
        ws.receive_json()
        ws.send_text("not json")
        ws.send_json({"event": "ping"})

        assert ws.receive_json() == {"event": "pong", "data": None}
