"""
Presence tracking and realtime fan-out.

PresenceRegistry maps a user id to the one connection that receives targeted
pushes for that user. RealtimeGateway owns the registry plus every open
connection (anonymous ones included) and turns connection lifecycle and
message sends into events.

Pushes are best effort: a failing socket is logged and skipped, never raised.
Presence is process-local; running several workers needs a shared backbone.
"""

import asyncio
import json
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol
from uuid import uuid4

from parley.core.logger import setup_logger
from parley.models.message import Message

logger = setup_logger(__name__)

EVENT_ONLINE_USERS = "getOnlineUsers"
EVENT_NEW_MESSAGE = "newMessage"


class SocketLike(Protocol):
    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000, reason: Optional[str] = None) -> None: ...


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"
    CLOSED = "closed"


@dataclass(eq=False)
class Connection:
    """One live client connection."""

    socket: SocketLike
    user_id: Optional[str] = None
    id: str = field(default_factory=lambda: uuid4().hex)
    state: ConnectionState = ConnectionState.CONNECTING

    async def send_event(self, event: str, data: Any) -> None:
        frame = json.dumps({"event": event, "data": data}, separators=(",", ":"))
        await self.socket.send_text(frame)


class PresenceRegistry:
    """
    user id -> connection, at most one entry per user.

    A second registration for the same user replaces the first. Guarded by a
    plain lock: no method awaits, so it is safe from the event loop and from
    FastAPI's threadpool alike.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Connection] = {}
        self._lock = threading.Lock()

    def register(self, user_id: str, connection: Connection) -> None:
        with self._lock:
            self._entries[user_id] = connection

    def unregister(self, user_id: str, connection: Optional[Connection] = None) -> None:
        """
        Remove the user's entry; a no-op when absent.

        With ``connection`` given, the entry is only removed while it still
        points at that connection.
        """
        with self._lock:
            current = self._entries.get(user_id)
            if current is None:
                return
            if connection is not None and current is not connection:
                return
            del self._entries[user_id]

    def lookup(self, user_id: str) -> Optional[Connection]:
        with self._lock:
            return self._entries.get(user_id)

    def snapshot(self) -> set[str]:
        with self._lock:
            return set(self._entries)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RealtimeGateway:
    """Connection lifecycle, presence broadcasts and message push delivery."""

    def __init__(self, registry: Optional[PresenceRegistry] = None) -> None:
        self.registry = registry or PresenceRegistry()
        self._connections: dict[str, Connection] = {}
        self._lock = threading.Lock()

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    def online_user_ids(self) -> list[str]:
        return sorted(self.registry.snapshot())

    async def connect(self, socket: SocketLike, user_id: Optional[str] = None) -> Connection:
        """Track an accepted socket, register its user and announce presence."""
        connection = Connection(socket=socket, user_id=user_id or None)
        with self._lock:
            self._connections[connection.id] = connection

        if connection.user_id:
            self.registry.register(connection.user_id, connection)
            connection.state = ConnectionState.AUTHENTICATED
            logger.info(f"User {connection.user_id} connected ({connection.id})")
        else:
            connection.state = ConnectionState.ANONYMOUS
            logger.info(f"Anonymous connection opened ({connection.id})")

        await self.broadcast_online_users()
        return connection

    async def disconnect(self, connection: Connection) -> None:
        """Forget a closed connection and announce presence. Idempotent."""
        if connection.state == ConnectionState.CLOSED:
            return
        connection.state = ConnectionState.CLOSED
        with self._lock:
            self._connections.pop(connection.id, None)
        if connection.user_id:
            self.registry.unregister(connection.user_id, connection)
        logger.info(f"Connection closed ({connection.id}, user={connection.user_id})")
        await self.broadcast_online_users()

    async def broadcast_online_users(self) -> None:
        await self.broadcast(EVENT_ONLINE_USERS, self.online_user_ids())

    async def broadcast(self, event: str, data: Any) -> None:
        with self._lock:
            connections = list(self._connections.values())
        if not connections:
            return
        results = await asyncio.gather(
            *(connection.send_event(event, data) for connection in connections),
            return_exceptions=True,
        )
        for connection, result in zip(connections, results):
            if isinstance(result, Exception):
                logger.warning(f"Dropped {event} for connection {connection.id}: {result}")

    async def send_to_user(self, user_id: str, event: str, data: Any) -> bool:
        """Push one event to the user's registered connection, if any."""
        connection = self.registry.lookup(user_id)
        if connection is None:
            return False
        try:
            await connection.send_event(event, data)
        except Exception as e:
            logger.warning(f"Dropped {event} for user {user_id}: {e}")
            return False
        return True

    async def deliver(self, message: Message) -> bool:
        """Notify the receiver of a stored message. Returns whether it was pushed."""
        receiver_id = str(message.receiver_id)
        delivered = await self.send_to_user(
            receiver_id, EVENT_NEW_MESSAGE, message.model_dump(mode="json")
        )
        if not delivered and receiver_id not in self.registry:
            logger.info(f"Receiver with ID {receiver_id} is not online")
        return delivered

    async def close_all(self, code: int = 1001) -> None:
        """Close every tracked socket (application shutdown)."""
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
        for connection in connections:
            connection.state = ConnectionState.CLOSED
            if connection.user_id:
                self.registry.unregister(connection.user_id, connection)
            try:
                await connection.socket.close(code=code)
            except Exception as e:
                logger.debug(f"Ignoring close failure for {connection.id}: {e}")


realtime_gateway = RealtimeGateway()
