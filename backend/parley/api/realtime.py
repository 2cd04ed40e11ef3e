"""
Realtime WebSocket endpoint.

Server -> client frames are ``{"event": ..., "data": ...}``: ``getOnlineUsers``
carries the sorted list of online user ids, ``newMessage`` a stored message.
A client may send ``{"event": "ping"}`` and gets ``{"event": "pong"}`` back.
"""

import json
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, status

from parley.api.deps import extract_session_token, get_auth_service, get_realtime_gateway
from parley.core.config import Settings, get_settings
from parley.core.exceptions import AuthError
from parley.core.logger import setup_logger
from parley.core.security import decode_access_token
from parley.services.auth_service import AuthService
from parley.services.realtime_service import RealtimeGateway

logger = setup_logger(__name__)

router = APIRouter()


async def resolve_handshake_identity(
    token: Optional[str],
    claimed_user_id: Optional[str],
    settings: Settings,
    auth_service: AuthService,
) -> Optional[str]:
    """
    Decide which user (if any) a new connection speaks for.

    A session token wins and must agree with any claimed ``userId``. Without a
    token the connection is anonymous unless the deployment trusts the claimed
    id. Raises AuthError when the connection must be refused.
    """
    claimed_user_id = (claimed_user_id or "").strip() or None
    if token:
        if not settings.JWT_SECRET:
            raise AuthError("Sessions are not configured")
        user_id = decode_access_token(token, settings)
        if not await auth_service.get_user(user_id):
            raise AuthError("User Not Found")
        if claimed_user_id and claimed_user_id != user_id:
            raise AuthError("Handshake userId does not match session")
        return user_id
    if claimed_user_id and settings.REALTIME_TRUST_HANDSHAKE_USER_ID:
        return claimed_user_id
    return None


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    user_id: Optional[str] = Query(None, alias="userId"),
    token: Optional[str] = Query(None),
    gateway: RealtimeGateway = Depends(get_realtime_gateway),
    auth_service: AuthService = Depends(get_auth_service),
) -> None:
    settings = get_settings()
    session_token = token or extract_session_token(
        websocket.cookies, websocket.headers.get("authorization"), settings
    )
    try:
        identity = await resolve_handshake_identity(session_token, user_id, settings, auth_service)
    except AuthError as e:
        logger.warning(f"Refused realtime handshake: {e.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    connection = await gateway.connect(websocket, identity)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            text = frame.get("text")
            if not text:
                continue
            try:
                payload = json.loads(text)
            except json.JSONDecodeError:
                continue
            if isinstance(payload, dict) and payload.get("event") == "ping":
                await connection.send_event("pong", None)
    finally:
        await gateway.disconnect(connection)
