from typing import Any, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from redis import asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from schoolportal.core.database import get_db
from schoolportal.core.dependencies import ACCESS_TOKEN_COOKIE
from schoolportal.core.errors import BaseAPIError
from schoolportal.core.logging import logger
from schoolportal.core.redis import get_redis
from schoolportal.core.security import strip_bearer
from schoolportal.schemas.auth import SessionUser
from schoolportal.services.appointment_service import AppointmentService
from schoolportal.services.auth_service import AuthService
from schoolportal.services.chat_relay import ConnectionManager, manager

router = APIRouter(tags=["Realtime"])


def get_connection_manager() -> ConnectionManager:
    return manager


async def _authenticate(websocket: WebSocket, auth_service: AuthService) -> Optional[SessionUser]:
    token = strip_bearer(websocket.query_params.get("token")) or strip_bearer(
        websocket.cookies.get(ACCESS_TOKEN_COOKIE)
    )
    if not token:
        return None
    try:
        return await auth_service.resolve_session(token)
    except BaseAPIError as e:
        logger.warning(f"Chat socket rejected: {e.message}")
        return None


def _parse_room_id(raw: Any) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


@router.websocket("/ws/chat")
async def chat_socket(
    websocket: WebSocket,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    connections: ConnectionManager = Depends(get_connection_manager)
):
    """
    Live relay for appointment chat rooms.

    Frames are ``{"event": ..., "data": ...}``. ``join-room`` takes the id
    of an APPROVED appointment the caller takes part in; ``send-message`` with
    ``{"roomId", "message"}`` is passed on to the other sockets of that room
    as ``receive-message``. Persistence stays with the REST endpoint.
    """
    session_user = await _authenticate(websocket, AuthService(db, redis))
    if session_user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await connections.connect(websocket)
    appointments = AppointmentService(db)
    try:
        while True:
            frame = await websocket.receive_json()
            if not isinstance(frame, dict) or "event" not in frame:
                await connections.send_event(websocket, "error", {"message": "Malformed frame"})
                continue

            event, data = frame.get("event"), frame.get("data")
            if event == "join-room":
                room_id = _parse_room_id(data)
                if room_id is None:
                    await connections.send_event(websocket, "error", {"message": "Invalid room id"})
                    continue
                try:
                    await appointments.get_chat_appointment(session_user, room_id)
                except BaseAPIError as e:
                    await connections.send_event(websocket, "error", {"message": e.message})
                    continue
                connections.join(str(room_id), websocket)
                await connections.send_event(websocket, "joined-room", str(room_id))

            elif event == "send-message":
                room_id = _parse_room_id(data.get("roomId")) if isinstance(data, dict) else None
                if room_id is None or not connections.is_member(str(room_id), websocket):
                    await connections.send_event(websocket, "error", {"message": "Join the room first"})
                    continue
                # the appointment may have been completed since the join
                try:
                    await appointments.get_chat_appointment(session_user, room_id)
                except BaseAPIError as e:
                    connections.leave(str(room_id), websocket)
                    await connections.send_event(websocket, "error", {"message": e.message})
                    continue
                await connections.relay(str(room_id), "receive-message", data.get("message"), sender=websocket)

            else:
                await connections.send_event(websocket, "error", {"message": f"Unknown event: {event}"})
    except WebSocketDisconnect:
        logger.debug(f"Chat socket of user {session_user.user_id} disconnected")
    except (ValueError, KeyError) as e:
        # receive_json on a non-JSON text frame or on a binary frame
        logger.warning(f"Chat socket closed after bad payload: {str(e)}")
        await websocket.close(code=status.WS_1003_UNSUPPORTED_DATA)
    finally:
        connections.disconnect(websocket)
