# pyright: reportMissingTypeStubs=false
"""
WebSocket endpoint for chat and presence.

Authenticates with the `token` query parameter (or a bearer header) and
resolves the organization from `organization_id` (or x-organization-id).
Each socket joins the room of its own user inside its organization.

Client events ({"event": ..., "data": {...}}):
- join_room: re-join the caller's own room
- send_message: {conversation_id, content}
- update_status: {status} with status in online/busy/offline

Server events: receive_message, status_change, ack, error. The ack for an
event is sent after any broadcast it caused has been handed to the sockets.
"""

import json
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from auth.dependencies import (
    AuthenticatedUser, TenantContext, get_professional_for_user,
    parse_organization_id, require_active_subscription, resolve_tenant,
)
from core.constants import ORGANIZATION_HEADER, WS_CLOSE_FORBIDDEN, WS_CLOSE_UNAUTHORIZED
from core.database import Database
from core.realtime import ConnectionManager
from services.conversation_service import ConversationService
from services.jwt_service import jwt_service
from services.outbox_service import OutboxDispatcher
from services.presence_service import PresenceService

logger = logging.getLogger(__name__)

router = APIRouter()


def _bearer_token(websocket: WebSocket) -> Optional[str]:
    authorization = websocket.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


async def _send_event(websocket: WebSocket, event: str, data: Dict[str, Any]) -> None:
    await websocket.send_text(json.dumps({"event": event, "data": data}, default=str))


async def _send_error(websocket: WebSocket, source_event: Optional[str], status_code: int, detail: Any) -> None:
    await _send_event(websocket, "error", {"event": source_event, "status": status_code, "detail": detail})


class RealtimeSession:
    """Handles the events of one authenticated socket."""

    def __init__(
        self,
        websocket: WebSocket,
        database: Database,
        manager: ConnectionManager,
        user: AuthenticatedUser,
        organization_id: uuid.UUID
    ):
        self.websocket = websocket
        self.database = database
        self.manager = manager
        self.user = user
        self.organization_id = organization_id

    @property
    def room(self) -> str:
        return self.user.user_id

    async def handle(self, raw: str) -> None:
        try:
            envelope = json.loads(raw)
        except json.JSONDecodeError:
            await _send_error(self.websocket, None, 400, "Invalid JSON")
            return
        if not isinstance(envelope, dict) or not isinstance(envelope.get("event"), str):
            await _send_error(self.websocket, None, 400, "Expected {\"event\": ..., \"data\": {...}}")
            return

        event = envelope["event"]
        data = envelope.get("data") or {}
        if not isinstance(data, dict):
            await _send_error(self.websocket, event, 400, "Event data must be an object")
            return

        handlers = {
            "join_room": self.join_room,
            "send_message": self.send_message,
            "update_status": self.update_status,
        }
        handler = handlers.get(event)
        if handler is None:
            await _send_error(self.websocket, event, 400, f"Unknown event: {event}")
            return

        try:
            await handler(data)
        except HTTPException as e:
            await _send_error(self.websocket, event, e.status_code, e.detail)

    def _resolve(self, db: Session) -> TenantContext:
        # Re-resolve on every write so revoked memberships and billing changes apply
        return require_active_subscription(resolve_tenant(db, self.user, self.organization_id))

    async def join_room(self, data: Dict[str, Any]) -> None:
        requested = data.get("room", self.room)
        if requested != self.room:
            await _send_error(self.websocket, "join_room", 403, "Cannot join another user's room")
            return
        await _send_event(self.websocket, "ack", {"event": "join_room", "room": self.room})

    async def send_message(self, data: Dict[str, Any]) -> None:
        conversation_id = data.get("conversation_id")
        if not isinstance(conversation_id, int):
            raise HTTPException(status_code=400, detail="conversation_id is required")

        db = self.database.session()
        try:
            ctx = self._resolve(db)
            professional = get_professional_for_user(db, ctx)
            conversation = ConversationService.get_conversation_for_member(
                db, self.organization_id, conversation_id, professional.id
            )
            message, event = ConversationService.post_message(
                db, conversation, professional, str(data.get("content") or "")
            )
            await OutboxDispatcher.publish_event(db, self.manager, event)
        finally:
            db.close()

        await _send_event(self.websocket, "ack", {"event": "send_message", "message_id": message.id})

    async def update_status(self, data: Dict[str, Any]) -> None:
        db = self.database.session()
        try:
            ctx = self._resolve(db)
            professional = get_professional_for_user(db, ctx)
            status_event = PresenceService.update_status(db, professional, str(data.get("status") or ""))
        finally:
            db.close()

        # Presence never leaves the caller's organization
        await self.manager.send_to_organization(self.organization_id, status_event)
        await _send_event(self.websocket, "ack", {"event": "update_status", "status": status_event["data"]["status"]})


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    organization_id: Optional[str] = Query(None),
):
    """Realtime chat and presence channel."""
    database: Database = websocket.app.state.database
    manager: ConnectionManager = websocket.app.state.broadcaster

    raw_token = token or _bearer_token(websocket)
    payload = jwt_service.verify_token(raw_token) if raw_token else None
    if payload is None:
        await websocket.close(code=WS_CLOSE_UNAUTHORIZED, reason="Authentication required")
        return
    user = AuthenticatedUser(user_id=payload.sub, email=payload.email)

    try:
        with database.session_scope() as db:
            org_id = parse_organization_id(organization_id or websocket.headers.get(ORGANIZATION_HEADER))
            ctx = resolve_tenant(db, user, org_id)
            org_id = ctx.organization_id
    except HTTPException as e:
        logger.info(f"Rejected websocket for user {user.user_id}: {e.detail}")
        await websocket.close(code=WS_CLOSE_FORBIDDEN, reason=str(e.detail))
        return

    await manager.connect(websocket, org_id, user.user_id)
    session = RealtimeSession(websocket, database, manager, user, org_id)

    try:
        await _send_event(websocket, "ack", {"event": "connected", "room": session.room})
        while True:
            raw = await websocket.receive_text()
            await session.handle(raw)
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket, org_id, user.user_id)
        logger.debug(f"Websocket closed for {org_id}/{user.user_id}")
