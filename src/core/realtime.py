"""
Realtime broadcaster for chat and presence events.

Connections are grouped into rooms keyed by (organization_id, user_id). A user
connected from several tabs has several sockets in the same room. Every
broadcast is addressed inside one organization, so events never cross
tenants.
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, Iterable, List, Protocol, Set

from fastapi import Request, WebSocket

logger = logging.getLogger(__name__)


class RealtimeBroadcaster(Protocol):
    """Interface the services publish realtime events through."""

    async def send_to_user(self, organization_id: uuid.UUID, user_id: str, message: Dict[str, Any]) -> int:
        ...

    async def send_to_users(self, organization_id: uuid.UUID, user_ids: Iterable[str], message: Dict[str, Any]) -> int:
        ...

    async def send_to_organization(self, organization_id: uuid.UUID, message: Dict[str, Any]) -> int:
        ...


class ConnectionManager:
    """Manages WebSocket connections per organization and user."""

    def __init__(self):
        # organization_id -> user_id -> active sockets
        self._rooms: Dict[uuid.UUID, Dict[str, Set[WebSocket]]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, organization_id: uuid.UUID, user_id: str) -> None:
        """Accept a WebSocket and register it in the user's room."""
        await websocket.accept()
        async with self._lock:
            self._rooms.setdefault(organization_id, {}).setdefault(user_id, set()).add(websocket)
        logger.debug(f"Socket joined room {organization_id}/{user_id}")

    async def disconnect(self, websocket: WebSocket, organization_id: uuid.UUID, user_id: str) -> None:
        """Remove a WebSocket connection."""
        async with self._lock:
            self._discard(websocket, organization_id, user_id)

    def _discard(self, websocket: WebSocket, organization_id: uuid.UUID, user_id: str) -> None:
        users = self._rooms.get(organization_id)
        if users is None:
            return
        sockets = users.get(user_id)
        if sockets is not None:
            sockets.discard(websocket)
            if not sockets:
                del users[user_id]
        if not users:
            del self._rooms[organization_id]

    async def _send(self, organization_id: uuid.UUID, targets: List[tuple[str, WebSocket]], message: Dict[str, Any]) -> int:
        """Send to the given sockets, dropping the ones that fail. Returns deliveries."""
        data = json.dumps(message, default=str)
        delivered = 0
        closed: List[tuple[str, WebSocket]] = []

        for user_id, ws in targets:
            try:
                await ws.send_text(data)
                delivered += 1
            except Exception as e:
                # Connection closed or errored
                logger.debug(f"Dropping socket for {organization_id}/{user_id}: {e}")
                closed.append((user_id, ws))

        if closed:
            async with self._lock:
                for user_id, ws in closed:
                    self._discard(ws, organization_id, user_id)
        return delivered

    async def send_to_user(self, organization_id: uuid.UUID, user_id: str, message: Dict[str, Any]) -> int:
        """Send a message to every socket in one user's room."""
        return await self.send_to_users(organization_id, [user_id], message)

    async def send_to_users(self, organization_id: uuid.UUID, user_ids: Iterable[str], message: Dict[str, Any]) -> int:
        """Send a message to the rooms of several users of one organization."""
        wanted = set(user_ids)
        async with self._lock:
            users = self._rooms.get(organization_id, {})
            targets = [(uid, ws) for uid in wanted for ws in users.get(uid, set())]
        return await self._send(organization_id, targets, message)

    async def send_to_organization(self, organization_id: uuid.UUID, message: Dict[str, Any]) -> int:
        """Send a message to all connected users of one organization."""
        async with self._lock:
            users = self._rooms.get(organization_id, {})
            targets = [(uid, ws) for uid, sockets in users.items() for ws in sockets]
        return await self._send(organization_id, targets, message)

    def get_connected_count(self, organization_id: uuid.UUID, user_id: str) -> int:
        """Get the number of active connections for a user."""
        return len(self._rooms.get(organization_id, {}).get(user_id, set()))

    def get_organization_user_ids(self, organization_id: uuid.UUID) -> List[str]:
        """Get all connected user IDs for an organization."""
        return list(self._rooms.get(organization_id, {}).keys())

    def get_total_connections(self) -> int:
        """Get total number of active connections across all organizations."""
        return sum(len(sockets) for users in self._rooms.values() for sockets in users.values())


def get_broadcaster(request: Request) -> RealtimeBroadcaster:
    """FastAPI dependency returning the application's broadcaster."""
    return request.app.state.broadcaster
