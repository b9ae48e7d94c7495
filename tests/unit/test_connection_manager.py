"""
Unit tests for the realtime connection manager.
"""

import json
import uuid

import pytest

from core.realtime import ConnectionManager


class FakeWebSocket:
    """Records sent frames; optionally fails like a closed socket."""

    def __init__(self, fail: bool = False):
        self.accepted = False
        self.fail = fail
        self.sent: list = []

    async def accept(self):
        self.accepted = True

    async def send_text(self, data: str):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(data))


ORG_A = uuid.uuid4()
ORG_B = uuid.uuid4()


@pytest.fixture
def manager():
    return ConnectionManager()


class TestConnectionManager:

    @pytest.mark.asyncio
    async def test_connect_accepts_and_registers(self, manager):
        ws = FakeWebSocket()
        await manager.connect(ws, ORG_A, "user-1")

        assert ws.accepted
        assert manager.get_connected_count(ORG_A, "user-1") == 1
        assert manager.get_organization_user_ids(ORG_A) == ["user-1"]

    @pytest.mark.asyncio
    async def test_send_to_user_reaches_every_tab(self, manager):
        tab1, tab2, other = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
        await manager.connect(tab1, ORG_A, "user-1")
        await manager.connect(tab2, ORG_A, "user-1")
        await manager.connect(other, ORG_A, "user-2")

        delivered = await manager.send_to_user(ORG_A, "user-1", {"event": "ping", "data": {}})

        assert delivered == 2
        assert tab1.sent == [{"event": "ping", "data": {}}]
        assert tab2.sent == [{"event": "ping", "data": {}}]
        assert other.sent == []

    @pytest.mark.asyncio
    async def test_user_rooms_are_scoped_by_organization(self, manager):
        # Same auth user id connected in two organizations
        in_a, in_b = FakeWebSocket(), FakeWebSocket()
        await manager.connect(in_a, ORG_A, "user-1")
        await manager.connect(in_b, ORG_B, "user-1")

        await manager.send_to_user(ORG_A, "user-1", {"event": "receive_message", "data": {"id": 1}})

        assert len(in_a.sent) == 1
        assert in_b.sent == []

    @pytest.mark.asyncio
    async def test_send_to_organization_stays_in_organization(self, manager):
        a1, a2, b1 = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
        await manager.connect(a1, ORG_A, "user-1")
        await manager.connect(a2, ORG_A, "user-2")
        await manager.connect(b1, ORG_B, "user-3")

        delivered = await manager.send_to_organization(ORG_A, {"event": "status_change", "data": {"status": "busy"}})

        assert delivered == 2
        assert len(a1.sent) == 1
        assert len(a2.sent) == 1
        assert b1.sent == []

    @pytest.mark.asyncio
    async def test_send_to_users_ignores_unknown_users(self, manager):
        ws = FakeWebSocket()
        await manager.connect(ws, ORG_A, "user-1")

        delivered = await manager.send_to_users(ORG_A, ["user-1", "user-9"], {"event": "x", "data": {}})

        assert delivered == 1

    @pytest.mark.asyncio
    async def test_failed_socket_is_dropped(self, manager):
        good, broken = FakeWebSocket(), FakeWebSocket(fail=True)
        await manager.connect(good, ORG_A, "user-1")
        await manager.connect(broken, ORG_A, "user-2")

        delivered = await manager.send_to_organization(ORG_A, {"event": "x", "data": {}})

        assert delivered == 1
        assert manager.get_connected_count(ORG_A, "user-2") == 0
        assert manager.get_organization_user_ids(ORG_A) == ["user-1"]

    @pytest.mark.asyncio
    async def test_disconnect_cleans_up_empty_rooms(self, manager):
        ws = FakeWebSocket()
        await manager.connect(ws, ORG_A, "user-1")
        await manager.disconnect(ws, ORG_A, "user-1")

        assert manager.get_total_connections() == 0
        assert manager.get_organization_user_ids(ORG_A) == []

    @pytest.mark.asyncio
    async def test_disconnect_unknown_socket_is_noop(self, manager):
        await manager.disconnect(FakeWebSocket(), ORG_A, "nobody")
        assert manager.get_total_connections() == 0
