"""
Unit tests for the outbox relay.
"""

import pytest

from models import OutboxEvent
from services.conversation_service import ConversationService
from services.outbox_service import OutboxDispatcher
from tests.factories import create_organization, create_professional


class FakeBroadcaster:
    """Records what would have been sent to the sockets."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send_to_user(self, organization_id, user_id, message):
        return await self.send_to_users(organization_id, [user_id], message)

    async def send_to_users(self, organization_id, user_ids, message):
        if self.fail:
            raise RuntimeError("broadcaster unavailable")
        self.sent.append((organization_id, sorted(user_ids), message))
        return len(self.sent)

    async def send_to_organization(self, organization_id, message):
        return await self.send_to_users(organization_id, [], message)


@pytest.fixture
def chat(db_session):
    """Organization with two linked professionals and a direct conversation."""
    organization = create_organization(db_session)
    ana = create_professional(db_session, organization, name="Ana", user_id="user-ana")
    bruno = create_professional(db_session, organization, name="Bruno", user_id="user-bruno")
    conversation, _ = ConversationService.get_or_create_direct(db_session, organization.id, ana, bruno.id)
    return organization, ana, bruno, conversation


class TestPublishEvent:

    @pytest.mark.asyncio
    async def test_publishes_to_recipients_and_stamps_event(self, db_session, chat):
        organization, ana, _, conversation = chat
        message, event = ConversationService.post_message(db_session, conversation, ana, "Olá")
        broadcaster = FakeBroadcaster()

        assert await OutboxDispatcher.publish_event(db_session, broadcaster, event) is True

        org_id, recipients, wire = broadcaster.sent[0]
        assert org_id == organization.id
        assert recipients == ["user-ana", "user-bruno"]
        assert wire["event"] == "receive_message"
        assert wire["data"]["id"] == message.id
        assert wire["data"]["content"] == "Olá"
        assert event.published_at is not None

    @pytest.mark.asyncio
    async def test_failure_leaves_event_pending(self, db_session, chat):
        _, ana, _, conversation = chat
        _, event = ConversationService.post_message(db_session, conversation, ana, "Olá")

        assert await OutboxDispatcher.publish_event(db_session, FakeBroadcaster(fail=True), event) is False

        db_session.expire_all()
        assert db_session.get(OutboxEvent, event.id).published_at is None
        assert [e.id for e in OutboxDispatcher.find_pending_events(db_session)] == [event.id]


class TestDispatchPending:

    @pytest.mark.asyncio
    async def test_redispatches_pending_events_once(self, test_database, db_session, chat):
        _, ana, bruno, conversation = chat
        ConversationService.post_message(db_session, conversation, ana, "Primeira")
        ConversationService.post_message(db_session, conversation, bruno, "Segunda")
        broadcaster = FakeBroadcaster()

        assert await OutboxDispatcher.dispatch_pending(test_database, broadcaster) == 2
        assert [wire["data"]["content"] for _, _, wire in broadcaster.sent] == ["Primeira", "Segunda"]

        assert await OutboxDispatcher.dispatch_pending(test_database, broadcaster) == 0
        db_session.expire_all()
        assert OutboxDispatcher.find_pending_events(db_session) == []

    @pytest.mark.asyncio
    async def test_recent_events_wait_for_the_grace_period(self, test_database, db_session, chat):
        _, ana, _, conversation = chat
        ConversationService.post_message(db_session, conversation, ana, "Olá")

        assert await OutboxDispatcher.dispatch_pending(test_database, FakeBroadcaster(), older_than_seconds=3600) == 0

    @pytest.mark.asyncio
    async def test_without_broadcaster_nothing_is_published(self, test_database, db_session, chat):
        _, ana, _, conversation = chat
        ConversationService.post_message(db_session, conversation, ana, "Olá")

        assert await OutboxDispatcher.dispatch_pending(test_database, None) == 0
        assert len(OutboxDispatcher.find_pending_events(db_session)) == 1
