"""
Outbox relay for realtime chat events.

Events are published to the rooms of the recipients listed in their payload
and then stamped with published_at. Delivery is at-least-once: an event whose
publication fails, or whose process dies before stamping, is published again
by the redispatch job, and clients dedupe by message id.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from core.database import Database
from core.realtime import RealtimeBroadcaster
from models import OutboxEvent
from utils.datetime_utils import clinic_now

logger = logging.getLogger(__name__)

REDISPATCH_BATCH_SIZE = 100


class OutboxDispatcher:
    """Publishes persisted outbox events through a realtime broadcaster."""

    @staticmethod
    def build_message(event: OutboxEvent) -> dict:
        """Wire message for an event: {"event": ..., "data": ...}."""
        return {"event": event.event_type, "data": event.payload.get("data", {})}

    @staticmethod
    async def publish_event(db: Session, broadcaster: RealtimeBroadcaster, event: OutboxEvent) -> bool:
        """
        Publish one event and mark it published.

        Returns:
            True if the event was published, False if the broadcaster failed
            (the event stays pending for the redispatch job)
        """
        recipients: List[str] = event.payload.get("recipients", [])
        try:
            delivered = await broadcaster.send_to_users(
                event.organization_id, recipients, OutboxDispatcher.build_message(event)
            )
        except Exception as e:
            logger.exception(f"Failed to publish outbox event {event.id}: {e}")
            return False

        event.published_at = clinic_now()
        db.commit()
        logger.debug(f"Published outbox event {event.id} to {delivered} socket(s)")
        return True

    @staticmethod
    def find_pending_events(
        db: Session,
        older_than_seconds: int = 0,
        limit: int = REDISPATCH_BATCH_SIZE
    ) -> List[OutboxEvent]:
        """Unpublished events created at least older_than_seconds ago, oldest first."""
        cutoff = clinic_now() - timedelta(seconds=older_than_seconds)
        return db.query(OutboxEvent).filter(
            OutboxEvent.published_at.is_(None),
            OutboxEvent.created_at <= cutoff
        ).order_by(OutboxEvent.id).limit(limit).all()

    @staticmethod
    async def dispatch_pending(
        database: Database,
        broadcaster: Optional[RealtimeBroadcaster],
        older_than_seconds: int = 0
    ) -> int:
        """
        Re-publish events that were persisted but never published.

        Returns:
            Number of events published in this run
        """
        if broadcaster is None:
            return 0

        published = 0
        db = database.session()
        try:
            for event in OutboxDispatcher.find_pending_events(db, older_than_seconds):
                if await OutboxDispatcher.publish_event(db, broadcaster, event):
                    published += 1
        finally:
            db.close()

        if published:
            logger.info(f"Redispatched {published} pending outbox event(s)")
        return published
