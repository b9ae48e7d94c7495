"""
Outbox event model for realtime publication.

A chat message and its outbox event are committed in the same transaction.
The relay publishes the event afterwards and stamps published_at; events left
unpublished (process crash, broadcast failure) are picked up again by the
redispatch job. Consumers can always reconcile against the persisted row
named by aggregate_id.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import String, TIMESTAMP, JSON, Index, ForeignKey, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class OutboxEvent(Base):
    __tablename__ = "outbox_events"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="CASCADE")
    )

    event_type: Mapped[str] = mapped_column(String(50))
    """Realtime event name, e.g. 'receive_message'."""

    aggregate_id: Mapped[int] = mapped_column()
    """Identifier of the persisted row the event describes."""

    payload: Mapped[Dict[str, Any]] = mapped_column(JSON().with_variant(JSONB(), "postgresql"))
    """Event body plus the recipient user ids it must reach."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    published_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_outbox_events_unpublished", "published_at", "id"),
    )

    def __repr__(self) -> str:
        return f"<OutboxEvent(id={self.id}, type='{self.event_type}', aggregate_id={self.aggregate_id}, published_at={self.published_at})>"
