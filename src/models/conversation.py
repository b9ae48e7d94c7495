"""
Chat conversation models.

A conversation is either a direct thread between two professionals or a
named group with an explicit member list. Both are scoped to an organization.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP, Boolean, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class Conversation(Base):
    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="CASCADE"), index=True
    )

    is_group: Mapped[bool] = mapped_column(Boolean, default=False)

    name: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)
    """Display name, groups only."""

    direct_key: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    """Sorted professional pair ("<low id>:<high id>") of a direct thread, null for groups."""

    created_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("professionals.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    members = relationship(
        "ConversationMember",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("organization_id", "direct_key", name="uq_conversation_direct_pair"),
    )

    @property
    def member_ids(self) -> list[int]:
        return sorted(m.professional_id for m in self.members)

    def __repr__(self) -> str:
        return f"<Conversation(id={self.id}, is_group={self.is_group}, name={self.name!r})>"


class ConversationMember(Base):
    __tablename__ = "conversation_members"

    id: Mapped[int] = mapped_column(primary_key=True)

    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id", ondelete="CASCADE"))
    professional_id: Mapped[int] = mapped_column(ForeignKey("professionals.id", ondelete="CASCADE"))

    conversation = relationship("Conversation", back_populates="members")
    professional = relationship("Professional")

    __table_args__ = (
        UniqueConstraint("conversation_id", "professional_id", name="uq_conversation_member"),
    )
