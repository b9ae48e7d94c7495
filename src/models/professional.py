"""
Professional model representing a staff member of an organization.

Professionals are assigned appointments, own blocked-day ranges, and take
part in internal chat.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP, Integer, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.constants import MAX_STRING_LENGTH, DEFAULT_APPOINTMENT_DURATION_MINUTES


class Professional(Base):
    """Staff member scoped to an organization."""

    __tablename__ = "professionals"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="CASCADE")
    )

    user_id: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)
    """Auth subject of the linked login. Null while the invite is pending."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    email: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)

    role_type: Mapped[str] = mapped_column(String(20), default="clinical")
    """'clinical' or 'administrative'."""

    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    """Calendar display color (hex)."""

    appointment_duration: Mapped[int] = mapped_column(Integer, default=DEFAULT_APPOINTMENT_DURATION_MINUTES)
    """Default slot length in minutes for new appointments."""

    status: Mapped[str] = mapped_column(String(20), default="active")
    """'active', 'invited' or 'inactive'."""

    chat_status: Mapped[str] = mapped_column(String(20), default="offline")
    """Presence indicator: 'online', 'busy' or 'offline'."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    organization = relationship("Organization", back_populates="professionals")

    __table_args__ = (
        CheckConstraint("appointment_duration > 0", name="check_professional_duration_positive"),
        Index("idx_professionals_org_user", "organization_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Professional(id={self.id}, name='{self.name}', status='{self.status}')>"
