"""
Blocked day model representing a professional's unavailability window.

A block covers whole calendar days from start_date to end_date inclusive.
Creating one never cancels or mutates existing appointments.
"""

import uuid
from datetime import datetime, date
from typing import Optional

from sqlalchemy import TIMESTAMP, Date, Text, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class BlockedDay(Base):
    __tablename__ = "blocked_days"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="CASCADE")
    )

    professional_id: Mapped[int] = mapped_column(ForeignKey("professionals.id", ondelete="CASCADE"))

    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)
    """Inclusive last blocked day."""

    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    professional = relationship("Professional")

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="check_blocked_day_range"),
        Index("idx_blocked_days_org_dates", "organization_id", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        return f"<BlockedDay(id={self.id}, professional_id={self.professional_id}, {self.start_date}..{self.end_date})>"
