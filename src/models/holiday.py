"""
Holiday model.

Holidays are calendar annotations only: they are rendered as badges on the
agenda and never block appointment creation.
"""

import uuid
from datetime import datetime, date as date_type

from sqlalchemy import String, TIMESTAMP, Date, ForeignKey, Index, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class Holiday(Base):
    __tablename__ = "holidays"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="CASCADE")
    )

    date: Mapped[date_type] = mapped_column(Date)
    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))

    type: Mapped[str] = mapped_column(String(20), default="local")
    """'national' (seeded) or 'local' (entered by the organization)."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "date", "type", name="uq_holiday_org_date_type"),
        CheckConstraint("type IN ('national', 'local')", name="check_holiday_type"),
        Index("idx_holidays_org_date", "organization_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<Holiday(date={self.date}, name='{self.name}', type='{self.type}')>"
