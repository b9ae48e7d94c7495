"""
Patient model.

The behavioral attributes (temperature, temperament, motivation, conscience
level) are free-form categorization fields for display only; scheduling
logic never reads them.
"""

import uuid
from datetime import datetime, date
from typing import Optional

from sqlalchemy import String, TIMESTAMP, Date, Text, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class Patient(Base):
    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="CASCADE"), index=True
    )

    full_name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    temperature: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    temperament: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    motivation: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    conscience_level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Patient(id={self.id}, full_name='{self.full_name}')>"
