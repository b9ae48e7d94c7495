"""
Appointment model, the central scheduling entity.

start_time and end_time are derived from date + time + duration_minutes and
stored as naive local wall-clock datetimes; they are never UTC-normalized.
Overlapping appointments for the same professional are allowed.
"""

import uuid
from datetime import datetime, date as date_type, time as time_type
from enum import Enum
from typing import Optional

from sqlalchemy import (
    String, TIMESTAMP, DateTime, Date, Time, Integer, Text, ForeignKey, Index, CheckConstraint, Uuid
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class AppointmentStatus(str, Enum):
    """Appointment lifecycle states."""
    AGENDADO = "agendado"
    CONFIRMADO = "confirmado"
    AGUARDANDO = "aguardando"
    EM_ATENDIMENTO = "em_atendimento"
    FINALIZADO = "finalizado"
    FALTOU = "faltou"
    CANCELADO = "cancelado"


_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in AppointmentStatus)


class Appointment(Base):
    """Patient appointment, optionally assigned to a professional."""

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="CASCADE")
    )

    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id", ondelete="CASCADE"))

    professional_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("professionals.id", ondelete="SET NULL"), nullable=True
    )

    date: Mapped[date_type] = mapped_column(Date)
    """Local calendar date the appointment starts on."""

    time: Mapped[time_type] = mapped_column(Time)
    """Local wall-clock start time."""

    duration_minutes: Mapped[int] = mapped_column(Integer)

    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False))
    """date + time, naive local."""

    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=False))
    """start_time + duration_minutes, naive local."""

    status: Mapped[str] = mapped_column(String(20), default=AppointmentStatus.AGENDADO.value)

    procedure_name: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    patient = relationship("Patient")
    professional = relationship("Professional")

    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="check_appointment_status"),
        CheckConstraint("duration_minutes > 0", name="check_appointment_duration_positive"),
        # Conflict checks filter by organization + professional + start_time range
        Index("idx_appointments_org_professional_start", "organization_id", "professional_id", "start_time"),
        Index("idx_appointments_org_start", "organization_id", "start_time"),
    )

    def __repr__(self) -> str:
        return f"<Appointment(id={self.id}, professional_id={self.professional_id}, start={self.start_time}, status='{self.status}')>"
