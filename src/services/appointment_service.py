"""
Appointment service for appointment business logic.

Appointments store naive local wall-clock times. start_time and end_time are
always derived here from date + time + duration_minutes so the invariant
end_time == start_time + duration holds for every write path.

Overlapping appointments for the same professional are accepted; there is
no double-booking check.
"""

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from core.constants import DEFAULT_APPOINTMENT_DURATION_MINUTES
from models import Appointment, Patient, Professional
from shared_types.entities import AppointmentCreate, AppointmentUpdate
from utils.datetime_utils import compute_appointment_window, day_bounds

logger = logging.getLogger(__name__)


class AppointmentService:
    """
    Service class for appointment operations.

    All lookups are scoped by organization_id, so rows owned by another
    organization surface as 404.
    """

    @staticmethod
    def _get_patient(db: Session, organization_id: uuid.UUID, patient_id: int) -> Patient:
        patient = db.query(Patient).filter(
            Patient.id == patient_id,
            Patient.organization_id == organization_id
        ).first()
        if patient is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Patient not found"
            )
        return patient

    @staticmethod
    def _get_professional(db: Session, organization_id: uuid.UUID, professional_id: int) -> Professional:
        professional = db.query(Professional).filter(
            Professional.id == professional_id,
            Professional.organization_id == organization_id
        ).first()
        if professional is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Professional not found"
            )
        return professional

    @staticmethod
    def create_appointment(db: Session, organization_id: uuid.UUID, data: AppointmentCreate) -> Appointment:
        """
        Create an appointment with derived start/end times.

        The duration defaults to the professional's appointment_duration,
        or DEFAULT_APPOINTMENT_DURATION_MINUTES without a professional.

        Raises:
            HTTPException: 404 if patient or professional is not in the organization
        """
        AppointmentService._get_patient(db, organization_id, data.patient_id)

        duration = data.duration_minutes
        if data.professional_id is not None:
            professional = AppointmentService._get_professional(db, organization_id, data.professional_id)
            if duration is None:
                duration = professional.appointment_duration
        if duration is None:
            duration = DEFAULT_APPOINTMENT_DURATION_MINUTES

        start_time, end_time = compute_appointment_window(data.date, data.time, duration)

        appointment = Appointment(
            organization_id=organization_id,
            patient_id=data.patient_id,
            professional_id=data.professional_id,
            date=data.date,
            time=data.time.replace(tzinfo=None),
            duration_minutes=duration,
            start_time=start_time,
            end_time=end_time,
            status=data.status.value,
            procedure_name=data.procedure_name,
            notes=data.notes
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)

        logger.info(f"Created appointment {appointment.id} ({start_time} - {end_time}) for organization {organization_id}")
        return appointment

    @staticmethod
    def update_appointment(
        db: Session,
        organization_id: uuid.UUID,
        appointment: Appointment,
        data: AppointmentUpdate
    ) -> Appointment:
        """
        Apply a partial update, re-deriving start/end when timing fields change.

        Raises:
            HTTPException: 404 if a new patient or professional is not in the organization
        """
        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)

        if changes.get("patient_id") is not None:
            AppointmentService._get_patient(db, organization_id, changes["patient_id"])
        if changes.get("professional_id") is not None:
            AppointmentService._get_professional(db, organization_id, changes["professional_id"])
        if "status" in changes and changes["status"] is not None:
            changes["status"] = changes["status"].value
        if changes.get("time") is not None:
            changes["time"] = changes["time"].replace(tzinfo=None)

        for key, value in changes.items():
            if value is None and key in ("patient_id", "date", "time", "duration_minutes", "status"):
                continue  # Required columns cannot be cleared
            setattr(appointment, key, value)

        appointment.start_time, appointment.end_time = compute_appointment_window(
            appointment.date, appointment.time, appointment.duration_minutes
        )
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def list_appointments(
        db: Session,
        organization_id: uuid.UUID,
        start: Optional[date] = None,
        end: Optional[date] = None,
        professional_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Appointment]:
        """Appointments of the organization ordered by start_time, optionally by day range."""
        query = db.query(Appointment).filter(Appointment.organization_id == organization_id)

        if professional_id is not None:
            query = query.filter(Appointment.professional_id == professional_id)
        if start is not None:
            lower, _ = day_bounds(start, start)
            query = query.filter(Appointment.start_time >= lower)
        if end is not None:
            _, upper = day_bounds(end, end)
            query = query.filter(Appointment.start_time < upper)

        query = query.order_by(Appointment.start_time, Appointment.id)
        if limit is not None:
            query = query.limit(limit)
        return query.all()
