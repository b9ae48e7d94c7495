"""
Typed schemas for the entity registry (professionals, patients, appointments).

Each entity kind has a create schema, a partial update schema, and a read
schema built from the ORM row.
"""

import uuid
from datetime import date as date_type, datetime, time as time_type
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.appointment import AppointmentStatus

RoleType = Literal["clinical", "administrative"]
ProfessionalStatus = Literal["active", "invited", "inactive"]
ChatStatus = Literal["online", "busy", "offline"]


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ===== Professional =====

class ProfessionalCreate(_StrictModel):
    name: str = Field(min_length=1, max_length=255)
    email: Optional[str] = None
    user_id: Optional[str] = None
    role_type: RoleType = "clinical"
    color: Optional[str] = Field(default=None, max_length=20)
    appointment_duration: int = Field(default=30, gt=0, le=24 * 60)
    status: ProfessionalStatus = "active"


class ProfessionalUpdate(_StrictModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = None
    user_id: Optional[str] = None
    role_type: Optional[RoleType] = None
    color: Optional[str] = Field(default=None, max_length=20)
    appointment_duration: Optional[int] = Field(default=None, gt=0, le=24 * 60)
    status: Optional[ProfessionalStatus] = None


class ProfessionalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: uuid.UUID
    user_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    role_type: str
    color: Optional[str] = None
    appointment_duration: int
    status: str
    chat_status: str
    created_at: datetime


# ===== Patient =====

class PatientCreate(_StrictModel):
    full_name: str = Field(min_length=1, max_length=255)
    phone: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date_type] = None
    temperature: Optional[str] = None
    temperament: Optional[str] = None
    motivation: Optional[str] = None
    conscience_level: Optional[str] = None
    notes: Optional[str] = None


class PatientUpdate(_StrictModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date_type] = None
    temperature: Optional[str] = None
    temperament: Optional[str] = None
    motivation: Optional[str] = None
    conscience_level: Optional[str] = None
    notes: Optional[str] = None


class PatientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: uuid.UUID
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date_type] = None
    temperature: Optional[str] = None
    temperament: Optional[str] = None
    motivation: Optional[str] = None
    conscience_level: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


# ===== Appointment =====

class AppointmentCreate(_StrictModel):
    patient_id: int
    professional_id: Optional[int] = None
    date: date_type
    time: time_type
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=24 * 60)  # Falls back to the professional's default
    status: AppointmentStatus = AppointmentStatus.AGENDADO
    procedure_name: Optional[str] = None
    notes: Optional[str] = None


class AppointmentUpdate(_StrictModel):
    patient_id: Optional[int] = None
    professional_id: Optional[int] = None
    date: Optional[date_type] = None
    time: Optional[time_type] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=24 * 60)
    status: Optional[AppointmentStatus] = None
    procedure_name: Optional[str] = None
    notes: Optional[str] = None


class AppointmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: uuid.UUID
    patient_id: int
    professional_id: Optional[int] = None
    date: date_type
    time: time_type
    duration_minutes: int
    start_time: datetime  # Naive local wall-clock time
    end_time: datetime
    status: str
    procedure_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
