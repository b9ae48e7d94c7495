"""
Typed entity registry backing the /api/{entity} routes.

A closed set of entity kinds maps to repository objects that know their
model, their create/update/read schemas and how to scope queries by
organization. Nothing is looked up by table or column name at runtime.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from fastapi import HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.database import Base
from models import Appointment, Patient, Professional
from services.appointment_service import AppointmentService
from shared_types.entities import (
    AppointmentCreate, AppointmentRead, AppointmentUpdate,
    PatientCreate, PatientRead, PatientUpdate,
    ProfessionalCreate, ProfessionalRead, ProfessionalUpdate,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class EntityKind(str, Enum):
    """Entities exposed through the generic CRUD routes."""
    PROFESSIONAL = "Professional"
    PATIENT = "Patient"
    APPOINTMENT = "Appointment"


@dataclass
class ListFilters:
    """Query filters accepted by GET /api/{entity}."""
    id: Optional[int] = None
    limit: Optional[int] = None
    start: Optional[date] = None  # Appointments only
    end: Optional[date] = None  # Appointments only
    professional_id: Optional[int] = None  # Appointments only


class EntityRepository(Generic[ModelT]):
    """Organization-scoped CRUD for one model."""

    model: Type[ModelT]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    read_schema: Type[BaseModel]
    label: str

    def parse_create(self, payload: Dict[str, Any]) -> BaseModel:
        """Validate a create payload. Raises pydantic.ValidationError."""
        return self.create_schema.model_validate(payload)

    def parse_update(self, payload: Dict[str, Any]) -> BaseModel:
        """Validate a partial update payload. Raises pydantic.ValidationError."""
        return self.update_schema.model_validate(payload)

    def serialize(self, row: ModelT) -> Dict[str, Any]:
        return self.read_schema.model_validate(row).model_dump(mode="json")

    def list(self, db: Session, organization_id: uuid.UUID, filters: ListFilters) -> List[ModelT]:
        query = db.query(self.model).filter(self.model.organization_id == organization_id)  # type: ignore[attr-defined]
        if filters.id is not None:
            query = query.filter(self.model.id == filters.id)  # type: ignore[attr-defined]
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())  # type: ignore[attr-defined]
        if filters.limit is not None:
            query = query.limit(filters.limit)
        return query.all()

    def get(self, db: Session, organization_id: uuid.UUID, entity_id: int) -> ModelT:
        row = db.query(self.model).filter(
            self.model.id == entity_id,  # type: ignore[attr-defined]
            self.model.organization_id == organization_id  # type: ignore[attr-defined]
        ).first()
        if row is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{self.label} not found"
            )
        return row

    def create(self, db: Session, organization_id: uuid.UUID, data: BaseModel) -> ModelT:
        row = self.model(organization_id=organization_id, **data.model_dump())
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    def update(self, db: Session, organization_id: uuid.UUID, row: ModelT, data: BaseModel) -> ModelT:
        columns = self.model.__table__.columns  # type: ignore[attr-defined]
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and not columns[key].nullable:
                continue  # Required columns cannot be cleared
            setattr(row, key, value)
        db.commit()
        db.refresh(row)
        return row

    def delete(self, db: Session, organization_id: uuid.UUID, entity_id: int) -> None:
        row = self.get(db, organization_id, entity_id)
        db.delete(row)
        db.commit()
        logger.info(f"Deleted {self.label} {entity_id} for organization {organization_id}")


class ProfessionalRepository(EntityRepository[Professional]):
    model = Professional
    create_schema = ProfessionalCreate
    update_schema = ProfessionalUpdate
    read_schema = ProfessionalRead
    label = "Professional"


class PatientRepository(EntityRepository[Patient]):
    model = Patient
    create_schema = PatientCreate
    update_schema = PatientUpdate
    read_schema = PatientRead
    label = "Patient"


class AppointmentRepository(EntityRepository[Appointment]):
    model = Appointment
    create_schema = AppointmentCreate
    update_schema = AppointmentUpdate
    read_schema = AppointmentRead
    label = "Appointment"

    def list(self, db: Session, organization_id: uuid.UUID, filters: ListFilters) -> List[Appointment]:
        if filters.id is not None:
            return db.query(Appointment).filter(
                Appointment.organization_id == organization_id,
                Appointment.id == filters.id
            ).all()
        return AppointmentService.list_appointments(
            db,
            organization_id,
            start=filters.start,
            end=filters.end,
            professional_id=filters.professional_id,
            limit=filters.limit
        )

    def create(self, db: Session, organization_id: uuid.UUID, data: BaseModel) -> Appointment:
        assert isinstance(data, AppointmentCreate)
        return AppointmentService.create_appointment(db, organization_id, data)

    def update(self, db: Session, organization_id: uuid.UUID, row: Appointment, data: BaseModel) -> Appointment:
        assert isinstance(data, AppointmentUpdate)
        return AppointmentService.update_appointment(db, organization_id, row, data)


ENTITY_REGISTRY: Dict[EntityKind, EntityRepository[Any]] = {
    EntityKind.PROFESSIONAL: ProfessionalRepository(),
    EntityKind.PATIENT: PatientRepository(),
    EntityKind.APPOINTMENT: AppointmentRepository(),
}


def get_repository(kind: EntityKind) -> EntityRepository[Any]:
    return ENTITY_REGISTRY[kind]
