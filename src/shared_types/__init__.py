"""
Shared type definitions for the ClinicOS scheduling backend.

This module contains request/response schemas used by both services and API
routers.
"""

from shared_types.entities import (
    ProfessionalCreate, ProfessionalUpdate, ProfessionalRead,
    PatientCreate, PatientUpdate, PatientRead,
    AppointmentCreate, AppointmentUpdate, AppointmentRead,
)

__all__ = [
    "ProfessionalCreate",
    "ProfessionalUpdate",
    "ProfessionalRead",
    "PatientCreate",
    "PatientUpdate",
    "PatientRead",
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentRead",
]
