"""
Shared response models for API endpoints.

This module contains Pydantic response models that are shared across
multiple API endpoints to ensure consistency and reduce duplication.
"""

import uuid
from datetime import date as date_type, datetime, time as time_type
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ConflictingAppointmentResponse(BaseModel):
    """Appointment that falls inside a requested blocked-day range."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    professional_id: Optional[int] = None
    date: date_type
    time: time_type
    start_time: datetime
    end_time: datetime
    status: str
    procedure_name: Optional[str] = None


class BlockedDayResponse(BaseModel):
    """Response model for a blocked-day range."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: uuid.UUID
    professional_id: int
    start_date: date_type
    end_date: date_type  # Inclusive
    reason: Optional[str] = None
    created_at: datetime


class BlockedDayCreateResponse(BaseModel):
    """
    Result of a blocked-day create.

    Either blocked_day is set (201) or conflicts is non-empty and nothing
    was inserted (200).
    """
    blocked_day: Optional[BlockedDayResponse] = None
    conflicts: List[ConflictingAppointmentResponse] = []


class HolidayResponse(BaseModel):
    """Response model for a holiday."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: uuid.UUID
    date: date_type
    name: str
    type: str


class HolidaySeedResponse(BaseModel):
    inserted: int


class ConversationResponse(BaseModel):
    """Response model for a conversation listing entry."""
    id: int
    is_group: bool
    name: Optional[str] = None
    created_by: Optional[int] = None
    member_ids: List[int]
    unread_count: int = 0
    updated_at: Optional[datetime] = None


class MessageResponse(BaseModel):
    """Response model for a chat message."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    sender_id: Optional[int] = None
    content: str
    read: bool
    created_at: datetime


class OrganizationResponse(BaseModel):
    """Response model for organization information."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    subscription_status: Optional[str] = None
    created_at: datetime


class SuccessResponse(BaseModel):
    success: bool = True
