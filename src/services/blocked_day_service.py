"""
Blocked day service: availability/conflict checking for professional blocks.

Before a blocked-day range is persisted, appointments of that professional
that start inside the range are looked up. Conflicts are a soft failure:
the caller gets the conflicting appointments back and may retry with
confirm_conflicts to create the block anyway. Appointments are never
cancelled or otherwise touched by this service.

There is no lock between the conflict check and the insert, so a concurrent
appointment creation can slip in between them.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from core.constants import NON_BLOCKING_APPOINTMENT_STATUSES
from models import Appointment, BlockedDay, Professional
from utils.datetime_utils import day_bounds

logger = logging.getLogger(__name__)


@dataclass
class BlockedDayResult:
    """Outcome of a blocked-day creation attempt."""
    blocked_day: Optional[BlockedDay] = None
    conflicts: List[Appointment] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return self.blocked_day is not None


class BlockedDayService:
    """Service class for blocked-day operations."""

    @staticmethod
    def get_professional(db: Session, organization_id: uuid.UUID, professional_id: int) -> Professional:
        """
        Fetch a professional within the organization.

        Raises:
            HTTPException: 404 if missing or owned by another organization
        """
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
    def find_conflicts(
        db: Session,
        organization_id: uuid.UUID,
        professional_id: int,
        start_date: date,
        end_date: date
    ) -> List[Appointment]:
        """
        Appointments of the professional starting on a day in [start_date, end_date].

        Cancelled appointments and no-shows are ignored.

        Args:
            db: Database session
            organization_id: Tenant
            professional_id: Professional whose agenda is checked
            start_date: First blocked day (inclusive)
            end_date: Last blocked day (inclusive)

        Returns:
            Conflicting appointments ordered by start_time
        """
        lower, upper = day_bounds(start_date, end_date)
        return db.query(Appointment).filter(
            Appointment.organization_id == organization_id,
            Appointment.professional_id == professional_id,
            Appointment.start_time >= lower,
            Appointment.start_time < upper,
            Appointment.status.notin_(NON_BLOCKING_APPOINTMENT_STATUSES)
        ).order_by(Appointment.start_time, Appointment.id).all()

    @staticmethod
    def create_blocked_day(
        db: Session,
        organization_id: uuid.UUID,
        professional_id: int,
        start_date: date,
        end_date: date,
        reason: str,
        confirm_conflicts: bool = False
    ) -> BlockedDayResult:
        """
        Create a blocked-day range unless it conflicts and was not confirmed.

        Returns:
            BlockedDayResult with either the new row or the conflicts found.
            When confirm_conflicts is set the row is created and the
            conflicts are still reported.

        Raises:
            HTTPException: 400 for an inverted range, 404 for an unknown professional
        """
        if end_date < start_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="endDate must be on or after startDate"
            )

        BlockedDayService.get_professional(db, organization_id, professional_id)

        conflicts = BlockedDayService.find_conflicts(
            db, organization_id, professional_id, start_date, end_date
        )

        if conflicts and not confirm_conflicts:
            logger.info(
                f"Blocked day for professional {professional_id} ({start_date}..{end_date}) "
                f"not created: {len(conflicts)} conflicting appointment(s)"
            )
            return BlockedDayResult(conflicts=conflicts)

        blocked_day = BlockedDay(
            organization_id=organization_id,
            professional_id=professional_id,
            start_date=start_date,
            end_date=end_date,
            reason=reason
        )
        db.add(blocked_day)
        db.commit()
        db.refresh(blocked_day)

        if conflicts:
            logger.info(
                f"Blocked day {blocked_day.id} created over {len(conflicts)} confirmed conflict(s); "
                f"appointments left unchanged"
            )
        return BlockedDayResult(blocked_day=blocked_day, conflicts=conflicts)

    @staticmethod
    def list_blocked_days(
        db: Session,
        organization_id: uuid.UUID,
        professional_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[BlockedDay]:
        """
        Blocked days of the organization, optionally filtered.

        The range filter selects blocks overlapping [start_date, end_date]:
        start_date <= query end AND end_date >= query start. Either bound
        may be omitted.
        """
        query = db.query(BlockedDay).filter(BlockedDay.organization_id == organization_id)

        if professional_id is not None:
            query = query.filter(BlockedDay.professional_id == professional_id)
        if end_date is not None:
            query = query.filter(BlockedDay.start_date <= end_date)
        if start_date is not None:
            query = query.filter(BlockedDay.end_date >= start_date)

        return query.order_by(BlockedDay.start_date, BlockedDay.id).all()

    @staticmethod
    def get_blocked_day(db: Session, organization_id: uuid.UUID, blocked_day_id: int) -> BlockedDay:
        blocked_day = db.query(BlockedDay).filter(
            BlockedDay.id == blocked_day_id,
            BlockedDay.organization_id == organization_id
        ).first()
        if blocked_day is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Blocked day not found"
            )
        return blocked_day

    @staticmethod
    def update_reason(db: Session, organization_id: uuid.UUID, blocked_day_id: int, reason: str) -> BlockedDay:
        """Change the reason of an existing block. Dates are immutable."""
        blocked_day = BlockedDayService.get_blocked_day(db, organization_id, blocked_day_id)
        blocked_day.reason = reason
        db.commit()
        db.refresh(blocked_day)
        return blocked_day

    @staticmethod
    def delete_blocked_day(db: Session, organization_id: uuid.UUID, blocked_day_id: int) -> None:
        blocked_day = BlockedDayService.get_blocked_day(db, organization_id, blocked_day_id)
        db.delete(blocked_day)
        db.commit()
        logger.info(f"Deleted blocked day {blocked_day_id} for organization {organization_id}")
