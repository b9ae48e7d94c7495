"""
Holiday service for the organization holiday calendar.

Holidays are advisory annotations for the agenda. National holidays are
seeded per organization for explicit years and are not extended
automatically; local holidays are entered by owners and admins.
"""

import logging
import uuid
from datetime import date
from typing import Iterable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import extract
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import HOLIDAY_SEED_YEARS
from models import Holiday
from utils.holiday_calendar import national_holidays_for_years

logger = logging.getLogger(__name__)


class HolidayService:
    """Service class for holiday operations."""

    @staticmethod
    def list_holidays(db: Session, organization_id: uuid.UUID, year: Optional[int] = None) -> List[Holiday]:
        """Holidays of one organization, optionally restricted to a year, ordered by date."""
        query = db.query(Holiday).filter(Holiday.organization_id == organization_id)
        if year is not None:
            query = query.filter(extract("year", Holiday.date) == year)
        return query.order_by(Holiday.date, Holiday.type, Holiday.id).all()

    @staticmethod
    def create_holiday(
        db: Session,
        organization_id: uuid.UUID,
        holiday_date: date,
        name: str,
        holiday_type: str = "local"
    ) -> Holiday:
        """
        Insert a holiday.

        Raises:
            HTTPException: 409 if the organization already has a holiday of
                this type on this date
        """
        holiday = Holiday(
            organization_id=organization_id,
            date=holiday_date,
            name=name,
            type=holiday_type
        )
        db.add(holiday)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.info(f"Duplicate holiday {holiday_date} ({holiday_type}) for organization {organization_id}: {e.orig}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A holiday of this type already exists on this date"
            )
        db.refresh(holiday)
        return holiday

    @staticmethod
    def delete_holiday(db: Session, organization_id: uuid.UUID, holiday_id: int) -> None:
        """
        Delete a local holiday.

        Raises:
            HTTPException: 404 if not found in the organization, 400 for
                seeded national holidays
        """
        holiday = db.query(Holiday).filter(
            Holiday.id == holiday_id,
            Holiday.organization_id == organization_id
        ).first()
        if holiday is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Holiday not found"
            )
        if holiday.type == "national":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="National holidays cannot be deleted"
            )
        db.delete(holiday)
        db.commit()

    @staticmethod
    def seed_national_holidays(
        db: Session,
        organization_id: uuid.UUID,
        years: Iterable[int] = HOLIDAY_SEED_YEARS,
        commit: bool = True
    ) -> int:
        """
        Insert national holidays for the given years, skipping existing dates.

        Args:
            db: Database session
            organization_id: Tenant to seed
            years: Calendar years to seed
            commit: Commit when done (False when part of a larger transaction)

        Returns:
            Number of rows inserted
        """
        calendar = national_holidays_for_years(years)
        if not calendar:
            return 0

        existing = {
            row.date for row in db.query(Holiday.date).filter(
                Holiday.organization_id == organization_id,
                Holiday.type == "national",
                Holiday.date.in_([h.date for h in calendar])
            ).all()
        }

        inserted = 0
        for entry in calendar:
            if entry.date in existing:
                continue
            db.add(Holiday(
                organization_id=organization_id,
                date=entry.date,
                name=entry.name,
                type="national"
            ))
            inserted += 1

        if commit:
            db.commit()
        else:
            db.flush()

        logger.info(f"Seeded {inserted} national holidays for organization {organization_id}")
        return inserted
