"""
Organization service for tenant lifecycle operations used by the admin API.
"""

import logging
import re
import uuid
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Member, Organization
from services.holiday_service import HolidayService

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class OrganizationService:

    @staticmethod
    def list_organizations(db: Session) -> List[Organization]:
        return db.query(Organization).order_by(Organization.created_at.desc(), Organization.name).all()

    @staticmethod
    def get_organization(db: Session, organization_id: uuid.UUID) -> Organization:
        organization = db.query(Organization).filter(Organization.id == organization_id).first()
        if organization is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Organization not found"
            )
        return organization

    @staticmethod
    def create_organization(db: Session, name: str, slug: str, owner_user_id: str) -> Organization:
        """
        Create an organization with its owner membership and seeded national holidays.

        Everything is committed in one transaction.

        Raises:
            HTTPException: 400 if the slug is malformed or already taken
        """
        slug = slug.strip().lower()
        if not SLUG_PATTERN.match(slug):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Slug must contain only lowercase letters, digits and hyphens"
            )

        if db.query(Organization).filter(Organization.slug == slug).first() is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Slug already in use"
            )

        try:
            organization = Organization(name=name.strip(), slug=slug)
            db.add(organization)
            db.flush()

            db.add(Member(user_id=owner_user_id, organization_id=organization.id, role="owner"))
            seeded = HolidayService.seed_national_holidays(db, organization.id, commit=False)
            db.commit()
        except IntegrityError:
            # Concurrent create with the same slug
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Slug already in use"
            )

        db.refresh(organization)
        logger.info(f"Created organization {organization.id} ('{slug}') with {seeded} national holidays")
        return organization

    @staticmethod
    def delete_organization(db: Session, organization_id: uuid.UUID) -> None:
        """Hard-delete an organization and, through cascades, everything it owns."""
        organization = OrganizationService.get_organization(db, organization_id)
        db.delete(organization)
        db.commit()
        logger.info(f"Deleted organization {organization_id}")
