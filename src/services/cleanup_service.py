"""
Tenant cleanup: hard-deletes abandoned and long-canceled organizations.

- Ghost organizations: created more than GHOST_ORGANIZATION_AGE_DAYS ago,
  no active (or manually overridden) subscription, and fewer than
  GHOST_ORGANIZATION_MAX_PATIENTS patients.
- Expired organizations: subscription canceled and not updated for
  EXPIRED_ORGANIZATION_RETENTION_DAYS.

Deleting an organization cascades to every row it owns.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from core.constants import (
    ACTIVE_SUBSCRIPTION_STATUSES,
    EXPIRED_ORGANIZATION_RETENTION_DAYS,
    GHOST_ORGANIZATION_AGE_DAYS,
    GHOST_ORGANIZATION_MAX_PATIENTS,
)
from models import Organization, Patient
from utils.datetime_utils import clinic_now, ensure_clinic_tz

logger = logging.getLogger(__name__)


class CleanupService:
    def __init__(self, db: Session):
        self.db = db

    def find_ghost_organizations(self, now: Optional[datetime] = None) -> List[Organization]:
        now = ensure_clinic_tz(now) or clinic_now()
        cutoff = now - timedelta(days=GHOST_ORGANIZATION_AGE_DAYS)

        patient_count = (
            select(func.count(Patient.id))
            .where(Patient.organization_id == Organization.id)
            .correlate(Organization)
            .scalar_subquery()
        )

        return self.db.query(Organization).filter(
            Organization.created_at < cutoff,
            or_(
                Organization.subscription_status.is_(None),
                Organization.subscription_status.notin_(ACTIVE_SUBSCRIPTION_STATUSES)
            ),
            patient_count < GHOST_ORGANIZATION_MAX_PATIENTS
        ).all()

    def find_expired_organizations(self, now: Optional[datetime] = None) -> List[Organization]:
        now = ensure_clinic_tz(now) or clinic_now()
        cutoff = now - timedelta(days=EXPIRED_ORGANIZATION_RETENTION_DAYS)

        return self.db.query(Organization).filter(
            Organization.subscription_status == "canceled",
            Organization.updated_at < cutoff
        ).all()

    def cleanup_organizations(self, now: Optional[datetime] = None) -> List[str]:
        """
        Delete ghost and expired organizations in a single transaction.

        Returns the names of the deleted organizations.
        """
        doomed = {org.id: org for org in self.find_ghost_organizations(now)}
        for org in self.find_expired_organizations(now):
            doomed.setdefault(org.id, org)

        deleted_names: List[str] = []
        try:
            for org in doomed.values():
                deleted_names.append(org.name)
                self.db.delete(org)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for name in deleted_names:
            logger.info(f"Deleted organization '{name}' during tenant cleanup")
        return deleted_names
