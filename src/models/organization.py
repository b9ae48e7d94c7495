"""
Organization model representing a tenant.

An organization is the isolation boundary for all clinical and billing data:
every professional, patient, appointment, blocked day, holiday and chat
conversation carries its organization_id and is deleted with it.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.constants import MAX_STRING_LENGTH, INACTIVE_SUBSCRIPTION_STATUSES


class Organization(Base):
    """
    Tenant entity.

    Lifecycle: created at signup (admin create), soft-disabled through
    subscription_status, hard-deleted via cascading admin delete or the
    tenant cleanup job.
    """

    __tablename__ = "organization"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    """Unique identifier, sent by clients in the x-organization-id header."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))

    slug: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), unique=True)
    """URL-friendly unique handle."""

    subscription_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    """
    Stripe subscription status (maintained out-of-band by the billing webhook).
    Null means the organization never subscribed.
    """

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    members = relationship("Member", back_populates="organization", cascade="all, delete", passive_deletes=True)
    professionals = relationship("Professional", back_populates="organization", cascade="all, delete", passive_deletes=True)

    @property
    def is_subscription_active(self) -> bool:
        """False when billing has soft-disabled the organization."""
        return self.subscription_status not in INACTIVE_SUBSCRIPTION_STATUSES

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, slug='{self.slug}', subscription_status={self.subscription_status})>"
