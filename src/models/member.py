"""
Member model linking an authenticated user to an organization.

Users authenticate against the external auth provider; membership rows are
what grant access to an organization's data.
"""

import uuid
from datetime import datetime

from sqlalchemy import String, TIMESTAMP, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class Member(Base):
    """Membership of an auth user in an organization, with a role."""

    __tablename__ = "member"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    user_id: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), index=True)
    """Auth provider subject (the `sub` claim of the bearer token)."""

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organization.id", ondelete="CASCADE"), index=True
    )

    role: Mapped[str] = mapped_column(String(20), default="member")
    """One of 'owner', 'admin', 'member'."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    organization = relationship("Organization", back_populates="members")

    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_member_user_organization"),
    )

    def __repr__(self) -> str:
        return f"<Member(user_id='{self.user_id}', organization_id={self.organization_id}, role='{self.role}')>"
