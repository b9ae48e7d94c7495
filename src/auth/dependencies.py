# pyright: reportMissingTypeStubs=false
"""
Authentication and authorization dependencies for FastAPI.

Provides dependency injection functions for bearer token authentication,
tenant (organization) resolution from the x-organization-id header,
role checks, and subscription gating.

Tenant isolation is enforced at the application level: every query issued
on behalf of a TenantContext filters by its organization_id.
"""

import logging
import uuid
from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.database import get_db
from core.config import SYSTEM_ADMIN_EMAILS
from core.constants import MANAGER_ROLES
from services.jwt_service import jwt_service, TokenPayload
from models import Member, Organization, Professional

logger = logging.getLogger(__name__)


class AuthenticatedUser:
    """Authenticated user extracted from a verified bearer token."""

    def __init__(self, user_id: str, email: str):
        self.user_id = user_id  # Auth provider subject
        self.email = email

    def is_system_admin(self) -> bool:
        """Check if user is a system admin."""
        return self.email in SYSTEM_ADMIN_EMAILS

    def __repr__(self) -> str:
        return f"AuthenticatedUser(user_id='{self.user_id}', email='{self.email}')"


class TenantContext:
    """Authenticated user acting inside one organization."""

    def __init__(self, user: AuthenticatedUser, organization: Organization, role: Optional[str]):
        self.user = user
        self.organization = organization
        self.role = role  # None for system admins without a membership row

    @property
    def organization_id(self) -> uuid.UUID:
        return self.organization.id

    @property
    def user_id(self) -> str:
        return self.user.user_id

    def is_manager(self) -> bool:
        """Owners and admins manage organization-wide settings."""
        return self.role in MANAGER_ROLES or self.user.is_system_admin()

    def __repr__(self) -> str:
        return f"TenantContext(user_id='{self.user_id}', organization_id={self.organization_id}, role={self.role!r})"


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenPayload]:
    """Extract and validate JWT token payload."""
    if not credentials:
        return None

    return jwt_service.verify_token(credentials.credentials)


def get_current_user(
    payload: Optional[TokenPayload] = Depends(get_token_payload),
) -> AuthenticatedUser:
    """Get the authenticated user from the bearer token."""
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthenticatedUser(user_id=payload.sub, email=payload.email)


def parse_organization_id(raw: Optional[str]) -> uuid.UUID:
    """Parse the tenant header value, raising 400 when absent or malformed."""
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Organization context required"
        )
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid organization id"
        )


def resolve_tenant(db: Session, user: AuthenticatedUser, organization_id: uuid.UUID) -> TenantContext:
    """
    Resolve the organization a user is acting in.

    Raises:
        HTTPException: 403 if the user is not a member, 404 if a system
            admin names an organization that does not exist
    """
    organization = db.query(Organization).filter(Organization.id == organization_id).first()

    member = None
    if organization is not None:
        member = db.query(Member).filter(
            Member.organization_id == organization_id,
            Member.user_id == user.user_id
        ).first()

    if member is None:
        if user.is_system_admin():
            if organization is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Organization not found"
                )
            return TenantContext(user=user, organization=organization, role=None)

        # Unknown organizations and foreign organizations look the same
        logger.warning(f"User {user.user_id} denied access to organization {organization_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Organization access denied"
        )

    assert organization is not None
    return TenantContext(user=user, organization=organization, role=member.role)


def get_tenant_context(
    user: AuthenticatedUser = Depends(get_current_user),
    x_organization_id: Optional[str] = Header(None, alias="x-organization-id"),
    db: Session = Depends(get_db)
) -> TenantContext:
    """Resolve tenant context from the x-organization-id header."""
    organization_id = parse_organization_id(x_organization_id)
    return resolve_tenant(db, user, organization_id)


def require_active_subscription(ctx: TenantContext = Depends(get_tenant_context)) -> TenantContext:
    """Reject writes from organizations soft-disabled by billing."""
    if not ctx.organization.is_subscription_active:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Subscription inactive"
        )
    return ctx


def require_manager_role(ctx: TenantContext = Depends(require_active_subscription)) -> TenantContext:
    """Require owner/admin role (or system admin) in an active organization."""
    if not ctx.is_manager():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return ctx


def require_system_admin(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
    """Require system admin access."""
    if not user.is_system_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="System admin access required"
        )
    return user


def get_professional_for_user(db: Session, ctx: TenantContext) -> Professional:
    """
    Look up the professional profile linked to the current user.

    Raises:
        HTTPException: 403 if the user has no professional profile in the organization
    """
    professional = db.query(Professional).filter(
        Professional.organization_id == ctx.organization_id,
        Professional.user_id == ctx.user_id
    ).first()
    if professional is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No professional profile linked to this user"
        )
    return professional


def get_current_professional(
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
) -> Professional:
    """Professional profile of the caller within the tenant."""
    return get_professional_for_user(db, ctx)
