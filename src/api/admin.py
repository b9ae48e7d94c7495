# pyright: reportMissingTypeStubs=false
"""
System admin API endpoints.

Organization management for platform administrators. Creating an
organization also makes the caller its owner and seeds national holidays.
"""

import logging
import uuid
from typing import Annotated, List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, StringConstraints
from sqlalchemy.orm import Session

from api.responses import OrganizationResponse, SuccessResponse
from auth.dependencies import AuthenticatedUser, require_system_admin
from core.constants import MAX_STRING_LENGTH
from core.database import get_db
from services.organization_service import OrganizationService

logger = logging.getLogger(__name__)

router = APIRouter()


class OrganizationCreateRequest(BaseModel):
    """Request model for creating a new organization."""
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_STRING_LENGTH)]
    slug: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_STRING_LENGTH)]


@router.get("/organizations", summary="List all organizations", response_model=List[OrganizationResponse])
async def list_organizations(
    current_user: AuthenticatedUser = Depends(require_system_admin),
    db: Session = Depends(get_db)
) -> List[OrganizationResponse]:
    organizations = OrganizationService.list_organizations(db)
    return [OrganizationResponse.model_validate(org) for org in organizations]


@router.post(
    "/organizations",
    summary="Create organization",
    status_code=status.HTTP_201_CREATED,
    response_model=OrganizationResponse,
)
async def create_organization(
    request: OrganizationCreateRequest,
    current_user: AuthenticatedUser = Depends(require_system_admin),
    db: Session = Depends(get_db)
) -> OrganizationResponse:
    organization = OrganizationService.create_organization(
        db, request.name, request.slug, owner_user_id=current_user.user_id
    )
    logger.info(f"System admin {current_user.email} created organization '{organization.slug}'")
    return OrganizationResponse.model_validate(organization)


@router.delete("/organizations/{organization_id}", summary="Delete organization", response_model=SuccessResponse)
async def delete_organization(
    organization_id: uuid.UUID,
    current_user: AuthenticatedUser = Depends(require_system_admin),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    """Hard-delete an organization and everything it owns."""
    OrganizationService.delete_organization(db, organization_id)
    logger.warning(f"System admin {current_user.email} deleted organization {organization_id}")
    return SuccessResponse()
