# pyright: reportMissingTypeStubs=false
"""
Blocked days API endpoints.

Professionals' unavailability ranges, with the conflict check against
existing appointments. Field names are camelCase on the wire.
"""

import logging
from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from sqlalchemy.orm import Session

from api.responses import (
    BlockedDayCreateResponse, BlockedDayResponse, ConflictingAppointmentResponse, SuccessResponse,
)
from auth.dependencies import TenantContext, get_tenant_context, require_active_subscription
from core.constants import MAX_REASON_LENGTH
from core.database import get_db
from services.blocked_day_service import BlockedDayService

logger = logging.getLogger(__name__)

router = APIRouter()

ReasonText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_REASON_LENGTH)]


class BlockedDayCreateRequest(BaseModel):
    """Request model for creating a blocked-day range."""
    model_config = ConfigDict(populate_by_name=True)

    professional_id: int = Field(alias="professionalId")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    reason: ReasonText
    confirm_conflicts: bool = Field(default=False, alias="confirmConflicts")


class BlockedDayUpdateRequest(BaseModel):
    reason: ReasonText


@router.post(
    "",
    summary="Create blocked days",
    status_code=status.HTTP_201_CREATED,
    response_model=BlockedDayCreateResponse,
    responses={200: {"description": "Conflicting appointments found; nothing was created"}},
)
async def create_blocked_day(
    request: BlockedDayCreateRequest,
    response: Response,
    ctx: TenantContext = Depends(require_active_subscription),
    db: Session = Depends(get_db)
) -> BlockedDayCreateResponse:
    """
    Block a range of days for a professional.

    When appointments already fall in the range and confirmConflicts is not
    set, responds 200 with the conflicts and creates nothing. Otherwise the
    block is created (201). Existing appointments are never modified.
    """
    result = BlockedDayService.create_blocked_day(
        db,
        ctx.organization_id,
        professional_id=request.professional_id,
        start_date=request.start_date,
        end_date=request.end_date,
        reason=request.reason,
        confirm_conflicts=request.confirm_conflicts
    )

    conflicts = [ConflictingAppointmentResponse.model_validate(a) for a in result.conflicts]
    if not result.created:
        response.status_code = status.HTTP_200_OK
        return BlockedDayCreateResponse(blocked_day=None, conflicts=conflicts)

    return BlockedDayCreateResponse(
        blocked_day=BlockedDayResponse.model_validate(result.blocked_day),
        conflicts=conflicts
    )


@router.get("", summary="List blocked days", response_model=List[BlockedDayResponse])
async def list_blocked_days(
    professional_id: Optional[int] = Query(None, alias="professionalId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
) -> List[BlockedDayResponse]:
    """Blocked days of the organization overlapping the optional date range."""
    rows = BlockedDayService.list_blocked_days(
        db,
        ctx.organization_id,
        professional_id=professional_id,
        start_date=start_date,
        end_date=end_date
    )
    return [BlockedDayResponse.model_validate(row) for row in rows]


@router.patch("/{blocked_day_id}", summary="Update blocked day reason", response_model=BlockedDayResponse)
async def update_blocked_day(
    blocked_day_id: int,
    request: BlockedDayUpdateRequest,
    ctx: TenantContext = Depends(require_active_subscription),
    db: Session = Depends(get_db)
) -> BlockedDayResponse:
    blocked_day = BlockedDayService.update_reason(db, ctx.organization_id, blocked_day_id, request.reason)
    return BlockedDayResponse.model_validate(blocked_day)


@router.delete("/{blocked_day_id}", summary="Delete blocked days", response_model=SuccessResponse)
async def delete_blocked_day(
    blocked_day_id: int,
    ctx: TenantContext = Depends(require_active_subscription),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    BlockedDayService.delete_blocked_day(db, ctx.organization_id, blocked_day_id)
    return SuccessResponse()
