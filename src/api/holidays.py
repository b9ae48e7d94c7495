# pyright: reportMissingTypeStubs=false
"""
Holiday calendar API endpoints.

Holidays are advisory agenda annotations; they never block scheduling.
Reading is open to every member, changes require an owner or admin.
"""

import logging
from datetime import date as date_type
from typing import Annotated, List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, StringConstraints
from sqlalchemy.orm import Session

from api.responses import HolidayResponse, HolidaySeedResponse, SuccessResponse
from auth.dependencies import TenantContext, get_tenant_context, require_manager_role
from core.constants import HOLIDAY_SEED_YEARS, MAX_STRING_LENGTH
from core.database import get_db
from services.holiday_service import HolidayService

logger = logging.getLogger(__name__)

router = APIRouter()


class HolidayCreateRequest(BaseModel):
    date: date_type
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_STRING_LENGTH)]
    type: Literal["national", "local"] = "local"


class HolidaySeedRequest(BaseModel):
    years: List[Annotated[int, Field(ge=1900, le=2100)]] = Field(default_factory=lambda: list(HOLIDAY_SEED_YEARS), max_length=10)


@router.get("", summary="List holidays", response_model=List[HolidayResponse])
async def list_holidays(
    year: Optional[int] = Query(None, ge=1900, le=2100),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
) -> List[HolidayResponse]:
    """Holidays of the caller's organization, ordered by date."""
    rows = HolidayService.list_holidays(db, ctx.organization_id, year=year)
    return [HolidayResponse.model_validate(row) for row in rows]


@router.post(
    "",
    summary="Create holiday",
    status_code=status.HTTP_201_CREATED,
    response_model=HolidayResponse,
    responses={409: {"description": "Holiday already exists"}},
)
async def create_holiday(
    request: HolidayCreateRequest,
    ctx: TenantContext = Depends(require_manager_role),
    db: Session = Depends(get_db)
) -> HolidayResponse:
    holiday = HolidayService.create_holiday(
        db, ctx.organization_id, request.date, request.name, request.type
    )
    logger.info(f"Holiday {holiday.id} ({holiday.date}) created by {ctx.user_id}")
    return HolidayResponse.model_validate(holiday)


@router.post("/seed", summary="Seed national holidays", response_model=HolidaySeedResponse)
async def seed_holidays(
    request: Optional[HolidaySeedRequest] = None,
    ctx: TenantContext = Depends(require_manager_role),
    db: Session = Depends(get_db)
) -> HolidaySeedResponse:
    """Insert national holidays for the given years, skipping dates already present."""
    years = request.years if request is not None else list(HOLIDAY_SEED_YEARS)
    inserted = HolidayService.seed_national_holidays(db, ctx.organization_id, years=years)
    return HolidaySeedResponse(inserted=inserted)


@router.delete("/{holiday_id}", summary="Delete holiday", response_model=SuccessResponse)
async def delete_holiday(
    holiday_id: int,
    ctx: TenantContext = Depends(require_manager_role),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    HolidayService.delete_holiday(db, ctx.organization_id, holiday_id)
    return SuccessResponse()
