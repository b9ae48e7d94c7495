# pyright: reportMissingTypeStubs=false
"""
Generic entity API endpoints (/api/{entity}).

The entity path segment is restricted to the EntityKind enum; each kind is
served by its typed repository from services.entity_registry. This router
is included last so the dedicated /api/* routers take precedence.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from api.responses import SuccessResponse
from auth.dependencies import TenantContext, get_tenant_context, require_active_subscription
from core.database import get_db
from services.entity_registry import EntityKind, ListFilters, get_repository

logger = logging.getLogger(__name__)

router = APIRouter()


def _validation_error(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=e.errors(include_url=False, include_context=False)
    )


@router.get("/{entity}", summary="List entities")
async def list_entities(
    entity: EntityKind,
    id: Optional[int] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    professional_id: Optional[int] = Query(None),
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db)
) -> List[Dict[str, Any]]:
    """
    List rows of one entity kind in the caller's organization.

    Appointments are ordered by start_time and accept start/end day bounds
    and a professional filter; other kinds are ordered newest first.
    """
    repository = get_repository(entity)
    filters = ListFilters(id=id, limit=limit, start=start, end=end, professional_id=professional_id)
    rows = repository.list(db, ctx.organization_id, filters)
    return [repository.serialize(row) for row in rows]


@router.post("/{entity}", summary="Create entity", status_code=status.HTTP_201_CREATED)
async def create_entity(
    entity: EntityKind,
    payload: Dict[str, Any] = Body(...),
    ctx: TenantContext = Depends(require_active_subscription),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    repository = get_repository(entity)
    try:
        data = repository.parse_create(payload)
    except ValidationError as e:
        raise _validation_error(e)

    row = repository.create(db, ctx.organization_id, data)
    logger.info(f"Created {entity.value} {row.id} for organization {ctx.organization_id}")
    return repository.serialize(row)


@router.put("/{entity}/{entity_id}", summary="Update entity")
async def update_entity(
    entity: EntityKind,
    entity_id: int,
    payload: Dict[str, Any] = Body(...),
    ctx: TenantContext = Depends(require_active_subscription),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    repository = get_repository(entity)
    try:
        data = repository.parse_update(payload)
    except ValidationError as e:
        raise _validation_error(e)

    row = repository.get(db, ctx.organization_id, entity_id)
    row = repository.update(db, ctx.organization_id, row, data)
    return repository.serialize(row)


@router.delete("/{entity}/{entity_id}", summary="Delete entity", response_model=SuccessResponse)
async def delete_entity(
    entity: EntityKind,
    entity_id: int,
    ctx: TenantContext = Depends(require_active_subscription),
    db: Session = Depends(get_db)
) -> SuccessResponse:
    repository = get_repository(entity)
    repository.delete(db, ctx.organization_id, entity_id)
    return SuccessResponse()
