"""
System endpoints (health check).
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from core.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", summary="Health check")
async def health_check(db: Session = Depends(get_db)) -> Dict[str, str]:
    """Check that the API is responding and the database is reachable."""
    db.execute(text("SELECT 1"))
    return {"status": "healthy"}
