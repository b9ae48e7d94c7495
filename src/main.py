# pyright: reportMissingTypeStubs=false
"""
ClinicOS Scheduling Backend API

A multi-tenant FastAPI application for clinic scheduling and internal chat.

Features:
- Professionals, patients and appointments through a typed entity registry
- Blocked days with appointment conflict checking, holiday calendar
- Realtime chat and presence over WebSocket, backed by a transactional outbox
- PostgreSQL database with SQLAlchemy ORM
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from api import admin, blocked_days, conversations, entities, holidays, realtime, system
from core.config import DATABASE_URL
from core.constants import CORS_ORIGINS
from core.database import Database
from core.realtime import ConnectionManager
from services.housekeeping_scheduler import HousekeepingScheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("🚀 Starting ClinicOS Scheduling Backend API")

    scheduler: Optional[HousekeepingScheduler] = app.state.scheduler
    if scheduler is not None:
        try:
            await scheduler.start_scheduler()
            logger.info("✅ Housekeeping scheduler started")
        except Exception as e:
            logger.exception(f"❌ Failed to start housekeeping scheduler: {e}")

    yield

    if scheduler is not None:
        try:
            await scheduler.stop_scheduler()
            logger.info("🛑 Housekeeping scheduler stopped")
        except Exception as e:
            logger.exception(f"❌ Error stopping housekeeping scheduler: {e}")

    app.state.database.dispose()
    logger.info("🛑 Shutting down ClinicOS Scheduling Backend API")


def create_app(
    database: Optional[Database] = None,
    broadcaster: Optional[ConnectionManager] = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        database: Database handle; defaults to one built from DATABASE_URL
        broadcaster: Realtime connection manager; a fresh one by default
        start_scheduler: Run the housekeeping jobs during the app lifespan
    """
    app = FastAPI(
        title="ClinicOS Scheduling Backend",
        description="Multi-tenant clinic scheduling, availability and chat API",
        version="1.0.0",
        docs_url="/docs",  # Swagger UI
        redoc_url="/redoc",  # ReDoc
        lifespan=lifespan,
    )

    app.state.database = database or Database(DATABASE_URL)
    app.state.broadcaster = broadcaster or ConnectionManager()
    app.state.scheduler = (
        HousekeepingScheduler(app.state.database, app.state.broadcaster) if start_scheduler else None
    )

    # CORS middleware for frontend integration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(
        system.router,
        prefix="/api",
        tags=["system"],
    )
    app.include_router(
        admin.router,
        prefix="/api/admin",
        tags=["admin"],
        responses={
            401: {"description": "Unauthorized"},
            403: {"description": "Forbidden"},
            404: {"description": "Resource not found"},
            500: {"description": "Internal server error"},
        },
    )
    app.include_router(
        blocked_days.router,
        prefix="/api/blocked-days",
        tags=["blocked-days"],
        responses={
            400: {"description": "Bad request"},
            401: {"description": "Unauthorized"},
            402: {"description": "Subscription inactive"},
            403: {"description": "Forbidden"},
            404: {"description": "Resource not found"},
            500: {"description": "Internal server error"},
        },
    )
    app.include_router(
        holidays.router,
        prefix="/api/holidays",
        tags=["holidays"],
        responses={
            400: {"description": "Bad request"},
            401: {"description": "Unauthorized"},
            402: {"description": "Subscription inactive"},
            403: {"description": "Forbidden"},
            409: {"description": "Conflict"},
            500: {"description": "Internal server error"},
        },
    )
    app.include_router(
        conversations.router,
        prefix="/api/conversations",
        tags=["conversations"],
        responses={
            401: {"description": "Unauthorized"},
            402: {"description": "Subscription inactive"},
            403: {"description": "Forbidden"},
            404: {"description": "Resource not found"},
            500: {"description": "Internal server error"},
        },
    )
    app.include_router(realtime.router, tags=["realtime"])
    # The /api/{entity} catch-all must come after every other /api router
    app.include_router(
        entities.router,
        prefix="/api",
        tags=["entities"],
        responses={
            400: {"description": "Bad request"},
            401: {"description": "Unauthorized"},
            402: {"description": "Subscription inactive"},
            403: {"description": "Forbidden"},
            404: {"description": "Resource not found"},
            500: {"description": "Internal server error"},
        },
    )

    @app.get(
        "/",
        summary="Root endpoint",
        description="Returns basic API information",
    )
    async def root() -> dict[str, str]:
        """Get API information."""
        return {
            "message": "ClinicOS Scheduling Backend API",
            "version": "1.0.0",
            "status": "running"
        }

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report request validation failures as 400 instead of FastAPI's 422."""
        logger.info(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"detail": jsonable_errors(exc)},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        """Surface unexpected database failures with the driver message."""
        logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": str(getattr(exc, "orig", None) or exc), "type": "database_error"},
        )

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the non-serializable context objects."""
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


app = create_app()
