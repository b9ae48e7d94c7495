"""
Housekeeping scheduler.

Runs two background jobs for the lifetime of the application:
1. Tenant cleanup, daily at 3 AM clinic time (ghost and expired organizations)
2. Outbox redispatch, every OUTBOX_REDISPATCH_SECONDS (chat events that were
   persisted but never published)
"""

import asyncio
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore
from apscheduler.triggers.cron import CronTrigger  # type: ignore
from apscheduler.triggers.interval import IntervalTrigger  # type: ignore

from core.config import OUTBOX_REDISPATCH_SECONDS
from core.constants import CLEANUP_SCHEDULER_HOUR
from core.database import Database
from core.realtime import RealtimeBroadcaster
from services.cleanup_service import CleanupService
from services.outbox_service import OutboxDispatcher
from utils.datetime_utils import CLINIC_TZ

logger = logging.getLogger(__name__)


class HousekeepingScheduler:
    """
    Scheduler for background maintenance tasks.

    Owned by the application (see main.create_app); database sessions are
    created fresh for each run to avoid stale session issues.
    """

    def __init__(
        self,
        database: Database,
        broadcaster: Optional[RealtimeBroadcaster],
        redispatch_seconds: int = OUTBOX_REDISPATCH_SECONDS
    ):
        self.database = database
        self.broadcaster = broadcaster
        self.redispatch_seconds = redispatch_seconds
        self.scheduler = AsyncIOScheduler(timezone=CLINIC_TZ)
        self._is_started = False

    async def start_scheduler(self) -> None:
        """Start the background scheduler. Called during application startup."""
        if self._is_started:
            logger.warning("Housekeeping scheduler is already started")
            return

        self.scheduler.add_job(  # type: ignore
            self._run_cleanup,
            CronTrigger(hour=CLEANUP_SCHEDULER_HOUR, minute=0),
            id="tenant_cleanup",
            name="Ghost and expired organization cleanup",
            replace_existing=True,
            misfire_grace_time=3600,  # Allow 1 hour grace time if server was down
        )

        self.scheduler.add_job(  # type: ignore
            self._run_outbox_redispatch,
            IntervalTrigger(seconds=self.redispatch_seconds),
            id="outbox_redispatch",
            name="Outbox redispatch",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self.scheduler.start()
        self._is_started = True
        logger.info(
            f"Housekeeping scheduler started (cleanup daily at {CLEANUP_SCHEDULER_HOUR}:00, "
            f"outbox redispatch every {self.redispatch_seconds}s)"
        )

    async def stop_scheduler(self) -> None:
        """Stop the background scheduler. Called during application shutdown."""
        if self._is_started:
            self.scheduler.shutdown(wait=False)
            self._is_started = False
            logger.info("Housekeeping scheduler stopped")

    async def _run_cleanup(self) -> None:
        logger.info("Starting scheduled tenant cleanup...")
        # Blocking database work runs off the event loop
        await asyncio.to_thread(self._execute_cleanup_logic)

    def _execute_cleanup_logic(self) -> None:
        db = self.database.session()
        try:
            deleted = CleanupService(db).cleanup_organizations()
            logger.info(f"Tenant cleanup completed: {len(deleted)} organization(s) deleted")
        except Exception as e:
            logger.exception(f"Error during scheduled tenant cleanup: {e}")
            # Don't re-raise - allow scheduler to continue
        finally:
            db.close()

    async def _run_outbox_redispatch(self) -> None:
        try:
            await OutboxDispatcher.dispatch_pending(
                self.database,
                self.broadcaster,
                older_than_seconds=self.redispatch_seconds
            )
        except Exception as e:
            logger.exception(f"Error during outbox redispatch: {e}")
            # Don't re-raise - allow scheduler to continue
