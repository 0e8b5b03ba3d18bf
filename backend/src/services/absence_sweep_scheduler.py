"""
Absence sweep scheduler.

Periodically cancels scheduled/confirmed appointments whose start time has
passed (reason "absent"), so no-show slots do not linger as live bookings.
The same sweep also runs on demand before appointment listings.
"""

import asyncio
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore
from apscheduler.triggers.interval import IntervalTrigger  # type: ignore

from core.config import ABSENCE_SWEEP_INTERVAL_MINUTES
from core.database import get_db_context
from repositories import SqlAlchemyAppointmentRepository
from services.lifecycle_manager import LifecycleManager, SweepResult
from utils.datetime_utils import CLINIC_TZ, Clock, SystemClock

logger = logging.getLogger(__name__)

# Global singleton instance
_absence_sweep_scheduler: Optional['AbsenceSweepScheduler'] = None


class AbsenceSweepScheduler:
    """
    Scheduler for the periodic absence sweep.

    Database sessions are created fresh for each run to avoid stale session issues.
    """

    def __init__(self, interval_minutes: int = ABSENCE_SWEEP_INTERVAL_MINUTES, clock: Optional[Clock] = None):
        self.scheduler = AsyncIOScheduler(timezone=CLINIC_TZ)
        self.interval_minutes = interval_minutes
        self.clock = clock or SystemClock()
        self._is_started = False

    @property
    def is_started(self) -> bool:
        return self._is_started

    async def start_scheduler(self) -> None:
        """
        Start the background scheduler.

        This should be called during application startup.
        """
        if self._is_started:
            logger.warning("Absence sweep scheduler is already started")
            return

        self.scheduler.add_job(  # type: ignore
            self._run_sweep,
            IntervalTrigger(minutes=self.interval_minutes),
            id="absence_sweep",
            name="Mark past appointments as absent",
            replace_existing=True,
            max_instances=1,  # Prevent overlapping runs
            coalesce=True,
        )

        self.scheduler.start()
        self._is_started = True
        logger.info(f"Absence sweep scheduler started (every {self.interval_minutes} minutes)")

    async def stop_scheduler(self) -> None:
        """
        Stop the background scheduler.

        This should be called during application shutdown.
        """
        if self._is_started:
            self.scheduler.shutdown(wait=False)
            self._is_started = False
            logger.info("Absence sweep scheduler stopped")

    async def _run_sweep(self) -> None:
        """Run one sweep in a worker thread so the event loop is not blocked."""
        await asyncio.to_thread(self.execute_sweep)

    def execute_sweep(self) -> SweepResult:
        """Run one sweep with a fresh database session (synchronous)."""
        with get_db_context() as db:
            manager = LifecycleManager(SqlAlchemyAppointmentRepository(db), self.clock)
            result = manager.mark_past_as_absent()

        if result.error:
            logger.error(f"Scheduled absence sweep failed: {result.error}")
        else:
            logger.info(f"Scheduled absence sweep updated {result.updated_count} appointments")
        return result


def get_absence_sweep_scheduler() -> AbsenceSweepScheduler:
    """
    Get the global absence sweep scheduler instance.

    Returns:
        AbsenceSweepScheduler: The global scheduler instance
    """
    global _absence_sweep_scheduler
    if _absence_sweep_scheduler is None:
        _absence_sweep_scheduler = AbsenceSweepScheduler()
    return _absence_sweep_scheduler


async def start_absence_sweep_scheduler() -> None:
    """Start the global absence sweep scheduler."""
    scheduler = get_absence_sweep_scheduler()
    await scheduler.start_scheduler()


async def stop_absence_sweep_scheduler() -> None:
    """Stop the global absence sweep scheduler."""
    global _absence_sweep_scheduler
    if _absence_sweep_scheduler:
        await _absence_sweep_scheduler.stop_scheduler()
