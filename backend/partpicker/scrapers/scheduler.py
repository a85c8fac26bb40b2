"""APScheduler-based maintenance scheduler.

Runs the periodic jobs of the service: the shared-build expiry sweep and,
when enabled, the stored price refresh.
"""

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, Optional

import structlog
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from partpicker.services.build_store import BuildStore

logger = structlog.get_logger(__name__)


class MaintenanceScheduler:
    """Manages periodic maintenance jobs using APScheduler.

    Job wrappers catch and log every exception so one failed run never
    stops the scheduler.
    """

    BUILD_SWEEP_JOB_ID = "build_sweep"
    PRICE_REFRESH_JOB_ID = "price_refresh"

    def __init__(self):
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.logger = logger.bind(service="maintenance_scheduler")

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            self.logger.info("scheduler_started")
        else:
            self.logger.warning("scheduler_already_running")

    def stop(self) -> None:
        """Stop the scheduler without waiting for running jobs."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("scheduler_stopped")
        else:
            self.logger.warning("scheduler_not_running")

    def add_build_sweep_job(self, build_store: BuildStore, interval_hours: float = 24) -> Job:
        """Drop expired shared builds every ``interval_hours``."""
        job = self.scheduler.add_job(
            func=self._run_build_sweep,
            trigger=IntervalTrigger(hours=interval_hours, timezone="UTC"),
            args=[build_store],
            id=self.BUILD_SWEEP_JOB_ID,
            name="Sweep expired builds",
            replace_existing=True,
            max_instances=1,
        )
        self.logger.info("build_sweep_job_added", interval_hours=interval_hours)
        return job

    def add_price_refresh_job(
        self,
        refresh: Callable[[], Awaitable[Dict[str, int]]],
        interval_hours: float = 24,
        offset_seconds: int = 300,
    ) -> Job:
        """Run ``refresh`` (e.g. PriceRefreshService.refresh_all) periodically.

        The first run is delayed by ``offset_seconds`` so startup is not
        slowed down by a full sweep.
        """
        first_run = datetime.now(timezone.utc) + timedelta(seconds=offset_seconds)
        job = self.scheduler.add_job(
            func=self._run_price_refresh,
            trigger=IntervalTrigger(hours=interval_hours, start_date=first_run, timezone="UTC"),
            args=[refresh],
            id=self.PRICE_REFRESH_JOB_ID,
            name="Refresh stored prices",
            replace_existing=True,
            max_instances=1,  # a sweep can outlast short intervals
        )
        self.logger.info(
            "price_refresh_job_added",
            interval_hours=interval_hours,
            first_run=first_run.isoformat(),
        )
        return job

    async def _run_build_sweep(self, build_store: BuildStore) -> Optional[int]:
        try:
            return build_store.sweep()
        except Exception as e:
            self.logger.error("build_sweep_failed", error=str(e), exc_info=True)
            return None

    async def _run_price_refresh(self, refresh: Callable[[], Awaitable[Dict[str, int]]]) -> Optional[Dict[str, int]]:
        try:
            return await refresh()
        except Exception as e:
            self.logger.error("price_refresh_job_failed", error=str(e), exc_info=True)
            return None

    def get_jobs_status(self) -> dict:
        jobs = {}
        for job in self.scheduler.get_jobs():
            jobs[job.id] = {
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger),
            }
        return jobs

    def is_running(self) -> bool:
        return self.scheduler.running
