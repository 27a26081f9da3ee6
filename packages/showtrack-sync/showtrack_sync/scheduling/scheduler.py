"""Periodic sync scheduler backed by APScheduler."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from showtrack_core.config import SyncConfig, get_settings

from showtrack_sync.ingestion import GameSyncService, SyncCycleResult
from showtrack_sync.scheduling.exceptions import SchedulerUnavailableError

logger = structlog.get_logger()

SYNC_JOB_ID = "sync-game-results"


class SyncScheduler:
    """
    Drives ``GameSyncService.run_sync_cycle`` on a fixed interval.

    One cycle fires immediately on start (unless disabled), then one every
    ``interval_seconds``. A slow cycle may overlap the next one; up to
    ``max_overlapping_cycles`` run at once and no cycle is cancelled.

    Usage:
        async with SyncScheduler(service) as scheduler:
            await scheduler.run_forever()
    """

    def __init__(self, service: GameSyncService, config: SyncConfig | None = None):
        """
        Initialize scheduler.

        Args:
            service: Sync service whose cycle is run on every tick
            config: Sync configuration (defaults to settings)
        """
        self.service = service
        self.config = config or get_settings().sync
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.last_result: SyncCycleResult | None = None
        self.cycles_completed = 0
        self._started = False

    @property
    def running(self) -> bool:
        return self._started

    async def run_cycle(self) -> SyncCycleResult:
        """Job body: run one cycle and remember its report."""
        result = await self.service.run_sync_cycle()
        self.last_result = result
        self.cycles_completed += 1
        return result

    def start(self) -> None:
        """
        Register the interval job and start the scheduler.

        Raises:
            SchedulerUnavailableError: If called outside a running event loop
        """
        if self._started:
            return

        try:
            asyncio.get_running_loop()
        except RuntimeError as e:
            raise SchedulerUnavailableError(
                "Cannot start scheduler: No event loop running. "
                "Use SyncScheduler as async context manager or start it from async code."
            ) from e

        # An explicit next_run_time of None would add the job paused
        job_options = {"next_run_time": datetime.now(UTC)} if self.config.run_on_start else {}
        self.scheduler.add_job(
            self.run_cycle,
            trigger=IntervalTrigger(seconds=self.config.interval_seconds, timezone="UTC"),
            id=SYNC_JOB_ID,
            name="Sync game show results",
            max_instances=self.config.max_overlapping_cycles,
            coalesce=False,
            replace_existing=True,
            **job_options,
        )
        self.scheduler.start()
        self._started = True

        logger.info(
            "sync_scheduler_started",
            interval_seconds=self.config.interval_seconds,
            run_on_start=self.config.run_on_start,
            max_overlapping_cycles=self.config.max_overlapping_cycles,
        )

    def shutdown(self) -> None:
        """Stop scheduling new cycles; cycles already running are not cancelled."""
        if not self._started:
            return
        self.scheduler.shutdown(wait=False)
        self._started = False
        logger.info("sync_scheduler_shutdown", cycles_completed=self.cycles_completed)

    def next_run_time(self) -> datetime | None:
        job = self.scheduler.get_job(SYNC_JOB_ID)
        return job.next_run_time if job else None

    async def run_forever(self) -> None:
        """Block until cancelled (e.g. Ctrl+C in the CLI)."""
        while self._started:
            await asyncio.sleep(3600)

    async def __aenter__(self) -> SyncScheduler:
        """Start scheduler when entering context."""
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Shutdown scheduler when exiting context."""
        self.shutdown()
        return False
