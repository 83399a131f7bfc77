"""
Cron-driven trigger for JWKS refresh ticks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from shared.logging import get_logger

from .orchestrator import RefreshOrchestrator


class RefreshScheduler:
    """Runs `RefreshOrchestrator.refresh` on a crontab schedule.

    Missed runs are coalesced into one. A run that fires while the previous
    one is still in flight reaches the orchestrator, which skips it and
    counts the skip.
    """

    JOB_ID = "jwks-update"

    def __init__(
        self,
        orchestrator: RefreshOrchestrator,
        schedule: str = "* * * * *",
        *,
        run_on_startup: bool = True,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.orchestrator = orchestrator
        self.schedule = schedule
        self.run_on_startup = run_on_startup
        self.scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)
        self.logger = get_logger("jwks.scheduler")

    @property
    def running(self) -> bool:
        return bool(self.scheduler.running)

    def start(self) -> None:
        """Register the refresh job and start the scheduler. Needs a running loop."""
        job_kwargs: Dict[str, Any] = {
            "id": self.JOB_ID,
            "name": self.JOB_ID,
            "max_instances": 2,
            "coalesce": True,
            "replace_existing": True,
        }
        if self.run_on_startup:
            job_kwargs["next_run_time"] = datetime.now(timezone.utc)

        self.scheduler.add_job(
            self._tick,
            CronTrigger.from_crontab(self.schedule, timezone=timezone.utc),
            **job_kwargs,
        )
        self.scheduler.start()
        self.logger.info(
            "JWKS refresh scheduler started",
            schedule=self.schedule,
            run_on_startup=self.run_on_startup,
        )

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("JWKS refresh scheduler stopped")

    async def _tick(self) -> None:
        await self.orchestrator.refresh()
