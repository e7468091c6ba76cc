# healthcomm/common/scheduler.py
"""
In-process cron scheduler for the maintenance sweeps.

Each job owns a cron expression evaluated in ``SCHEDULER_TIMEZONE``. A
background task wakes every ``SCHEDULER_POLL_SECONDS``, runs whatever is
due with a fresh session, and advances the job's next run whether the sweep
succeeded or failed.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional
from zoneinfo import ZoneInfo

from croniter import croniter
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from healthcomm.common.config import settings
from healthcomm.common.utils.global_functions import utcnow

logger = logging.getLogger(__name__)

SweepFn = Callable[[AsyncSession, datetime], Awaitable[Any]]


@dataclass
class ScheduledJob:
    name: str
    cron: str
    func: SweepFn
    next_run: Optional[datetime] = None


class SweepScheduler:
    def __init__(
        self,
        jobs: List[ScheduledJob],
        session_factory: async_sessionmaker,
        timezone_name: Optional[str] = None,
        poll_seconds: Optional[int] = None,
    ):
        for job in jobs:
            if not croniter.is_valid(job.cron):
                raise ValueError(f"Invalid cron expression for {job.name}: {job.cron!r}")
        self.jobs = jobs
        self.session_factory = session_factory
        self.tz = ZoneInfo(timezone_name or settings.SCHEDULER_TIMEZONE)
        self.poll_seconds = poll_seconds if poll_seconds is not None else settings.SCHEDULER_POLL_SECONDS
        self._task: Optional[asyncio.Task] = None

    def next_run_after(self, cron: str, anchor: datetime) -> datetime:
        return croniter(cron, anchor.astimezone(self.tz)).get_next(datetime)

    async def tick(self, now: Optional[datetime] = None) -> List[str]:
        """Run every due job once. Returns the names of the jobs that ran."""
        now = now or utcnow()
        ran = []
        for job in self.jobs:
            if job.next_run is None:
                job.next_run = self.next_run_after(job.cron, now)
                continue
            if job.next_run > now:
                continue

            try:
                async with self.session_factory() as session:
                    result = await job.func(session, now)
                logger.info("Scheduled sweep %s finished: %s", job.name, result)
            except Exception:
                logger.exception("Scheduled sweep %s failed", job.name)
            ran.append(job.name)
            job.next_run = self.next_run_after(job.cron, now)
        return ran

    async def run_forever(self) -> None:
        logger.info("Scheduler started with %d job(s) in %s", len(self.jobs), self.tz.key)
        while True:
            await self.tick()
            await asyncio.sleep(self.poll_seconds)

    def start(self) -> asyncio.Task:
        self._task = asyncio.create_task(self.run_forever())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Scheduler stopped")


def default_jobs() -> List[ScheduledJob]:
    """The three maintenance sweeps, on their configured schedules."""
    from healthcomm.modules.invitations.invitations_service import cleanup_expired_invitations
    from healthcomm.modules.notifications.notifications_service import cleanup_old_notifications
    from healthcomm.modules.reports.reports_service import generate_daily_reports

    return [
        ScheduledJob(
            name="cleanup_expired_invitations",
            cron=settings.INVITATION_CLEANUP_CRON,
            func=lambda session, now: cleanup_expired_invitations(session, now=now),
        ),
        ScheduledJob(
            name="cleanup_old_notifications",
            cron=settings.NOTIFICATION_CLEANUP_CRON,
            func=lambda session, now: cleanup_old_notifications(session, now=now),
        ),
        ScheduledJob(
            name="generate_daily_reports",
            cron=settings.DAILY_REPORT_CRON,
            func=lambda session, now: generate_daily_reports(session, now=now),
        ),
    ]
