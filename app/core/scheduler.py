"""
Deferred job scheduling for send-later messages and standup flushes.

Jobs live in APScheduler's in-memory job store, keyed by a handle such as
"sendlater-42" so they can be looked up and cancelled. Pending deferred
messages are stored in the database, so nothing is lost by not persisting jobs
beyond the missed-fire window.
"""
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Optional, Sequence

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class JobScheduler:
    """Fire-once jobs keyed by handle, cancellable until they run."""

    def __init__(self, misfire_grace_seconds: int = 3600) -> None:
        self.scheduler = BackgroundScheduler(
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": misfire_grace_seconds,
            },
            timezone=timezone.utc,
        )

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler started")

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    def schedule_at(
        self,
        job_id: str,
        fire_at: float,
        func: Callable[..., Any],
        args: Sequence[Any] = (),
    ) -> None:
        """
        Run `func(*args)` once at or after the unix time `fire_at`.

        Args:
            job_id: Handle used to look up or cancel the job
            fire_at: Unix timestamp in seconds
            func: Callable executed on the scheduler's worker thread
            args: Positional arguments for func
        """
        run_date = datetime.fromtimestamp(fire_at, tz=timezone.utc)
        self.scheduler.add_job(
            func,
            trigger="date",
            run_date=run_date,
            args=list(args),
            id=job_id,
            name=job_id,
            replace_existing=True,
        )
        logger.info(
            "Job scheduled",
            extra={"extra_data": {"job_id": job_id, "run_date": run_date.isoformat()}}
        )

    def cancel(self, job_id: str) -> bool:
        """Remove a job that has not fired yet; False if there was none."""
        try:
            self.scheduler.remove_job(job_id)
        except JobLookupError:
            return False
        logger.info("Job cancelled", extra={"extra_data": {"job_id": job_id}})
        return True

    def has_job(self, job_id: str) -> bool:
        return self.scheduler.get_job(job_id) is not None

    def run_date(self, job_id: str) -> Optional[datetime]:
        job = self.scheduler.get_job(job_id)
        if job is None:
            return None
        # Pending jobs on a stopped scheduler have no computed next_run_time yet
        return getattr(job, "next_run_time", None) or job.trigger.run_date


def sendlater_job_id(message_id: int) -> str:
    return f"sendlater-{message_id}"


def standup_job_id(channel_id: int) -> str:
    return f"standup-{channel_id}"


@lru_cache()
def get_scheduler() -> JobScheduler:
    """Get the process-wide scheduler instance."""
    return JobScheduler(get_settings().scheduler_misfire_grace_seconds)
