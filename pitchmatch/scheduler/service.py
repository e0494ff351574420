"""Scheduler service for periodic batch sends."""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from pitchmatch.logging import get_logger

logger = get_logger(__name__, component="scheduler")

JOB_ID = "send-batch"


class SchedulerService:
    """
    Wraps APScheduler to run the batch sender at a fixed interval.

    Uses BackgroundScheduler so the main thread stays free for signal
    handling (daemon mode) or for uvicorn (serve mode).
    """

    def __init__(
        self,
        batch_callable: Callable[[], object],
        interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Args:
            batch_callable: Function to call on each tick (e.g. BatchSender.run_once)
            interval_seconds: Seconds between runs
            shutdown_event: Optional event set on shutdown for coordination
        """
        self.batch_callable = batch_callable
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """Register the batch job and start the scheduler. The first run is immediate."""
        if self.scheduler.running:
            logger.warning("Scheduler already running", extra={"event": "scheduler.already_running"})
            return

        trigger = IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc)

        next_run = datetime.now(timezone.utc)
        self.scheduler.add_job(
            func=self._run_batch,
            trigger=trigger,
            id=JOB_ID,
            name="Send due emails",
            replace_existing=True,
            next_run_time=next_run,
        )
        self.scheduler.start()

        logger.info(
            f"Scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": next_run.isoformat(),
            },
        )

    def _run_batch(self) -> None:
        # Errors are logged here so one failed tick never unschedules the job
        try:
            self.batch_callable()
        except Exception as e:
            logger.error(
                f"Scheduled batch failed: {e}",
                exc_info=True,
                extra={"event": "scheduler.run.failed", "error_type": type(e).__name__},
            )

    def shutdown(self, wait: bool = False) -> None:
        """
        Shutdown the scheduler.

        Args:
            wait: If True, wait for a running batch to finish before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> None:
        """Run one batch synchronously in the current thread."""
        logger.info("Triggering immediate batch run", extra={"event": "scheduler.trigger_now"})
        self.batch_callable()

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None
