"""Unit tests for the scheduler service.

Tests the SchedulerService including:
- Job registration with correct configuration
- Immediate first run (next_run_time set to now)
- Start/shutdown lifecycle
- Failed runs do not unschedule the job
- Trigger now functionality
"""

import threading
import time
from datetime import datetime
from unittest.mock import Mock

from pitchmatch.scheduler import SchedulerService
from pitchmatch.scheduler.service import JOB_ID


class TestSchedulerService:
    """Test suite for SchedulerService."""

    def test_scheduler_initialization(self):
        mock_callable = Mock()
        shutdown_event = threading.Event()

        scheduler = SchedulerService(
            batch_callable=mock_callable,
            interval_seconds=60,
            shutdown_event=shutdown_event,
        )

        assert scheduler.interval_seconds == 60
        assert scheduler.batch_callable == mock_callable
        assert scheduler.shutdown_event == shutdown_event
        assert not scheduler.is_running()

    def test_job_defaults(self):
        """One instance at a time, coalesced, with a grace period of one interval."""
        scheduler = SchedulerService(batch_callable=Mock(), interval_seconds=60)

        assert scheduler.scheduler._job_defaults["max_instances"] == 1
        assert scheduler.scheduler._job_defaults["coalesce"] is True
        assert scheduler.scheduler._job_defaults["misfire_grace_time"] == 60

    def test_start_and_shutdown(self):
        shutdown_event = threading.Event()
        scheduler = SchedulerService(
            batch_callable=Mock(), interval_seconds=300, shutdown_event=shutdown_event
        )

        scheduler.start()
        assert scheduler.is_running()
        assert scheduler.scheduler.get_job(JOB_ID) is not None

        scheduler.shutdown(wait=False)
        assert not scheduler.is_running()
        assert shutdown_event.is_set()

    def test_immediate_first_run(self):
        ran = threading.Event()
        scheduler = SchedulerService(batch_callable=ran.set, interval_seconds=3600)

        scheduler.start()
        try:
            assert ran.wait(timeout=5)
        finally:
            scheduler.shutdown(wait=True)

    def test_failed_run_keeps_job_scheduled(self):
        """An exception from the batch is logged and the job stays registered."""
        attempted = threading.Event()

        def failing_batch():
            attempted.set()
            raise RuntimeError("SMTP down")

        scheduler = SchedulerService(batch_callable=failing_batch, interval_seconds=3600)
        scheduler.start()
        try:
            assert attempted.wait(timeout=5)
            time.sleep(0.1)
            assert scheduler.get_next_run_time() is not None
        finally:
            scheduler.shutdown(wait=True)

    def test_run_batch_swallows_errors(self):
        scheduler = SchedulerService(
            batch_callable=Mock(side_effect=RuntimeError("boom")), interval_seconds=60
        )
        scheduler._run_batch()
        scheduler.batch_callable.assert_called_once()

    def test_trigger_now_executes_immediately(self):
        mock_callable = Mock()
        scheduler = SchedulerService(batch_callable=mock_callable, interval_seconds=3600)

        scheduler.trigger_now()

        mock_callable.assert_called_once()

    def test_get_next_run_time(self):
        scheduler = SchedulerService(batch_callable=Mock(), interval_seconds=60)
        assert scheduler.get_next_run_time() is None

        scheduler.start()
        try:
            assert isinstance(scheduler.get_next_run_time(), datetime)
        finally:
            scheduler.shutdown(wait=False)

    def test_multiple_start_calls_safe(self):
        scheduler = SchedulerService(batch_callable=Mock(), interval_seconds=60)

        scheduler.start()
        scheduler.start()

        assert scheduler.is_running()
        scheduler.shutdown(wait=False)

    def test_shutdown_with_wait(self):
        """shutdown(wait=True) lets a running batch finish."""
        started = threading.Event()
        completed = threading.Event()

        def slow_batch():
            started.set()
            time.sleep(0.3)
            completed.set()

        scheduler = SchedulerService(batch_callable=slow_batch, interval_seconds=3600)
        scheduler.start()
        started.wait(timeout=5)

        scheduler.shutdown(wait=True)

        assert completed.is_set()

    def test_shutdown_without_start(self):
        shutdown_event = threading.Event()
        scheduler = SchedulerService(
            batch_callable=Mock(), interval_seconds=60, shutdown_event=shutdown_event
        )

        scheduler.shutdown()

        assert shutdown_event.is_set()
