"""Batch email sender.

Each run fetches due ``pending`` rows (oldest ``scheduled_for`` first, at most
``batch_size``) and delivers them strictly one at a time with a fixed pause
between sends. Every row is claimed (``sending``) and committed before the
SMTP call, so a crash mid-send never leaves a row that would be sent twice.
Rows left in ``sending`` longer than ``claim_timeout`` are dead-lettered at
the start of the next run. One row failing never aborts the batch.
"""

import threading
import time
import uuid
from contextlib import AbstractContextManager
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pitchmatch.config.environment import EnvironmentConfig
from pitchmatch.config.models import SenderConfig
from pitchmatch.domain.models import LogEvent, QueuedEmail
from pitchmatch.logging import get_logger, log_context
from pitchmatch.persistence import (
    EmailLogRepository,
    EmailQueueRepository,
    PersistenceError,
    get_session,
)
from pitchmatch.utils.timestamps import utc_now

from .models import BatchResult, SenderError, SenderNotConfiguredError
from .retry import RetryPolicy, classify_error
from .smtp_client import SMTPClient, build_message, build_sender_address

logger = get_logger(__name__, component="sender")

STALE_CLAIM_MESSAGE = "Send interrupted before completion; delivery state unknown"


class BatchSender:
    """Delivers due queue rows.

    A non-blocking lock makes overlapping runs (scheduler tick plus a manual
    cron call) skip instead of queueing up.
    """

    def __init__(
        self,
        env_config: EnvironmentConfig,
        sender_config: Optional[SenderConfig] = None,
        smtp_client: Optional[SMTPClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
        session_factory: Callable[[], AbstractContextManager] = get_session,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.env_config = env_config
        self.config = sender_config or SenderConfig()
        self.smtp_client = smtp_client or SMTPClient()
        self.retry_policy = retry_policy or RetryPolicy.from_config(self.config)
        self.session_factory = session_factory
        self.clock = clock
        self.sleep = sleep
        self._lock = threading.Lock()

    def run_once(self, now: Optional[datetime] = None) -> BatchResult:
        """Process one batch of due emails.

        Args:
            now: Cut-off for ``scheduled_for`` (defaults to the current time)

        Returns:
            BatchResult with per-outcome counts; ``skipped`` if a run was in progress

        Raises:
            SenderNotConfiguredError: If SMTP settings are missing
            PersistenceError: If the due rows cannot be fetched
        """
        if not self.env_config.smtp_configured:
            raise SenderNotConfiguredError("SMTP is not configured (set SMTP_HOST)")

        if not self._lock.acquire(blocking=False):
            logger.warning(
                "Batch already in progress, skipping this run",
                extra={"event": "sender.batch.skipped", "reason": "already_running"},
            )
            return BatchResult(skipped=True)

        try:
            result = BatchResult(batch_id=uuid.uuid4().hex[:8])
            with log_context(batch_id=result.batch_id):
                started = time.monotonic()
                self._run(now or self.clock(), result)
                result.duration_seconds = round(time.monotonic() - started, 3)

                logger.info(
                    f"Batch completed: {result.sent} sent, {result.retried} retried, "
                    f"{result.failed} failed",
                    extra={
                        "event": "sender.batch.completed",
                        "fetched": result.fetched,
                        "sent": result.sent,
                        "retried": result.retried,
                        "failed": result.failed,
                        "errors": result.errors,
                        "released": result.released,
                        "duration_seconds": result.duration_seconds,
                    },
                )
            return result
        finally:
            self._lock.release()

    def _run(self, now: datetime, result: BatchResult) -> None:
        sender_address = build_sender_address(self.env_config)
        delay_seconds = self.config.inter_send_delay_ms / 1000.0

        with self.session_factory() as session:
            self._release_stale(session, now, result)
            due = EmailQueueRepository(session).fetch_due(now, self.config.batch_size)
            result.fetched = len(due)

            if not due:
                logger.debug("No emails due", extra={"event": "sender.batch.empty"})
                return

            logger.info(
                f"Processing {len(due)} due emails",
                extra={"event": "sender.batch.started", "fetched": len(due)},
            )

            for index, email in enumerate(due):
                if index > 0 and delay_seconds > 0:
                    self.sleep(delay_seconds)
                with log_context(email_queue_id=email.id, campaign_id=email.campaign_id):
                    self._process(session, email, sender_address, result)

    def _release_stale(self, session: Session, now: datetime, result: BatchResult) -> None:
        """Dead-letter rows a crashed run left in ``sending``."""
        cutoff = now - timedelta(seconds=self.config.claim_timeout)
        try:
            released = EmailQueueRepository(session).release_stale(cutoff, STALE_CLAIM_MESSAGE)
            session.commit()
        except (PersistenceError, SQLAlchemyError) as e:
            session.rollback()
            logger.error(
                f"Failed to release stale claims: {e}",
                exc_info=True,
                extra={"event": "sender.stale_release_failed"},
            )
            return

        result.released = len(released)
        if released:
            logger.warning(
                f"Released {len(released)} emails stuck in sending",
                extra={"event": "sender.stale_released", "email_queue_ids": released},
            )

    def _process(
        self, session: Session, email: QueuedEmail, sender_address: str, result: BatchResult
    ) -> None:
        queue = EmailQueueRepository(session)
        email_log = EmailLogRepository(session)

        try:
            claimed = queue.mark_sending(email.id)
            session.commit()
        except (PersistenceError, SQLAlchemyError) as e:
            session.rollback()
            result.errors += 1
            logger.error(
                f"Failed to claim email {email.id}: {e}",
                exc_info=True,
                extra={"event": "sender.email.claim_failed"},
            )
            return

        if not claimed:
            result.not_claimed += 1
            logger.debug(
                f"Email {email.id} already claimed", extra={"event": "sender.email.not_claimed"}
            )
            return

        try:
            message_id = self.smtp_client.send(
                build_message(email, sender_address), self.env_config, use_tls=self.config.use_tls
            )
        except (SenderError, ValueError) as e:
            self._handle_failure(session, email, e, result)
            return
        except Exception as e:
            logger.error(
                f"Unexpected error sending email {email.id}: {e}",
                exc_info=True,
                extra={"event": "sender.email.unexpected_error", "error_type": type(e).__name__},
            )
            self._handle_failure(session, email, e, result)
            return

        try:
            queue.mark_sent(email.id, self.clock(), message_id)
            email_log.record(
                email.user_id,
                LogEvent.SENT,
                f"Email sent to {email.recipient_email}",
                campaign_id=email.campaign_id,
                email_queue_id=email.id,
                details={
                    "message_id": message_id,
                    "is_follow_up": email.is_follow_up,
                    "follow_up_number": email.follow_up_number,
                },
            )
            session.commit()
            result.sent += 1
            logger.info(
                f"Email {email.id} sent",
                extra={"event": "sender.email.sent", "message_id": message_id},
            )
        except (PersistenceError, SQLAlchemyError) as e:
            session.rollback()
            result.errors += 1
            logger.error(
                f"Email {email.id} was sent but its status update failed: {e}",
                exc_info=True,
                extra={"event": "sender.email.update_failed"},
            )

    def _handle_failure(
        self, session: Session, email: QueuedEmail, error: Exception, result: BatchResult
    ) -> None:
        queue = EmailQueueRepository(session)
        email_log = EmailLogRepository(session)

        error_type = classify_error(error)
        decision = self.retry_policy.decide(error_type, email.retry_count)
        retry_count = email.retry_count + 1
        details: Dict[str, object] = {
            "error_type": error_type.value,
            "retry_count": retry_count,
            "error": str(error),
        }

        try:
            if decision.retry:
                next_attempt = self.clock() + timedelta(seconds=decision.delay_seconds)
                queue.schedule_retry(email.id, retry_count, next_attempt, str(error))
                details["next_attempt_at"] = next_attempt.isoformat()
                email_log.record(
                    email.user_id,
                    LogEvent.RETRY_SCHEDULED,
                    f"Send to {email.recipient_email} failed, retry {retry_count} scheduled",
                    campaign_id=email.campaign_id,
                    email_queue_id=email.id,
                    details=details,
                )
                result.retried += 1
            else:
                queue.mark_failed(email.id, retry_count, str(error))
                details["reason"] = decision.reason
                email_log.record(
                    email.user_id,
                    LogEvent.FAILED,
                    f"Send to {email.recipient_email} failed permanently",
                    campaign_id=email.campaign_id,
                    email_queue_id=email.id,
                    details=details,
                )
                result.failed += 1
            session.commit()
        except (PersistenceError, SQLAlchemyError) as e:
            session.rollback()
            result.errors += 1
            logger.error(
                f"Failed to record failure for email {email.id}: {e}",
                exc_info=True,
                extra={"event": "sender.email.update_failed"},
            )
            return

        result.failures.append({"id": email.id, "email": email.recipient_email, "error": str(error)})
        logger.warning(
            f"Email {email.id} failed ({error_type.value}): {error}",
            extra={
                "event": "sender.email.retry_scheduled" if decision.retry else "sender.email.failed",
                "error_type": error_type.value,
                "retry_count": retry_count,
                "delay_seconds": decision.delay_seconds,
            },
        )


def queue_stats(session: Session, user_id: Optional[str] = None) -> Dict[str, int]:
    """Queue row counts per status, plus a total."""
    counts = EmailQueueRepository(session).count_by_status(user_id=user_id)
    counts["total"] = sum(counts.values())
    return counts
