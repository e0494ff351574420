"""Tests for the batch sender against a SQLite queue."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from pitchmatch.config.environment import EnvironmentConfig
from pitchmatch.config.models import SenderConfig
from pitchmatch.domain.models import Campaign, LogEvent, QueuedEmail, QueueStatus
from pitchmatch.persistence import (
    CampaignRepository,
    EmailLogRepository,
    EmailQueueRepository,
    get_session,
)
from pitchmatch.sender import BatchSender, SenderNotConfiguredError, SMTPDeliveryError, queue_stats
from pitchmatch.sender.batch import STALE_CLAIM_MESSAGE
from pitchmatch.utils.timestamps import utc_now
from tests.helpers import USER_ID

NOW = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def env_config():
    return EnvironmentConfig(smtp_host="smtp.example.com", smtp_from_email="pitch@example.com")


@pytest.fixture
def smtp_client():
    client = Mock()
    client.send.return_value = "<msg@example.com>"
    return client


@pytest.fixture
def campaign_id(db):
    with get_session() as session:
        return CampaignRepository(session).create(Campaign(user_id=USER_ID, name="Launch")).id


@pytest.fixture
def queue_rows(campaign_id):
    """Insert queue rows; returns a function taking (recipient, scheduled_for, retry_count)."""

    def insert(*rows):
        with get_session() as session:
            repo = EmailQueueRepository(session)
            return [
                repo.add(
                    QueuedEmail(
                        user_id=USER_ID,
                        campaign_id=campaign_id,
                        recipient_email=recipient,
                        subject=f"Hello {recipient}",
                        body="Body",
                        scheduled_for=scheduled_for,
                        retry_count=retry_count,
                    )
                ).id
                for recipient, scheduled_for, retry_count in rows
            ]

    return insert


def make_sender(env_config, smtp_client, **config):
    return BatchSender(
        env_config,
        SenderConfig(**config),
        smtp_client=smtp_client,
        clock=lambda: NOW,
        sleep=Mock(),
    )


def load(email_id):
    with get_session() as session:
        return EmailQueueRepository(session).get(email_id)


class TestBatchSender:
    """Delivering due rows."""

    def test_sends_due_rows_only(self, env_config, smtp_client, queue_rows):
        due_a, due_b, future = queue_rows(
            ("a@example.com", NOW - timedelta(hours=3), 0),
            ("b@example.com", NOW - timedelta(hours=1), 0),
            ("c@example.com", NOW + timedelta(days=1), 0),
        )

        result = make_sender(env_config, smtp_client).run_once()

        assert result.fetched == 2
        assert result.sent == 2
        assert result.processed == 2
        assert not result.has_errors
        assert load(due_a).status == QueueStatus.SENT
        assert load(due_a).sent_at == NOW
        assert load(due_a).message_id == "<msg@example.com>"
        assert load(future).status == QueueStatus.PENDING

    def test_oldest_first(self, env_config, smtp_client, queue_rows):
        queue_rows(
            ("late@example.com", NOW - timedelta(minutes=5), 0),
            ("early@example.com", NOW - timedelta(hours=5), 0),
        )

        make_sender(env_config, smtp_client).run_once()

        recipients = [call.args[0]["To"] for call in smtp_client.send.call_args_list]
        assert recipients == ["early@example.com", "late@example.com"]

    def test_message_uses_sender_address(self, env_config, smtp_client, queue_rows):
        queue_rows(("a@example.com", NOW, 0))

        make_sender(env_config, smtp_client).run_once()

        message = smtp_client.send.call_args.args[0]
        assert message["From"] == "PitchMatch <pitch@example.com>"
        assert message["Subject"] == "Hello a@example.com"

    def test_batch_size_limits_fetch(self, env_config, smtp_client, queue_rows):
        queue_rows(("a@example.com", NOW, 0), ("b@example.com", NOW, 0))

        result = make_sender(env_config, smtp_client, batch_size=1).run_once()

        assert result.fetched == 1
        assert smtp_client.send.call_count == 1

    def test_pause_between_sends(self, env_config, smtp_client, queue_rows):
        queue_rows(("a@example.com", NOW, 0), ("b@example.com", NOW, 0), ("c@example.com", NOW, 0))
        sender = make_sender(env_config, smtp_client, inter_send_delay_ms=250)

        sender.run_once()

        assert sender.sleep.call_count == 2
        sender.sleep.assert_called_with(0.25)

    def test_sent_rows_are_logged(self, env_config, smtp_client, queue_rows, campaign_id):
        email_id, = queue_rows(("a@example.com", NOW, 0))

        make_sender(env_config, smtp_client).run_once()

        with get_session() as session:
            entries = EmailLogRepository(session).list_for_campaign(campaign_id)
        assert [e.event_type for e in entries] == [LogEvent.SENT]
        assert entries[0].email_queue_id == email_id
        assert entries[0].details["message_id"] == "<msg@example.com>"

    def test_empty_queue(self, env_config, smtp_client, db):
        result = make_sender(env_config, smtp_client).run_once()

        assert result.fetched == 0
        assert result.processed == 0
        smtp_client.send.assert_not_called()

    def test_requires_smtp(self, smtp_client, db):
        sender = make_sender(EnvironmentConfig(), smtp_client)
        with pytest.raises(SenderNotConfiguredError):
            sender.run_once()

    def test_overlapping_run_is_skipped(self, env_config, smtp_client, queue_rows):
        queue_rows(("a@example.com", NOW, 0))
        sender = make_sender(env_config, smtp_client)

        sender._lock.acquire()
        try:
            result = sender.run_once()
        finally:
            sender._lock.release()

        assert result.skipped
        smtp_client.send.assert_not_called()


class TestBatchFailures:
    """Retry and dead-letter handling."""

    def test_transient_failure_is_retried(self, env_config, smtp_client, queue_rows, campaign_id):
        email_id, = queue_rows(("a@example.com", NOW, 0))
        smtp_client.send.side_effect = SMTPDeliveryError("SMTP error 421: busy", smtp_code=421)

        result = make_sender(env_config, smtp_client).run_once()

        row = load(email_id)
        assert result.retried == 1
        assert row.status == QueueStatus.PENDING
        assert row.retry_count == 1
        assert row.scheduled_for == NOW + timedelta(seconds=60)
        assert "421" in row.error_message
        assert result.failures == [
            {"id": email_id, "email": "a@example.com", "error": "SMTP error 421: busy"}
        ]
        with get_session() as session:
            entry = EmailLogRepository(session).list_for_campaign(campaign_id)[-1]
        assert entry.event_type == LogEvent.RETRY_SCHEDULED
        assert entry.details["error_type"] == "transient"

    def test_permanent_failure_is_dead_lettered(self, env_config, smtp_client, queue_rows):
        email_id, = queue_rows(("a@example.com", NOW, 0))
        smtp_client.send.side_effect = SMTPDeliveryError("SMTP error 550: user unknown", smtp_code=550)

        result = make_sender(env_config, smtp_client).run_once()

        assert result.failed == 1
        assert result.has_errors
        assert load(email_id).status == QueueStatus.FAILED
        assert load(email_id).retry_count == 1

    def test_exhausted_retries_are_dead_lettered(self, env_config, smtp_client, queue_rows):
        email_id, = queue_rows(("a@example.com", NOW, 3))
        smtp_client.send.side_effect = SMTPDeliveryError("SMTP error 421: busy", smtp_code=421)

        result = make_sender(env_config, smtp_client, max_retries=3).run_once()

        assert result.failed == 1
        assert load(email_id).status == QueueStatus.FAILED
        assert load(email_id).retry_count == 4

    def test_one_failure_does_not_stop_the_batch(self, env_config, smtp_client, queue_rows):
        first, second = queue_rows(
            ("a@example.com", NOW - timedelta(minutes=2), 0),
            ("b@example.com", NOW - timedelta(minutes=1), 0),
        )
        smtp_client.send.side_effect = [
            SMTPDeliveryError("SMTP error 550: blocked", smtp_code=550),
            "<ok@example.com>",
        ]

        result = make_sender(env_config, smtp_client).run_once()

        assert result.failed == 1
        assert result.sent == 1
        assert load(first).status == QueueStatus.FAILED
        assert load(second).status == QueueStatus.SENT

    def test_retried_row_is_not_due_again_in_same_run(self, env_config, smtp_client, queue_rows):
        queue_rows(("a@example.com", NOW, 0))
        smtp_client.send.side_effect = SMTPDeliveryError("SMTP error 421: busy", smtp_code=421)
        sender = make_sender(env_config, smtp_client)

        sender.run_once()
        second = sender.run_once()

        assert second.fetched == 0

    def test_unexpected_error_is_retried_and_batch_continues(self, env_config, smtp_client, queue_rows):
        first, second, third = queue_rows(
            ("a@example.com", NOW - timedelta(minutes=3), 0),
            ("b@example.com", NOW - timedelta(minutes=2), 0),
            ("c@example.com", NOW - timedelta(minutes=1), 0),
        )
        smtp_client.send.side_effect = [RuntimeError("boom"), "<m@example.com>", "<m@example.com>"]

        result = make_sender(env_config, smtp_client).run_once()

        assert result.sent == 2
        assert result.retried == 1
        row = load(first)
        assert row.status == QueueStatus.PENDING
        assert row.retry_count == 1
        assert row.error_message == "boom"
        assert load(second).status == QueueStatus.SENT
        assert load(third).status == QueueStatus.SENT


class TestStaleClaims:
    """Rows a crashed run left in sending."""

    def test_old_claim_is_dead_lettered(self, env_config, smtp_client, queue_rows):
        email_id, = queue_rows(("a@example.com", NOW, 0))
        with get_session() as session:
            EmailQueueRepository(session).mark_sending(email_id)

        result = make_sender(env_config, smtp_client).run_once(now=utc_now() + timedelta(hours=1))

        assert result.released == 1
        assert result.fetched == 0
        row = load(email_id)
        assert row.status == QueueStatus.FAILED
        assert row.error_message == STALE_CLAIM_MESSAGE
        smtp_client.send.assert_not_called()

    def test_recent_claim_is_left_alone(self, env_config, smtp_client, queue_rows):
        email_id, = queue_rows(("a@example.com", NOW, 0))
        with get_session() as session:
            EmailQueueRepository(session).mark_sending(email_id)

        result = make_sender(env_config, smtp_client, claim_timeout=900).run_once(now=utc_now())

        assert result.released == 0
        assert load(email_id).status == QueueStatus.SENDING


def test_queue_stats(env_config, smtp_client, queue_rows):
    queue_rows(("a@example.com", NOW, 0), ("b@example.com", NOW + timedelta(days=1), 0))
    make_sender(env_config, smtp_client).run_once()

    with get_session() as session:
        stats = queue_stats(session)

    assert stats["sent"] == 1
    assert stats["pending"] == 1
    assert stats["failed"] == 0
    assert stats["total"] == 2
