"""End-to-end: start a campaign, deliver due emails in batches, then stop it."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from pitchmatch.campaigns import CampaignService
from pitchmatch.config.environment import EnvironmentConfig
from pitchmatch.domain.models import CampaignStatus, LogEvent, QueueStatus
from pitchmatch.persistence import (
    CampaignRepository,
    EmailLogRepository,
    EmailQueueRepository,
    get_session,
)
from pitchmatch.sender import BatchSender, SMTPDeliveryError
from tests.helpers import USER_ID, seed_campaign

MONDAY_MORNING = datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def smtp_client():
    client = Mock()
    client.send.return_value = "<msg@example.com>"
    return client


@pytest.fixture
def sender(smtp_client):
    return BatchSender(
        EnvironmentConfig(smtp_host="smtp.example.com", smtp_from_email="pitch@example.com"),
        smtp_client=smtp_client,
        sleep=Mock(),
    )


@pytest.fixture
def started_campaign(db, auth):
    """Two Tech contacts, one Tech lead and a three-step sequence, started on Monday."""
    with get_session() as session:
        seeded = seed_campaign(
            session, contact_industries=["Tech", "Tech"], template_numbers=[1, 2, 3]
        )
        campaign_id = seeded["campaign"].id
        result = CampaignService(session, clock=lambda: MONDAY_MORNING).start_campaign(
            auth, campaign_id
        )
    assert result.total_emails == 6
    return campaign_id


def run_at(sender, now):
    sender.clock = lambda: now
    return sender.run_once()


def queue_statuses(campaign_id):
    with get_session() as session:
        return [
            (row.follow_up_number, row.status)
            for row in EmailQueueRepository(session).list_for_campaign(campaign_id)
        ]


class TestCampaignDelivery:
    def test_first_emails_go_out_on_day_one(self, started_campaign, sender, smtp_client):
        result = run_at(sender, datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc))

        assert result.sent == 2
        assert result.failed == 0
        recipients = {c.args[0]["To"] for c in smtp_client.send.call_args_list}
        assert recipients == {"contact0@example.com", "contact1@example.com"}
        subjects = {c.args[0]["Subject"] for c in smtp_client.send.call_args_list}
        assert subjects == {"Step 1 for Contact0", "Step 1 for Contact1"}

        statuses = queue_statuses(started_campaign)
        assert sorted(s for n, s in statuses if n == 1) == [QueueStatus.SENT, QueueStatus.SENT]
        assert all(s == QueueStatus.PENDING for n, s in statuses if n != 1)

    def test_follow_ups_wait_for_their_day(self, started_campaign, sender, smtp_client):
        run_at(sender, datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc))
        assert run_at(sender, datetime(2026, 1, 7, 12, 0, tzinfo=timezone.utc)).fetched == 0

        result = run_at(sender, datetime(2026, 1, 8, 10, 0, tzinfo=timezone.utc))

        assert result.sent == 2
        assert smtp_client.send.call_args_list[-1].args[0]["Subject"].startswith("Step 2 for")

    def test_stop_cancels_what_is_left(self, started_campaign, sender, auth):
        run_at(sender, datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc))
        run_at(sender, datetime(2026, 1, 8, 10, 0, tzinfo=timezone.utc))

        with get_session() as session:
            stopped = CampaignService(session).stop_campaign(auth, started_campaign)

        assert stopped.emails_cancelled == 2
        assert stopped.emails_already_sent == 4
        assert run_at(sender, datetime(2026, 2, 1, 10, 0, tzinfo=timezone.utc)).fetched == 0

        with get_session() as session:
            campaign = CampaignRepository(session).get(USER_ID, started_campaign)
            events = [e.event_type for e in EmailLogRepository(session).list_for_campaign(started_campaign)]

        assert campaign.status == CampaignStatus.PAUSED
        assert events.count(LogEvent.SCHEDULED) == 1
        assert events.count(LogEvent.SENT) == 4
        assert events.count(LogEvent.CANCELLED) == 1

    def test_transient_failure_is_retried_in_a_later_batch(self, started_campaign, sender, smtp_client):
        smtp_client.send.side_effect = [
            SMTPDeliveryError("SMTP error 421: busy", smtp_code=421),
            "<msg-2@example.com>",
        ]
        first = run_at(sender, datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc))

        assert first.sent == 1
        assert first.retried == 1

        smtp_client.send.side_effect = None
        later = run_at(sender, datetime(2026, 1, 5, 12, 5, tzinfo=timezone.utc))

        assert later.sent == 1
        statuses = queue_statuses(started_campaign)
        assert [s for n, s in statuses if n == 1] == [QueueStatus.SENT, QueueStatus.SENT]
