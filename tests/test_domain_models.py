"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from pitchmatch.domain.models import (
    AuthContext,
    Campaign,
    CampaignStatus,
    Contact,
    LeadPool,
    Opportunity,
    QueuedEmail,
    QueueStatus,
    Template,
)


class TestContact:
    """Tests for Contact model."""

    def test_strips_whitespace(self):
        contact = Contact(
            user_id="user-1",
            email="  jane@example.com ",
            first_name=" Jane ",
            last_name=" Doe ",
            company=" Acme ",
        )

        assert contact.email == "jane@example.com"
        assert contact.first_name == "Jane"
        assert contact.last_name == "Doe"
        assert contact.company == "Acme"

    def test_industry_is_kept_verbatim(self):
        """Industry comparison trims at match time, so the raw value is preserved."""
        assert Contact(user_id="user-1", industry=" Tech ").industry == " Tech "

    def test_blank_email_allowed(self):
        assert Contact(user_id="user-1", email=None).email == ""


class TestOpportunity:
    """Tests for Opportunity model."""

    def test_defaults(self):
        lead = Opportunity(user_id="user-1", journalist_name="Sam")
        assert lead.is_active is True
        assert lead.industry is None

    def test_journalist_name_required(self):
        with pytest.raises(ValidationError):
            Opportunity(user_id="user-1", journalist_name="")


class TestTemplate:
    """Tests for Template model."""

    def test_number_must_be_positive(self):
        with pytest.raises(ValidationError):
            Template(user_id="user-1", template_number=0, subject="s", body="b")

    def test_enabled_by_default(self):
        assert Template(user_id="user-1", template_number=1, subject="s", body="b").is_enabled


class TestLeadPool:
    """Tests for LeadPool model."""

    def test_name_stripped(self):
        assert LeadPool(user_id="user-1", name="  Founders ").name == "Founders"

    def test_whitespace_name_rejected(self):
        with pytest.raises(ValidationError, match="whitespace-only"):
            LeadPool(user_id="user-1", name="   ")


class TestCampaign:
    """Tests for Campaign model."""

    def test_defaults(self):
        campaign = Campaign(user_id="user-1", name="Launch")
        assert campaign.status == CampaignStatus.DRAFT
        assert campaign.pool_ids == []


class TestQueuedEmail:
    """Tests for QueuedEmail model."""

    def _email(self, **kwargs):
        values = {
            "user_id": "user-1",
            "campaign_id": 1,
            "recipient_email": "jane@example.com",
            "subject": "Hello",
            "body": "Body",
            "scheduled_for": datetime(2026, 1, 5, 9, 0),
        }
        values.update(kwargs)
        return QueuedEmail(**values)

    def test_defaults(self):
        email = self._email()
        assert email.status == QueueStatus.PENDING
        assert email.retry_count == 0
        assert email.follow_up_number == 1
        assert not email.is_follow_up

    def test_naive_times_become_utc(self):
        email = self._email()
        assert email.scheduled_for.tzinfo == timezone.utc

    def test_aware_times_are_converted(self):
        eastern = timezone(timedelta(hours=-5))
        email = self._email(scheduled_for=datetime(2026, 1, 5, 9, 0, tzinfo=eastern))
        assert email.scheduled_for == datetime(2026, 1, 5, 14, 0, tzinfo=timezone.utc)

    def test_negative_retry_count_rejected(self):
        with pytest.raises(ValidationError):
            self._email(retry_count=-1)


class TestQueueStatus:
    """Terminal states."""

    @pytest.mark.parametrize(
        "status,terminal",
        [
            (QueueStatus.PENDING, False),
            (QueueStatus.SENDING, False),
            (QueueStatus.SENT, True),
            (QueueStatus.FAILED, True),
            (QueueStatus.CANCELLED, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        assert status.is_terminal is terminal


class TestAuthContext:
    """Tests for AuthContext model."""

    def test_frozen(self):
        auth = AuthContext(user_id="user-1")
        with pytest.raises(ValidationError):
            auth.user_id = "someone-else"

    def test_user_id_required(self):
        with pytest.raises(ValidationError):
            AuthContext(user_id="")
