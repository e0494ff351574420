"""Campaign lifecycle: creation, pool selection, start and stop.

Starting a campaign runs the same load and match as a preview, links every
eligible contact to the campaign, and queues one drip sequence per matched
pair (and, when configured, per unmatched contact). The first email of each
sequence takes a slot from the user's daily capacity; follow-ups go out a
fixed number of business days after the previous step.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator
from sqlalchemy.orm import Session

from pitchmatch.config.models import CampaignConfig
from pitchmatch.domain.models import (
    AuthContext,
    Campaign,
    CampaignStatus,
    Contact,
    LogEvent,
    Opportunity,
    QueuedEmail,
    Template,
)
from pitchmatch.logging import get_logger, log_context
from pitchmatch.matching import CampaignMatcher
from pitchmatch.persistence import (
    CampaignRepository,
    ContactRepository,
    EmailLogRepository,
    EmailQueueRepository,
    PoolRepository,
)
from pitchmatch.utils.timestamps import utc_now

from .exceptions import (
    CampaignAlreadyQueuedError,
    CampaignNotFoundError,
    InvalidPoolSelectionError,
    NoEligibleContactsError,
    PreconditionMissingError,
)
from .inputs import load_campaign_inputs
from .scheduling import SlotAllocator, follow_up_date
from .templating import MessageRenderer

logger = get_logger(__name__, component="campaigns")

DEFAULT_STOP_REASON = "Manually stopped by user"


class StartCampaignOptions(BaseModel):
    """Pacing options for a campaign start. Accepts snake_case or camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    max_emails_per_day: int = Field(28, ge=1, le=100, alias="maxEmailsPerDay")
    sending_start_hour: int = Field(9, ge=0, le=23, alias="sendingStartHour")
    sending_end_hour: int = Field(17, ge=1, le=24, alias="sendingEndHour")
    follow_up_delay_days: int = Field(3, ge=1, le=30, alias="followUpDelayDays")
    skip_weekends: bool = Field(True, alias="skipWeekends")

    @model_validator(mode="after")
    def validate_window(self):
        if self.sending_end_hour <= self.sending_start_hour:
            raise ValueError("sending_end_hour must be greater than sending_start_hour")
        return self

    @classmethod
    def from_config(cls, config: CampaignConfig, **overrides) -> "StartCampaignOptions":
        """Config defaults with per-request overrides (None values are ignored)."""
        values = {
            "max_emails_per_day": config.max_emails_per_day,
            "sending_start_hour": config.sending_start_hour,
            "sending_end_hour": config.sending_end_hour,
            "follow_up_delay_days": config.follow_up_delay_days,
            "skip_weekends": config.skip_weekends,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class StartCampaignResult:
    emails_queued: int
    follow_ups_scheduled: int
    total_emails: int
    contacts_linked: int
    first_send_at: Optional[datetime]
    estimated_completion_at: Optional[datetime]


@dataclass
class StopCampaignResult:
    emails_cancelled: int
    emails_already_sent: int


@dataclass
class _Sequence:
    contact: Contact
    opportunity: Optional[Opportunity]


class CampaignService:
    """Campaign operations for one request's session."""

    def __init__(
        self,
        session: Session,
        config: Optional[CampaignConfig] = None,
        matcher: Optional[CampaignMatcher] = None,
        renderer: Optional[MessageRenderer] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session = session
        self.config = config or CampaignConfig()
        self.matcher = matcher or CampaignMatcher()
        self.renderer = renderer or MessageRenderer()
        self.clock = clock

        self.campaigns = CampaignRepository(session)
        self.contacts = ContactRepository(session)
        self.pools = PoolRepository(session)
        self.queue = EmailQueueRepository(session)
        self.email_log = EmailLogRepository(session)

    def create_campaign(
        self, auth: AuthContext, name: str, pool_ids: Optional[Sequence[int]] = None
    ) -> Campaign:
        """Create a draft campaign, optionally with a pool selection."""
        pool_ids = list(pool_ids or [])
        if pool_ids:
            self._check_pools(auth, pool_ids)
        campaign = self.campaigns.create(
            Campaign(user_id=auth.user_id, name=name, pool_ids=pool_ids)
        )
        logger.info(
            f"Campaign created: {campaign.name}",
            extra={"event": "campaign.created", "campaign_id": campaign.id, "user_id": auth.user_id},
        )
        return campaign

    def save_pools(self, auth: AuthContext, campaign_id: int, pool_ids: Sequence[int]) -> Campaign:
        """Replace the campaign's saved pool selection.

        Raises:
            InvalidPoolSelectionError: Empty selection or pools not owned by the user
            CampaignNotFoundError: If the user has no such campaign
        """
        pool_ids = list(dict.fromkeys(pool_ids))
        if not pool_ids:
            raise InvalidPoolSelectionError("At least one lead pool must be selected")
        self._get_campaign(auth, campaign_id)
        self._check_pools(auth, pool_ids)
        return self.campaigns.set_pools(auth.user_id, campaign_id, pool_ids)

    def add_contacts(self, auth: AuthContext, campaign_id: int, contact_ids: Sequence[int]) -> int:
        """Link the user's contacts to the campaign. Returns the count linked."""
        if not contact_ids:
            raise NoEligibleContactsError("Contact IDs are required")
        self._get_campaign(auth, campaign_id)
        linked = self.contacts.assign_campaign(auth.user_id, contact_ids, campaign_id)
        logger.info(
            f"Linked {linked} contacts to campaign {campaign_id}",
            extra={"event": "campaign.contacts_linked", "campaign_id": campaign_id, "linked": linked},
        )
        return linked

    def start_campaign(
        self,
        auth: AuthContext,
        campaign_id: int,
        options: Optional[StartCampaignOptions] = None,
        pool_ids: Optional[Sequence[int]] = None,
    ) -> StartCampaignResult:
        """Queue the campaign's drip sequences and mark it active.

        Raises:
            CampaignNotFoundError: If the user has no such campaign
            CampaignAlreadyQueuedError: If the campaign still has pending or sending rows
            PreconditionMissingError: Templates, leads or contacts missing
            TemplateRenderError: If a template cannot be rendered
        """
        options = options or StartCampaignOptions.from_config(self.config)

        with log_context(user_id=auth.user_id, campaign_id=campaign_id):
            self._get_campaign(auth, campaign_id)
            if self.queue.has_live_rows_for_campaign(campaign_id):
                raise CampaignAlreadyQueuedError(campaign_id)

            inputs = load_campaign_inputs(self.session, auth, campaign_id, pool_ids)
            outcome = self.matcher.match(inputs.contacts, inputs.opportunities, inputs.templates)

            excluded_ids = {c.id for c in outcome.excluded}
            eligible = [c for c in inputs.contacts if c.id not in excluded_ids]
            if not eligible:
                raise NoEligibleContactsError("No contacts with an email address and first name")

            # Contacts join the campaign whether or not they matched
            linked = self.contacts.assign_campaign(
                auth.user_id, [c.id for c in eligible], campaign_id
            )

            sequences = self._build_sequences(inputs.contacts, inputs.opportunities, outcome)
            if not sequences:
                raise NoEligibleContactsError("No contacts matched an active journalist lead")

            first_template, follow_ups = self._split_templates(inputs.templates)
            now = self.clock()
            allocator = SlotAllocator(
                start_hour=options.sending_start_hour,
                end_hour=options.sending_end_hour,
                max_per_day=options.max_emails_per_day,
                skip_weekends=options.skip_weekends,
                tz=self.config.timezone,
                now=now,
                existing=self.queue.scheduled_times(auth.user_id, now - timedelta(days=1)),
            )

            first_emails: List[QueuedEmail] = []
            follow_up_emails: List[QueuedEmail] = []
            for sequence in sequences:
                first = self._queue_step(
                    auth, campaign_id, sequence, first_template, allocator.next_slot()
                )
                first_emails.append(first)

                previous_at = first.scheduled_for
                for template in follow_ups:
                    send_at = follow_up_date(
                        previous_at,
                        options.follow_up_delay_days,
                        options.skip_weekends,
                        start_hour=options.sending_start_hour,
                        tz=self.config.timezone,
                    )
                    follow_up_emails.append(
                        self._queue_step(
                            auth, campaign_id, sequence, template, send_at, parent=first
                        )
                    )
                    previous_at = send_at

            self.campaigns.set_status(auth.user_id, campaign_id, CampaignStatus.ACTIVE)

            all_times = [e.scheduled_for for e in first_emails + follow_up_emails]
            result = StartCampaignResult(
                emails_queued=len(first_emails),
                follow_ups_scheduled=len(follow_up_emails),
                total_emails=len(first_emails) + len(follow_up_emails),
                contacts_linked=linked,
                first_send_at=min(all_times),
                estimated_completion_at=max(all_times),
            )

            self.email_log.record(
                auth.user_id,
                LogEvent.SCHEDULED,
                f"Campaign started: {result.emails_queued} emails queued, "
                f"{result.follow_ups_scheduled} follow-ups scheduled",
                campaign_id=campaign_id,
                details={
                    "max_emails_per_day": options.max_emails_per_day,
                    "sending_hours": f"{options.sending_start_hour}:00 - {options.sending_end_hour}:00",
                    "follow_up_delay_days": options.follow_up_delay_days,
                    "skip_weekends": options.skip_weekends,
                    "total_emails": result.total_emails,
                    "matched_pairs": outcome.total_pairs,
                    "unmatched_contacts": len(outcome.unmatched_contacts),
                },
            )

            logger.info(
                f"Campaign started: {result.total_emails} emails scheduled",
                extra={
                    "event": "campaign.started",
                    "emails_queued": result.emails_queued,
                    "follow_ups_scheduled": result.follow_ups_scheduled,
                    "contacts_linked": linked,
                    "matched_pairs": outcome.total_pairs,
                },
            )
            return result

    def stop_campaign(
        self, auth: AuthContext, campaign_id: int, reason: Optional[str] = None
    ) -> StopCampaignResult:
        """Cancel pending emails and pause the campaign. Sent emails are kept."""
        reason = reason or DEFAULT_STOP_REASON

        with log_context(user_id=auth.user_id, campaign_id=campaign_id):
            self._get_campaign(auth, campaign_id)

            cancelled = self.queue.cancel_pending(campaign_id, reason)
            sent = self.queue.count_by_status(campaign_id=campaign_id)["sent"]
            self.campaigns.set_status(auth.user_id, campaign_id, CampaignStatus.PAUSED)

            self.email_log.record(
                auth.user_id,
                LogEvent.CANCELLED,
                f"Campaign stopped: {cancelled} pending emails cancelled",
                campaign_id=campaign_id,
                details={
                    "reason": reason,
                    "emails_cancelled": cancelled,
                    "emails_already_sent": sent,
                },
            )
            logger.info(
                f"Campaign stopped: {cancelled} pending emails cancelled",
                extra={"event": "campaign.stopped", "emails_cancelled": cancelled, "reason": reason},
            )
            return StopCampaignResult(emails_cancelled=cancelled, emails_already_sent=sent)

    def _get_campaign(self, auth: AuthContext, campaign_id: int) -> Campaign:
        campaign = self.campaigns.get(auth.user_id, campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(campaign_id)
        return campaign

    def _check_pools(self, auth: AuthContext, pool_ids: Sequence[int]) -> None:
        unknown = sorted(set(pool_ids) - self.pools.owned_ids(auth.user_id, pool_ids))
        if unknown:
            raise InvalidPoolSelectionError(f"Lead pools not found: {unknown}")

    def _split_templates(self, templates: Sequence[Template]):
        by_number: Dict[int, Template] = {t.template_number: t for t in templates}
        first = by_number.get(1)
        if first is None:
            raise PreconditionMissingError("Template 1 must be enabled to start a campaign")
        follow_ups = [
            by_number[n] for n in range(2, self.config.max_follow_ups + 1) if n in by_number
        ]
        return first, follow_ups

    def _build_sequences(self, contacts, opportunities, outcome) -> List[_Sequence]:
        contacts_by_id = {c.id: c for c in contacts}
        opportunities_by_id = {o.id: o for o in opportunities}

        sequences = [
            _Sequence(
                contact=contacts_by_id[pair.contact.id],
                opportunity=opportunities_by_id[pair.opportunity.id],
            )
            for pair in outcome.pairs
        ]
        if self.config.queue_unmatched_contacts:
            sequences.extend(_Sequence(contact=c, opportunity=None) for c in outcome.unmatched_contacts)
        return sequences

    def _queue_step(
        self,
        auth: AuthContext,
        campaign_id: int,
        sequence: _Sequence,
        template: Template,
        send_at: datetime,
        parent: Optional[QueuedEmail] = None,
    ) -> QueuedEmail:
        message = self.renderer.render_message(
            template.subject, template.body, sequence.contact, sequence.opportunity
        )
        return self.queue.add(
            QueuedEmail(
                user_id=auth.user_id,
                campaign_id=campaign_id,
                contact_id=sequence.contact.id,
                opportunity_id=sequence.opportunity.id if sequence.opportunity else None,
                recipient_email=sequence.contact.email,
                subject=message["subject"],
                body=message["body"],
                scheduled_for=send_at,
                is_follow_up=parent is not None,
                follow_up_number=template.template_number,
                parent_email_id=parent.id if parent else None,
            )
        )
