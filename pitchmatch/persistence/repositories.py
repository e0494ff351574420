"""Data access layer (repositories) for persistence operations.

Repositories take a session, scope every query to the owning user where the
table has one, and return domain models rather than ORM models. Commits are
left to the caller (``get_session`` or an explicit ``session.commit()``).
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pitchmatch.domain.models import (
    Campaign,
    CampaignStatus,
    Contact,
    EmailLogEntry,
    LeadPool,
    LogEvent,
    Opportunity,
    QueuedEmail,
    QueueStatus,
    Template,
)
from pitchmatch.utils.timestamps import format_db_timestamp, parse_db_timestamp, utc_now

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import (
    CampaignModel,
    ContactModel,
    EmailLogModel,
    EmailQueueModel,
    LeadPoolModel,
    OpportunityModel,
    TemplateModel,
    contact_pools,
)

logger = logging.getLogger(__name__)


class ContactRepository:
    """Repository for contact records."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, contact: Contact) -> Contact:
        """Insert a contact and return it with its id.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = ContactModel.from_domain(contact)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            logger.error(f"Integrity error creating contact: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to create contact: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating contact: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create contact: {e}") from e

    def get(self, user_id: str, contact_id: int) -> Optional[Contact]:
        """Return the user's contact, or None."""
        try:
            stmt = select(ContactModel).where(
                ContactModel.id == contact_id, ContactModel.user_id == user_id
            )
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving contact {contact_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve contact: {e}") from e

    def list_for_user(self, user_id: str) -> List[Contact]:
        """All of the user's contacts, ordered by id."""
        try:
            stmt = (
                select(ContactModel)
                .where(ContactModel.user_id == user_id)
                .order_by(ContactModel.id.asc())
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing contacts for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list contacts: {e}") from e

    def list_for_pools(self, user_id: str, pool_ids: Iterable[int]) -> List[Contact]:
        """Distinct contacts in any of the pools, owned by the user, ordered by id."""
        pool_ids = list(pool_ids)
        if not pool_ids:
            return []
        try:
            in_pools = select(contact_pools.c.contact_id).where(
                contact_pools.c.pool_id.in_(pool_ids)
            )
            stmt = (
                select(ContactModel)
                .where(ContactModel.user_id == user_id, ContactModel.id.in_(in_pools))
                .order_by(ContactModel.id.asc())
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing contacts for pools {pool_ids}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list pool contacts: {e}") from e

    def update_industry(self, user_id: str, contact_id: int, industry: str) -> Contact:
        """Set a contact's industry (trimmed).

        Raises:
            RecordNotFoundError: If the user has no such contact
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.execute(
                select(ContactModel).where(
                    ContactModel.id == contact_id, ContactModel.user_id == user_id
                )
            ).scalar_one_or_none()
            if model is None:
                raise RecordNotFoundError(f"Contact {contact_id} not found")

            model.industry = industry.strip()
            self.session.flush()
            return model.to_domain()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating industry for contact {contact_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update contact industry: {e}") from e

    def assign_campaign(self, user_id: str, contact_ids: Iterable[int], campaign_id: int) -> int:
        """Write ``campaign_id`` onto the user's contacts.

        Returns:
            Count of contacts updated (ids owned by other users are ignored)
        """
        contact_ids = list(contact_ids)
        if not contact_ids:
            return 0
        try:
            stmt = (
                update(ContactModel)
                .where(ContactModel.user_id == user_id, ContactModel.id.in_(contact_ids))
                .values(campaign_id=campaign_id)
            )
            result = self.session.execute(stmt)
            self.session.flush()
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error assigning contacts to campaign {campaign_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to assign contacts: {e}") from e

    def owned_ids(self, user_id: str, contact_ids: Iterable[int]) -> Set[int]:
        """Subset of ``contact_ids`` that belong to the user."""
        contact_ids = list(contact_ids)
        if not contact_ids:
            return set()
        try:
            stmt = select(ContactModel.id).where(
                ContactModel.user_id == user_id, ContactModel.id.in_(contact_ids)
            )
            return set(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error checking contact ownership: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check contacts: {e}") from e


class OpportunityRepository:
    """Repository for journalist leads."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, opportunity: Opportunity) -> Opportunity:
        try:
            model = OpportunityModel.from_domain(opportunity)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error creating journalist lead: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create journalist lead: {e}") from e

    def list_active(self, user_id: str) -> List[Opportunity]:
        """The user's active leads, ordered by id."""
        try:
            stmt = (
                select(OpportunityModel)
                .where(OpportunityModel.user_id == user_id, OpportunityModel.is_active.is_(True))
                .order_by(OpportunityModel.id.asc())
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing journalist leads for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list journalist leads: {e}") from e

    def get(self, user_id: str, opportunity_id: int) -> Optional[Opportunity]:
        try:
            stmt = select(OpportunityModel).where(
                OpportunityModel.id == opportunity_id, OpportunityModel.user_id == user_id
            )
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving journalist lead {opportunity_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve journalist lead: {e}") from e

    def delete(self, user_id: str, opportunity_id: int) -> bool:
        """Delete one of the user's leads. Returns False when nothing matched."""
        try:
            stmt = delete(OpportunityModel).where(
                OpportunityModel.id == opportunity_id, OpportunityModel.user_id == user_id
            )
            result = self.session.execute(stmt)
            self.session.flush()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Error deleting journalist lead {opportunity_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete journalist lead: {e}") from e


class TemplateRepository:
    """Repository for numbered email templates."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, template: Template) -> Template:
        """Insert a template.

        Raises:
            DataIntegrityError: If the user already has a template with that number
            PersistenceError: If database error occurs
        """
        try:
            model = TemplateModel.from_domain(template)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            logger.error(
                f"Integrity error creating template {template.template_number}: {e}",
                exc_info=True,
            )
            raise DataIntegrityError(
                f"Template {template.template_number} already exists"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating template: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create template: {e}") from e

    def list_enabled(self, user_id: str) -> List[Template]:
        """The user's enabled templates, ascending by number."""
        try:
            stmt = (
                select(TemplateModel)
                .where(TemplateModel.user_id == user_id, TemplateModel.is_enabled.is_(True))
                .order_by(TemplateModel.template_number.asc())
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing templates for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list templates: {e}") from e

    def set_enabled(self, user_id: str, template_number: int, enabled: bool) -> Template:
        """Enable or disable a template by number.

        Raises:
            RecordNotFoundError: If the user has no template with that number
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.execute(
                select(TemplateModel).where(
                    TemplateModel.user_id == user_id,
                    TemplateModel.template_number == template_number,
                )
            ).scalar_one_or_none()
            if model is None:
                raise RecordNotFoundError(f"Template {template_number} not found")

            model.is_enabled = enabled
            self.session.flush()
            return model.to_domain()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error toggling template {template_number}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update template: {e}") from e


class PoolRepository:
    """Repository for lead pools and their contact membership."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, pool: LeadPool) -> LeadPool:
        try:
            model = LeadPoolModel.from_domain(pool)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error creating lead pool: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create lead pool: {e}") from e

    def get(self, user_id: str, pool_id: int) -> Optional[LeadPool]:
        try:
            stmt = select(LeadPoolModel).where(
                LeadPoolModel.id == pool_id, LeadPoolModel.user_id == user_id
            )
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving lead pool {pool_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve lead pool: {e}") from e

    def owned_ids(self, user_id: str, pool_ids: Iterable[int]) -> Set[int]:
        """Subset of ``pool_ids`` that belong to the user."""
        pool_ids = list(pool_ids)
        if not pool_ids:
            return set()
        try:
            stmt = select(LeadPoolModel.id).where(
                LeadPoolModel.user_id == user_id, LeadPoolModel.id.in_(pool_ids)
            )
            return set(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error checking pool ownership: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check lead pools: {e}") from e

    def add_contacts(self, user_id: str, pool_id: int, contact_ids: Iterable[int]) -> int:
        """Link the user's contacts to a pool, skipping existing links.

        Returns:
            Count of newly linked contacts

        Raises:
            RecordNotFoundError: If the user has no such pool
            PersistenceError: If database error occurs
        """
        if self.get(user_id, pool_id) is None:
            raise RecordNotFoundError(f"Pool {pool_id} not found")

        try:
            owned = self.session.execute(
                select(ContactModel.id).where(
                    ContactModel.user_id == user_id, ContactModel.id.in_(list(contact_ids))
                )
            ).scalars().all()
            existing = set(
                self.session.execute(
                    select(contact_pools.c.contact_id).where(contact_pools.c.pool_id == pool_id)
                ).scalars().all()
            )
            new_ids = sorted(set(owned) - existing)
            if new_ids:
                self.session.execute(
                    insert(contact_pools),
                    [{"contact_id": cid, "pool_id": pool_id} for cid in new_ids],
                )
                self.session.flush()
            return len(new_ids)
        except SQLAlchemyError as e:
            logger.error(f"Error adding contacts to pool {pool_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add contacts to pool: {e}") from e


class CampaignRepository:
    """Repository for campaigns."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, campaign: Campaign) -> Campaign:
        try:
            model = CampaignModel.from_domain(campaign)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error creating campaign: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create campaign: {e}") from e

    def get(self, user_id: str, campaign_id: int) -> Optional[Campaign]:
        """Return the user's campaign, or None (also for other users' campaigns)."""
        try:
            model = self._get_model(user_id, campaign_id)
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving campaign {campaign_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve campaign: {e}") from e

    def set_status(self, user_id: str, campaign_id: int, status: CampaignStatus) -> Campaign:
        """Raises RecordNotFoundError if the user has no such campaign."""
        return self._update(user_id, campaign_id, status=status.value)

    def set_pools(self, user_id: str, campaign_id: int, pool_ids: List[int]) -> Campaign:
        """Raises RecordNotFoundError if the user has no such campaign."""
        return self._update(user_id, campaign_id, pool_ids=list(pool_ids))

    def _get_model(self, user_id: str, campaign_id: int) -> Optional[CampaignModel]:
        stmt = select(CampaignModel).where(
            CampaignModel.id == campaign_id, CampaignModel.user_id == user_id
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def _update(self, user_id: str, campaign_id: int, **values: Any) -> Campaign:
        try:
            model = self._get_model(user_id, campaign_id)
            if model is None:
                raise RecordNotFoundError(f"Campaign {campaign_id} not found")

            for key, value in values.items():
                setattr(model, key, value)
            model.updated_at = format_db_timestamp(utc_now())
            self.session.flush()
            return model.to_domain()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating campaign {campaign_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update campaign: {e}") from e


class EmailQueueRepository:
    """Repository for the outbound email queue.

    Status transitions are guarded in the UPDATE itself so two senders can
    never claim the same row.
    """

    def __init__(self, session: Session):
        self.session = session

    def add(self, email: QueuedEmail) -> QueuedEmail:
        """Insert one row and return it with its id."""
        try:
            model = EmailQueueModel.from_domain(email)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            logger.error(f"Integrity error queueing email: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to queue email: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error queueing email: {e}", exc_info=True)
            raise PersistenceError(f"Failed to queue email: {e}") from e

    def add_many(self, emails: Iterable[QueuedEmail]) -> List[QueuedEmail]:
        return [self.add(email) for email in emails]

    def get(self, email_id: int) -> Optional[QueuedEmail]:
        try:
            model = self.session.get(EmailQueueModel, email_id)
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving queued email {email_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve queued email: {e}") from e

    def has_live_rows_for_campaign(self, campaign_id: int) -> bool:
        """True while the campaign has rows still to be delivered (pending or sending)."""
        try:
            stmt = (
                select(EmailQueueModel.id)
                .where(
                    EmailQueueModel.campaign_id == campaign_id,
                    EmailQueueModel.status.in_(
                        [QueueStatus.PENDING.value, QueueStatus.SENDING.value]
                    ),
                )
                .limit(1)
            )
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking queue for campaign {campaign_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check email queue: {e}") from e

    def list_for_campaign(self, campaign_id: int) -> List[QueuedEmail]:
        """All rows for a campaign in scheduled order."""
        try:
            stmt = (
                select(EmailQueueModel)
                .where(EmailQueueModel.campaign_id == campaign_id)
                .order_by(EmailQueueModel.scheduled_for.asc(), EmailQueueModel.id.asc())
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing queue for campaign {campaign_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list email queue: {e}") from e

    def fetch_due(self, now: datetime, limit: int) -> List[QueuedEmail]:
        """Pending rows scheduled at or before ``now``, oldest first, at most ``limit``."""
        try:
            stmt = (
                select(EmailQueueModel)
                .where(
                    EmailQueueModel.status == QueueStatus.PENDING.value,
                    EmailQueueModel.scheduled_for <= format_db_timestamp(now),
                )
                .order_by(EmailQueueModel.scheduled_for.asc(), EmailQueueModel.id.asc())
                .limit(limit)
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error fetching due emails: {e}", exc_info=True)
            raise PersistenceError(f"Failed to fetch due emails: {e}") from e

    def scheduled_times(self, user_id: str, since: datetime) -> List[datetime]:
        """Send times of the user's live first emails (pending, sending, sent) from ``since`` on.

        Follow-ups are excluded: only first emails consume daily capacity.
        """
        try:
            stmt = select(EmailQueueModel.scheduled_for).where(
                EmailQueueModel.user_id == user_id,
                EmailQueueModel.scheduled_for >= format_db_timestamp(since),
                EmailQueueModel.is_follow_up.is_(False),
                EmailQueueModel.status.in_(
                    [QueueStatus.PENDING.value, QueueStatus.SENDING.value, QueueStatus.SENT.value]
                ),
            )
            return [parse_db_timestamp(v) for v in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error reading scheduled times for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to read scheduled times: {e}") from e

    def mark_sending(self, email_id: int) -> bool:
        """Claim a pending row. Returns False if it is no longer pending."""
        return self._transition(
            email_id, QueueStatus.PENDING, status=QueueStatus.SENDING.value
        )

    def mark_sent(self, email_id: int, sent_at: datetime, message_id: Optional[str]) -> bool:
        return self._transition(
            email_id,
            QueueStatus.SENDING,
            status=QueueStatus.SENT.value,
            sent_at=format_db_timestamp(sent_at),
            message_id=message_id,
            error_message=None,
        )

    def schedule_retry(
        self, email_id: int, retry_count: int, next_attempt_at: datetime, error_message: str
    ) -> bool:
        """Put a failed row back to pending for a later attempt."""
        return self._transition(
            email_id,
            QueueStatus.SENDING,
            status=QueueStatus.PENDING.value,
            retry_count=retry_count,
            scheduled_for=format_db_timestamp(next_attempt_at),
            error_message=error_message,
        )

    def mark_failed(self, email_id: int, retry_count: int, error_message: str) -> bool:
        """Dead-letter a row; it will not be attempted again."""
        return self._transition(
            email_id,
            QueueStatus.SENDING,
            status=QueueStatus.FAILED.value,
            retry_count=retry_count,
            error_message=error_message,
        )

    def cancel_pending(self, campaign_id: int, reason: str) -> int:
        """Cancel every pending row of a campaign. Returns the count cancelled."""
        try:
            stmt = (
                update(EmailQueueModel)
                .where(
                    EmailQueueModel.campaign_id == campaign_id,
                    EmailQueueModel.status == QueueStatus.PENDING.value,
                )
                .values(
                    status=QueueStatus.CANCELLED.value,
                    error_message=reason,
                    updated_at=format_db_timestamp(utc_now()),
                )
            )
            result = self.session.execute(stmt)
            self.session.flush()
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error cancelling emails for campaign {campaign_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to cancel emails: {e}") from e

    def release_stale(self, older_than: datetime, error_message: str) -> List[int]:
        """Dead-letter rows stuck in ``sending`` since before ``older_than``.

        Whether such a row was delivered is unknown, so it is never retried.

        Returns:
            Ids of the released rows
        """
        try:
            condition = (
                (EmailQueueModel.status == QueueStatus.SENDING.value)
                & (EmailQueueModel.updated_at < format_db_timestamp(older_than))
            )
            ids = list(self.session.execute(select(EmailQueueModel.id).where(condition)).scalars())
            if not ids:
                return []

            stmt = (
                update(EmailQueueModel)
                .where(EmailQueueModel.id.in_(ids), condition)
                .values(
                    status=QueueStatus.FAILED.value,
                    error_message=error_message,
                    updated_at=format_db_timestamp(utc_now()),
                )
            )
            self.session.execute(stmt)
            self.session.flush()
            return ids
        except SQLAlchemyError as e:
            logger.error(f"Error releasing stale claims: {e}", exc_info=True)
            raise PersistenceError(f"Failed to release stale claims: {e}") from e

    def count_by_status(
        self, user_id: Optional[str] = None, campaign_id: Optional[int] = None
    ) -> Dict[str, int]:
        """Row counts keyed by status value; every status is present."""
        try:
            stmt = select(EmailQueueModel.status, func.count(EmailQueueModel.id)).group_by(
                EmailQueueModel.status
            )
            if user_id is not None:
                stmt = stmt.where(EmailQueueModel.user_id == user_id)
            if campaign_id is not None:
                stmt = stmt.where(EmailQueueModel.campaign_id == campaign_id)

            counts = {status.value: 0 for status in QueueStatus}
            for status, count in self.session.execute(stmt).all():
                counts[status] = count
            return counts
        except SQLAlchemyError as e:
            logger.error(f"Error counting queue rows: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count queue rows: {e}") from e

    def _transition(self, email_id: int, expected: QueueStatus, **values: Any) -> bool:
        try:
            values["updated_at"] = format_db_timestamp(utc_now())
            stmt = (
                update(EmailQueueModel)
                .where(EmailQueueModel.id == email_id, EmailQueueModel.status == expected.value)
                .values(**values)
            )
            result = self.session.execute(stmt)
            self.session.flush()
            return result.rowcount == 1
        except SQLAlchemyError as e:
            logger.error(f"Error updating queued email {email_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update queued email: {e}") from e


class EmailLogRepository:
    """Repository for the campaign audit log."""

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        user_id: str,
        event_type: LogEvent,
        message: str,
        campaign_id: Optional[int] = None,
        email_queue_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> EmailLogEntry:
        """Append a log row."""
        entry = EmailLogEntry(
            user_id=user_id,
            campaign_id=campaign_id,
            email_queue_id=email_queue_id,
            event_type=event_type,
            message=message,
            details=details or {},
            created_at=utc_now(),
        )
        try:
            model = EmailLogModel.from_domain(entry)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error recording {event_type.value} log row: {e}", exc_info=True)
            raise PersistenceError(f"Failed to record email log: {e}") from e

    def list_for_campaign(self, campaign_id: int) -> List[EmailLogEntry]:
        """Log rows for a campaign, oldest first."""
        try:
            stmt = (
                select(EmailLogModel)
                .where(EmailLogModel.campaign_id == campaign_id)
                .order_by(EmailLogModel.id.asc())
            )
            return [m.to_domain() for m in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing log for campaign {campaign_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list email log: {e}") from e
