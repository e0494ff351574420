"""Database schema definition and ORM models.

ORM classes mirror the domain models and convert with ``to_domain`` /
``from_domain``. Timestamps are stored as ISO-8601 UTC strings.
"""

import logging

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

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

logger = logging.getLogger(__name__)

Base = declarative_base()


contact_pools = Table(
    "contact_pools",
    Base.metadata,
    Column("contact_id", Integer, ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True),
    Column("pool_id", Integer, ForeignKey("lead_pools.id", ondelete="CASCADE"), primary_key=True),
)


class CampaignModel(Base):
    """ORM model for campaigns table."""

    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default=CampaignStatus.DRAFT.value)
    # Saved pool selection, used when a preview or start names no pools
    pool_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_campaigns_user", "user_id"),)

    def to_domain(self) -> Campaign:
        return Campaign(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            status=CampaignStatus(self.status),
            pool_ids=list(self.pool_ids or []),
            created_at=parse_db_timestamp(self.created_at),
            updated_at=parse_db_timestamp(self.updated_at),
        )

    @classmethod
    def from_domain(cls, campaign: Campaign) -> "CampaignModel":
        now = format_db_timestamp(utc_now())
        return cls(
            id=campaign.id,
            user_id=campaign.user_id,
            name=campaign.name,
            status=campaign.status.value,
            pool_ids=list(campaign.pool_ids),
            created_at=format_db_timestamp(campaign.created_at) or now,
            updated_at=format_db_timestamp(campaign.updated_at) or now,
        )


class ContactModel(Base):
    """ORM model for contacts table."""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, default="")
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    title = Column(String(255), nullable=True)
    industry = Column(String(255), nullable=True)
    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_contacts_user", "user_id"),
        Index("idx_contacts_campaign", "campaign_id"),
    )

    def to_domain(self) -> Contact:
        return Contact(
            id=self.id,
            user_id=self.user_id,
            email=self.email or "",
            first_name=self.first_name,
            last_name=self.last_name,
            company=self.company,
            title=self.title,
            industry=self.industry,
            campaign_id=self.campaign_id,
        )

    @classmethod
    def from_domain(cls, contact: Contact) -> "ContactModel":
        return cls(
            id=contact.id,
            user_id=contact.user_id,
            email=contact.email,
            first_name=contact.first_name,
            last_name=contact.last_name,
            company=contact.company,
            title=contact.title,
            industry=contact.industry,
            campaign_id=contact.campaign_id,
            created_at=format_db_timestamp(utc_now()),
        )


class OpportunityModel(Base):
    """ORM model for journalist_leads table."""

    __tablename__ = "journalist_leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    journalist_name = Column(String(255), nullable=False)
    publication = Column(String(255), nullable=True)
    industry = Column(String(255), nullable=True)
    subject = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    linkedin_category = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    deadline = Column(Date, nullable=True)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_journalist_leads_user_active", "user_id", "is_active"),)

    def to_domain(self) -> Opportunity:
        return Opportunity(
            id=self.id,
            user_id=self.user_id,
            journalist_name=self.journalist_name,
            publication=self.publication,
            industry=self.industry,
            subject=self.subject,
            notes=self.notes,
            linkedin_category=self.linkedin_category,
            is_active=bool(self.is_active),
            deadline=self.deadline,
        )

    @classmethod
    def from_domain(cls, opportunity: Opportunity) -> "OpportunityModel":
        return cls(
            id=opportunity.id,
            user_id=opportunity.user_id,
            journalist_name=opportunity.journalist_name,
            publication=opportunity.publication,
            industry=opportunity.industry,
            subject=opportunity.subject,
            notes=opportunity.notes,
            linkedin_category=opportunity.linkedin_category,
            is_active=opportunity.is_active,
            deadline=opportunity.deadline,
            created_at=format_db_timestamp(utc_now()),
        )


class TemplateModel(Base):
    """ORM model for email_templates table. One row per user and number."""

    __tablename__ = "email_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    template_number = Column(Integer, nullable=False)
    subject = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    is_enabled = Column(Boolean, nullable=False, default=True)
    sender_name = Column(String(255), nullable=True)
    sender_email = Column(String(320), nullable=True)
    description = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "template_number", name="uq_email_templates_user_number"),
    )

    def to_domain(self) -> Template:
        return Template(
            id=self.id,
            user_id=self.user_id,
            template_number=self.template_number,
            subject=self.subject,
            body=self.body,
            is_enabled=bool(self.is_enabled),
            sender_name=self.sender_name,
            sender_email=self.sender_email,
            description=self.description,
        )

    @classmethod
    def from_domain(cls, template: Template) -> "TemplateModel":
        return cls(
            id=template.id,
            user_id=template.user_id,
            template_number=template.template_number,
            subject=template.subject,
            body=template.body,
            is_enabled=template.is_enabled,
            sender_name=template.sender_name,
            sender_email=template.sender_email,
            description=template.description,
        )


class LeadPoolModel(Base):
    """ORM model for lead_pools table."""

    __tablename__ = "lead_pools"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_lead_pools_user", "user_id"),)

    def to_domain(self) -> LeadPool:
        return LeadPool(
            id=self.id, user_id=self.user_id, name=self.name, description=self.description
        )

    @classmethod
    def from_domain(cls, pool: LeadPool) -> "LeadPoolModel":
        return cls(
            id=pool.id,
            user_id=pool.user_id,
            name=pool.name,
            description=pool.description,
            created_at=format_db_timestamp(utc_now()),
        )


class EmailQueueModel(Base):
    """ORM model for email_queue table.

    The sender polls ``(status, scheduled_for)``, hence the composite index.
    """

    __tablename__ = "email_queue"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False)
    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True)
    opportunity_id = Column(
        Integer, ForeignKey("journalist_leads.id", ondelete="SET NULL"), nullable=True
    )
    recipient_email = Column(String(320), nullable=False)
    subject = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    scheduled_for = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default=QueueStatus.PENDING.value)
    retry_count = Column(Integer, nullable=False, default=0)
    is_follow_up = Column(Boolean, nullable=False, default=False)
    follow_up_number = Column(Integer, nullable=False, default=1)
    parent_email_id = Column(
        Integer, ForeignKey("email_queue.id", ondelete="SET NULL"), nullable=True
    )
    sent_at = Column(String(50), nullable=True)
    message_id = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_email_queue_status_scheduled", "status", "scheduled_for"),
        Index("idx_email_queue_campaign", "campaign_id"),
    )

    def to_domain(self) -> QueuedEmail:
        return QueuedEmail(
            id=self.id,
            user_id=self.user_id,
            campaign_id=self.campaign_id,
            contact_id=self.contact_id,
            opportunity_id=self.opportunity_id,
            recipient_email=self.recipient_email,
            subject=self.subject,
            body=self.body,
            scheduled_for=parse_db_timestamp(self.scheduled_for),
            status=QueueStatus(self.status),
            retry_count=self.retry_count or 0,
            is_follow_up=bool(self.is_follow_up),
            follow_up_number=self.follow_up_number or 1,
            parent_email_id=self.parent_email_id,
            sent_at=parse_db_timestamp(self.sent_at),
            message_id=self.message_id,
            error_message=self.error_message,
        )

    @classmethod
    def from_domain(cls, email: QueuedEmail) -> "EmailQueueModel":
        now = format_db_timestamp(utc_now())
        return cls(
            id=email.id,
            user_id=email.user_id,
            campaign_id=email.campaign_id,
            contact_id=email.contact_id,
            opportunity_id=email.opportunity_id,
            recipient_email=email.recipient_email,
            subject=email.subject,
            body=email.body,
            scheduled_for=format_db_timestamp(email.scheduled_for),
            status=email.status.value,
            retry_count=email.retry_count,
            is_follow_up=email.is_follow_up,
            follow_up_number=email.follow_up_number,
            parent_email_id=email.parent_email_id,
            sent_at=format_db_timestamp(email.sent_at),
            message_id=email.message_id,
            error_message=email.error_message,
            created_at=now,
            updated_at=now,
        )


class EmailLogModel(Base):
    """ORM model for email_log table."""

    __tablename__ = "email_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True)
    email_queue_id = Column(
        Integer, ForeignKey("email_queue.id", ondelete="SET NULL"), nullable=True
    )
    event_type = Column(String(30), nullable=False)
    message = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_email_log_campaign", "campaign_id"),)

    def to_domain(self) -> EmailLogEntry:
        return EmailLogEntry(
            id=self.id,
            user_id=self.user_id,
            campaign_id=self.campaign_id,
            email_queue_id=self.email_queue_id,
            event_type=LogEvent(self.event_type),
            message=self.message,
            details=dict(self.details or {}),
            created_at=parse_db_timestamp(self.created_at),
        )

    @classmethod
    def from_domain(cls, entry: EmailLogEntry) -> "EmailLogModel":
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            campaign_id=entry.campaign_id,
            email_queue_id=entry.email_queue_id,
            event_type=entry.event_type.value,
            message=entry.message,
            details=dict(entry.details),
            created_at=format_db_timestamp(entry.created_at or utc_now()),
        )


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes that do not exist yet (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(sorted(tables))}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
