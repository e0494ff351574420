"""Core domain models for contacts, opportunities, templates and the send queue.

This module defines the data structures used throughout the application:
- Contact: a prospect owned by a user, with an optional free-text industry
- Opportunity: a journalist lead requesting contributors in an industry
- Template: a numbered outreach message, enabled or not
- LeadPool: a named subset of a user's contacts
- Campaign: a drip campaign and the pools it draws contacts from
- QueuedEmail: one scheduled send and its delivery state
- EmailLogEntry: audit trail for campaign and delivery events
- AuthContext: the authenticated caller of a request
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from pitchmatch.utils.timestamps import ensure_utc


class CampaignStatus(str, Enum):
    """Lifecycle of a campaign."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class QueueStatus(str, Enum):
    """Delivery state of a queued email.

    pending -> sending -> sent | failed | pending (retry). Stopping a campaign
    moves pending rows to cancelled. sent, failed and cancelled are terminal.
    """

    PENDING = "pending"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (QueueStatus.SENT, QueueStatus.FAILED, QueueStatus.CANCELLED)


class LogEvent(str, Enum):
    """Event types written to the email log."""

    SCHEDULED = "scheduled"
    SENT = "sent"
    RETRY_SCHEDULED = "retry_scheduled"
    FAILED = "failed"
    CANCELLED = "cancelled"


def _strip_optional(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return v.strip()


class Contact(BaseModel):
    """A prospect a user wants to pitch.

    ``email`` and ``first_name`` may be blank on imported rows; such contacts
    are skipped by the matcher rather than rejected here.
    """

    id: Optional[int] = None
    user_id: str
    email: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    industry: Optional[str] = None
    campaign_id: Optional[int] = None

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("first_name", "last_name", "company", "title")
    @classmethod
    def strip_names(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class Opportunity(BaseModel):
    """A journalist lead. Only active leads take part in matching."""

    id: Optional[int] = None
    user_id: str
    journalist_name: str = Field(..., min_length=1)
    publication: Optional[str] = None
    industry: Optional[str] = None
    subject: Optional[str] = Field(None, description="Topic the journalist is covering")
    notes: Optional[str] = None
    linkedin_category: Optional[str] = None
    is_active: bool = True
    deadline: Optional[date] = None


class Template(BaseModel):
    """A numbered outreach message. Number 1 is the first email."""

    id: Optional[int] = None
    user_id: str
    template_number: int = Field(..., ge=1)
    subject: str
    body: str
    is_enabled: bool = True
    sender_name: Optional[str] = None
    sender_email: Optional[str] = None
    description: Optional[str] = None


class LeadPool(BaseModel):
    """A named subset of a user's contacts."""

    id: Optional[int] = None
    user_id: str
    name: str = Field(..., min_length=1)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Pool name cannot be empty or whitespace-only")
        return stripped


class Campaign(BaseModel):
    """A drip campaign."""

    id: Optional[int] = None
    user_id: str
    name: str = Field(..., min_length=1)
    status: CampaignStatus = CampaignStatus.DRAFT
    pool_ids: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QueuedEmail(BaseModel):
    """One scheduled send."""

    id: Optional[int] = None
    user_id: str
    campaign_id: int
    contact_id: Optional[int] = None
    opportunity_id: Optional[int] = None
    recipient_email: str
    subject: str
    body: str
    scheduled_for: datetime
    status: QueueStatus = QueueStatus.PENDING
    retry_count: int = Field(0, ge=0)
    is_follow_up: bool = False
    follow_up_number: int = Field(1, ge=1)
    parent_email_id: Optional[int] = None
    sent_at: Optional[datetime] = None
    message_id: Optional[str] = None
    error_message: Optional[str] = None

    @field_validator("scheduled_for", "sent_at")
    @classmethod
    def normalize_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class EmailLogEntry(BaseModel):
    """Audit row for campaign and delivery events."""

    id: Optional[int] = None
    user_id: str
    campaign_id: Optional[int] = None
    email_queue_id: Optional[int] = None
    event_type: LogEvent
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class AuthContext(BaseModel):
    """The caller of a request, resolved once at the HTTP boundary."""

    model_config = {"frozen": True}

    user_id: str = Field(..., min_length=1)
    email: Optional[str] = None
