"""Domain models for PitchMatch."""

from .models import (
    AuthContext,
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

__all__ = [
    "AuthContext",
    "Contact",
    "Opportunity",
    "Template",
    "LeadPool",
    "Campaign",
    "CampaignStatus",
    "QueuedEmail",
    "QueueStatus",
    "EmailLogEntry",
    "LogEvent",
]
