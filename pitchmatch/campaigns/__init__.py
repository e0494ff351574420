"""Campaign orchestration around the matching engine.

This module provides:
- PreviewService / build_preview: Matched-pair sample and summary counts
- CampaignService: Create, select pools, link contacts, start and stop
- SlotAllocator / follow_up_date: Send-time calculation
- MessageRenderer: Sandboxed Jinja2 rendering of user templates
"""

from .exceptions import (
    CampaignAlreadyQueuedError,
    CampaignError,
    CampaignNotFoundError,
    InvalidPoolSelectionError,
    NoActiveOpportunitiesError,
    NoEligibleContactsError,
    NoEnabledTemplatesError,
    PreconditionMissingError,
    TemplateRenderError,
)
from .preview import CampaignPreview, PreviewService, PreviewWarnings, build_preview
from .scheduling import SlotAllocator, follow_up_date, next_business_day
from .service import (
    CampaignService,
    StartCampaignOptions,
    StartCampaignResult,
    StopCampaignResult,
)
from .templating import MessageRenderer

__all__ = [
    "CampaignError",
    "PreconditionMissingError",
    "CampaignNotFoundError",
    "NoEnabledTemplatesError",
    "NoActiveOpportunitiesError",
    "NoEligibleContactsError",
    "InvalidPoolSelectionError",
    "CampaignAlreadyQueuedError",
    "TemplateRenderError",
    "CampaignPreview",
    "PreviewWarnings",
    "PreviewService",
    "build_preview",
    "SlotAllocator",
    "follow_up_date",
    "next_business_day",
    "CampaignService",
    "StartCampaignOptions",
    "StartCampaignResult",
    "StopCampaignResult",
    "MessageRenderer",
]
