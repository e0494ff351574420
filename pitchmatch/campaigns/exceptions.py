"""Exceptions raised by campaign orchestration.

``PreconditionMissingError`` covers the cases that need user action (add
templates, leads or contacts) and are never retried automatically.
"""


class CampaignError(Exception):
    """Base exception for campaign operations."""

    pass


class PreconditionMissingError(CampaignError):
    """Raised when data a campaign needs is missing or invalid."""

    pass


class CampaignNotFoundError(PreconditionMissingError):
    """The campaign does not exist or belongs to another user."""

    def __init__(self, campaign_id: int):
        super().__init__("Campaign not found")
        self.campaign_id = campaign_id


class NoEnabledTemplatesError(PreconditionMissingError):
    """The user has no enabled email templates."""

    def __init__(self):
        super().__init__("No enabled email templates found")


class NoActiveOpportunitiesError(PreconditionMissingError):
    """The user has no active journalist leads."""

    def __init__(self):
        super().__init__("No active journalist leads found")


class NoEligibleContactsError(PreconditionMissingError):
    """The contact scope for a campaign is empty."""

    def __init__(self, message: str = "No contacts found for this campaign"):
        super().__init__(message)


class InvalidPoolSelectionError(PreconditionMissingError):
    """A pool selection is empty or names pools the user does not own."""

    pass


class CampaignAlreadyQueuedError(CampaignError):
    """The campaign already has queued emails and must be stopped first."""

    def __init__(self, campaign_id: int):
        super().__init__("Campaign already has queued emails. Stop campaign first.")
        self.campaign_id = campaign_id


class TemplateRenderError(CampaignError):
    """A user-authored subject or body could not be rendered."""

    pass
