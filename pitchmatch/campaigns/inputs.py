"""Loading the data a matching pass needs for one campaign."""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from pitchmatch.domain.models import AuthContext, Campaign, Contact, Opportunity, Template
from pitchmatch.persistence import (
    CampaignRepository,
    ContactRepository,
    OpportunityRepository,
    PoolRepository,
    TemplateRepository,
)

from .exceptions import (
    CampaignNotFoundError,
    InvalidPoolSelectionError,
    NoActiveOpportunitiesError,
    NoEligibleContactsError,
    NoEnabledTemplatesError,
)


@dataclass
class CampaignInputs:
    campaign: Campaign
    templates: List[Template]
    opportunities: List[Opportunity]
    contacts: List[Contact]
    pool_ids: List[int]


def load_campaign_inputs(
    session: Session,
    auth: AuthContext,
    campaign_id: int,
    pool_ids: Optional[Sequence[int]] = None,
) -> CampaignInputs:
    """Load campaign, enabled templates, active leads and scoped contacts.

    Contacts come from ``pool_ids`` when given, else from the campaign's saved
    pools, else from all of the user's contacts.

    Raises:
        CampaignNotFoundError: Campaign missing or owned by another user
        NoEnabledTemplatesError: No enabled templates
        NoActiveOpportunitiesError: No active journalist leads
        InvalidPoolSelectionError: A requested pool is not the user's
        NoEligibleContactsError: The contact scope is empty
    """
    campaign = CampaignRepository(session).get(auth.user_id, campaign_id)
    if campaign is None:
        raise CampaignNotFoundError(campaign_id)

    templates = TemplateRepository(session).list_enabled(auth.user_id)
    if not templates:
        raise NoEnabledTemplatesError()

    opportunities = OpportunityRepository(session).list_active(auth.user_id)
    if not opportunities:
        raise NoActiveOpportunitiesError()

    scope = list(pool_ids) if pool_ids else list(campaign.pool_ids)
    contacts_repo = ContactRepository(session)
    if scope:
        owned = PoolRepository(session).owned_ids(auth.user_id, scope)
        unknown = sorted(set(scope) - owned)
        if unknown:
            raise InvalidPoolSelectionError(f"Lead pools not found: {unknown}")
        contacts = contacts_repo.list_for_pools(auth.user_id, scope)
        if not contacts:
            raise NoEligibleContactsError("No contacts found in the selected pools")
    else:
        contacts = contacts_repo.list_for_user(auth.user_id)
        if not contacts:
            raise NoEligibleContactsError()

    return CampaignInputs(
        campaign=campaign,
        templates=templates,
        opportunities=opportunities,
        contacts=contacts,
        pool_ids=scope,
    )
