"""Industry matching engine pairing contacts with journalist opportunities.

This module provides:
- IndustryMatcher: Pluggable industry comparison policy (exact by default)
- CampaignMatcher: Service producing matched pairs and unmatched buckets
- MatchOutcome / MatchedPair: Results of a matching pass
- available_industries: Distinct opportunity industries for display
"""

from .engine import CampaignMatcher, match
from .models import (
    ContactSummary,
    EmailStep,
    MatchedPair,
    MatchOutcome,
    OpportunitySummary,
)
from .policy import (
    INDUSTRY_MATCHERS,
    ExactIndustryMatcher,
    IndustryMatcher,
    get_industry_matcher,
)
from .utils import available_industries

__all__ = [
    "CampaignMatcher",
    "match",
    "ContactSummary",
    "OpportunitySummary",
    "EmailStep",
    "MatchedPair",
    "MatchOutcome",
    "IndustryMatcher",
    "ExactIndustryMatcher",
    "INDUSTRY_MATCHERS",
    "get_industry_matcher",
    "available_industries",
]
