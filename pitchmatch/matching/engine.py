"""Industry matching engine pairing contacts with journalist opportunities.

This module implements the matching pass that:
1. Drops incomplete contacts (no email or first name)
2. Buckets contacts without an industry
3. Pairs every remaining contact with each opportunity sharing its industry
4. Buckets contacts whose industry no opportunity shares

The pass is pure: no I/O and no mutation of its inputs.
"""

import logging
from typing import Optional, Sequence

from pitchmatch.domain.models import Contact, Opportunity, Template

from .models import ContactSummary, EmailStep, MatchedPair, MatchOutcome, OpportunitySummary
from .policy import ExactIndustryMatcher, IndustryMatcher

logger = logging.getLogger(__name__)


class CampaignMatcher:
    """Pairs contacts with opportunities by industry.

    Callers pass opportunities already filtered to active ones and templates
    already filtered to enabled ones and sorted by ``template_number``.
    """

    def __init__(
        self,
        industry_matcher: Optional[IndustryMatcher] = None,
        logger_instance: logging.Logger = None,
    ):
        """Initialize CampaignMatcher.

        Args:
            industry_matcher: Industry comparison policy (defaults to exact matching)
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.industry_matcher = industry_matcher or ExactIndustryMatcher()
        self.logger = logger_instance or logger

    def match(
        self,
        contacts: Sequence[Contact],
        opportunities: Sequence[Opportunity],
        templates: Sequence[Template],
    ) -> MatchOutcome:
        """Run one matching pass.

        Pairs are emitted in contact input order, then in opportunity input
        order. A contact matching K opportunities yields K pairs, each carrying
        the same email sequence.

        Args:
            contacts: Contacts to consider
            opportunities: Active opportunities
            templates: Enabled templates, sorted by number

        Returns:
            MatchOutcome with pairs and per-reason buckets
        """
        outcome = MatchOutcome()
        emails = [EmailStep.from_template(t) for t in templates]

        # Canonical keys once per opportunity; blank industries never match
        keyed = [
            (self.industry_matcher.canonical(opp.industry), opp) for opp in opportunities
        ]

        for contact in contacts:
            if not _is_complete(contact):
                outcome.excluded.append(contact)
                continue

            contact_key = self.industry_matcher.canonical(contact.industry)
            if contact_key is None:
                outcome.no_industry.append(contact)
                continue

            matches = [opp for key, opp in keyed if key is not None and key == contact_key]
            if not matches:
                outcome.no_match.append(contact)
                continue

            summary = ContactSummary.from_contact(contact)
            for opp in matches:
                outcome.pairs.append(
                    MatchedPair(
                        contact=summary,
                        opportunity=OpportunitySummary.from_opportunity(opp),
                        emails=list(emails),
                    )
                )

        self.logger.debug(
            f"Matched {len(outcome.matched_contact_ids)} contacts into {outcome.total_pairs} pairs",
            extra={
                "event": "matching.completed",
                "policy": self.industry_matcher.name,
                "contacts": len(contacts),
                "opportunities": len(opportunities),
                "pairs": outcome.total_pairs,
                "no_industry": len(outcome.no_industry),
                "no_match": len(outcome.no_match),
                "excluded": len(outcome.excluded),
            },
        )
        return outcome


def _is_complete(contact: Contact) -> bool:
    return bool((contact.email or "").strip()) and bool((contact.first_name or "").strip())


def match(
    contacts: Sequence[Contact],
    opportunities: Sequence[Opportunity],
    templates: Sequence[Template],
    industry_matcher: Optional[IndustryMatcher] = None,
) -> MatchOutcome:
    """Run a matching pass with a throwaway ``CampaignMatcher``."""
    return CampaignMatcher(industry_matcher).match(contacts, opportunities, templates)
