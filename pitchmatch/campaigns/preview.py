"""Campaign preview: a bounded sample of matched pairs plus summary counts."""

from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from pitchmatch.domain.models import AuthContext, Contact, Template
from pitchmatch.logging import get_logger, log_context
from pitchmatch.matching import CampaignMatcher, MatchedPair, MatchOutcome, available_industries

from .inputs import load_campaign_inputs

logger = get_logger(__name__, component="campaigns")

DEFAULT_SAMPLE_SIZE = 3


class PreviewWarnings(BaseModel):
    """Unmatched contacts, reported only when there are any."""

    model_config = ConfigDict(populate_by_name=True)

    contacts_without_industry: Optional[List[Contact]] = Field(
        None, alias="contactsWithoutIndustry"
    )
    contacts_with_non_matching_industry: Optional[List[Contact]] = Field(
        None, alias="contactsWithNonMatchingIndustry"
    )


class CampaignPreview(BaseModel):
    """Preview payload returned to the campaign UI.

    ``total_emails`` is ``total_matches * len(templates)``. Each pair already
    carries the full template sequence, so this counts per pair, not per
    contact.
    """

    model_config = ConfigDict(populate_by_name=True)

    previews: List[MatchedPair]
    total_matches: int = Field(..., alias="totalMatches")
    total_emails: int = Field(..., alias="totalEmails")
    available_industries: List[str] = Field(default_factory=list, alias="availableIndustries")
    warnings: PreviewWarnings = Field(default_factory=PreviewWarnings)

    def to_response(self) -> Dict[str, Any]:
        """JSON body with camelCase keys; empty warning lists are omitted."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"warnings"})
        warnings: Dict[str, Any] = {}
        if self.warnings.contacts_without_industry:
            warnings["contactsWithoutIndustry"] = [
                c.model_dump(mode="json") for c in self.warnings.contacts_without_industry
            ]
        if self.warnings.contacts_with_non_matching_industry:
            warnings["contactsWithNonMatchingIndustry"] = [
                c.model_dump(mode="json")
                for c in self.warnings.contacts_with_non_matching_industry
            ]
        data["warnings"] = warnings
        return data


def build_preview(
    outcome: MatchOutcome,
    templates: Sequence[Template],
    industries: Sequence[str],
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> CampaignPreview:
    """Package a matching outcome for display."""
    return CampaignPreview(
        previews=outcome.pairs[:sample_size],
        total_matches=outcome.total_pairs,
        total_emails=outcome.total_pairs * len(templates),
        available_industries=list(industries),
        warnings=PreviewWarnings(
            contacts_without_industry=list(outcome.no_industry) or None,
            contacts_with_non_matching_industry=list(outcome.no_match) or None,
        ),
    )


class PreviewService:
    """Loads a campaign's inputs, matches them and formats the preview."""

    def __init__(
        self,
        session: Session,
        matcher: Optional[CampaignMatcher] = None,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
    ):
        self.session = session
        self.matcher = matcher or CampaignMatcher()
        self.sample_size = sample_size

    def preview(
        self, auth: AuthContext, campaign_id: int, pool_ids: Optional[Sequence[int]] = None
    ) -> CampaignPreview:
        """Build the preview for one of the user's campaigns.

        Raises:
            PreconditionMissingError: Campaign, templates, leads or contacts missing
            PersistenceError: If the store fails
        """
        with log_context(user_id=auth.user_id, campaign_id=campaign_id):
            inputs = load_campaign_inputs(self.session, auth, campaign_id, pool_ids)
            outcome = self.matcher.match(inputs.contacts, inputs.opportunities, inputs.templates)
            preview = build_preview(
                outcome,
                inputs.templates,
                available_industries(inputs.opportunities),
                sample_size=self.sample_size,
            )

            logger.info(
                f"Preview generated: {preview.total_matches} matches",
                extra={
                    "event": "preview.generated",
                    "total_matches": preview.total_matches,
                    "total_emails": preview.total_emails,
                    "no_industry": len(outcome.no_industry),
                    "no_match": len(outcome.no_match),
                    "excluded": len(outcome.excluded),
                },
            )
            return preview
