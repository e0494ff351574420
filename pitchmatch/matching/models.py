"""Data models for the matching engine.

Summaries are trimmed, serialisable views of the domain objects so a
preview can be returned straight to the API without leaking owner ids or
internal flags.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from pitchmatch.domain.models import Contact, Opportunity, Template


@dataclass(frozen=True)
class ContactSummary:
    id: Optional[int]
    email: str
    first_name: Optional[str]
    last_name: Optional[str]
    company: Optional[str]
    industry: Optional[str]

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactSummary":
        return cls(
            id=contact.id,
            email=contact.email,
            first_name=contact.first_name,
            last_name=contact.last_name,
            company=contact.company,
            industry=contact.industry,
        )


@dataclass(frozen=True)
class OpportunitySummary:
    id: Optional[int]
    journalist_name: str
    publication: Optional[str]
    industry: Optional[str]
    subject: Optional[str]
    deadline: Optional[date]

    @classmethod
    def from_opportunity(cls, opportunity: Opportunity) -> "OpportunitySummary":
        return cls(
            id=opportunity.id,
            journalist_name=opportunity.journalist_name,
            publication=opportunity.publication,
            industry=opportunity.industry,
            subject=opportunity.subject,
            deadline=opportunity.deadline,
        )


@dataclass(frozen=True)
class EmailStep:
    """One template in a drip sequence, in send order."""

    number: int
    subject: str
    body: str

    @classmethod
    def from_template(cls, template: Template) -> "EmailStep":
        return cls(number=template.template_number, subject=template.subject, body=template.body)


@dataclass(frozen=True)
class MatchedPair:
    """One contact paired with one opportunity sharing its industry.

    Every pair produced by one matching pass carries the same ``emails``
    sequence.
    """

    contact: ContactSummary
    opportunity: OpportunitySummary
    emails: List[EmailStep]


@dataclass
class MatchOutcome:
    """Result of a matching pass.

    Each input contact lands in exactly one of: ``excluded`` (missing email or
    first name), ``no_industry``, ``no_match``, or one or more ``pairs``.

    Attributes:
        pairs: Matched pairs in contact order, then opportunity order
        no_industry: Eligible contacts with a null or blank industry
        no_match: Eligible contacts whose industry no active opportunity shares
        excluded: Incomplete contacts that were not considered at all
    """

    pairs: List[MatchedPair] = field(default_factory=list)
    no_industry: List[Contact] = field(default_factory=list)
    no_match: List[Contact] = field(default_factory=list)
    excluded: List[Contact] = field(default_factory=list)

    @property
    def total_pairs(self) -> int:
        return len(self.pairs)

    @property
    def matched_contact_ids(self) -> List[Optional[int]]:
        """Distinct ids of contacts with at least one pair, in first-seen order."""
        return list(dict.fromkeys(pair.contact.id for pair in self.pairs))

    @property
    def unmatched_contacts(self) -> List[Contact]:
        """Eligible contacts that produced no pair."""
        return self.no_industry + self.no_match
