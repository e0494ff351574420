"""Industry comparison strategies.

The matcher never compares industry strings itself; it asks an
``IndustryMatcher``. The only built-in policy is exact matching after
trimming and case folding. Fuzzier policies (synonyms, edit distance) plug in
by registering another subclass, leaving the matching loop untouched.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Type


class IndustryMatcher(ABC):
    """Decides whether a contact industry and an opportunity industry agree."""

    name: str = ""

    @abstractmethod
    def canonical(self, industry: Optional[str]) -> Optional[str]:
        """Return the comparison key for ``industry``, or None when it is blank."""

    def matches(self, contact_industry: Optional[str], opportunity_industry: Optional[str]) -> bool:
        """True when both industries are set and share a comparison key."""
        left = self.canonical(contact_industry)
        right = self.canonical(opportunity_industry)
        return left is not None and right is not None and left == right


class ExactIndustryMatcher(IndustryMatcher):
    """Case-insensitive exact equality after trimming whitespace.

    ``" Tech "`` equals ``"tech"``; ``"Tech"`` does not equal ``"Technology"``
    and ``"Retailer"`` does not equal ``"Retail"``.
    """

    name = "exact"

    def canonical(self, industry: Optional[str]) -> Optional[str]:
        if industry is None:
            return None
        key = industry.strip().lower()
        return key or None


INDUSTRY_MATCHERS: Dict[str, Type[IndustryMatcher]] = {
    ExactIndustryMatcher.name: ExactIndustryMatcher,
}


def get_industry_matcher(name: str = "exact") -> IndustryMatcher:
    """Instantiate the policy registered under ``name``.

    Raises:
        ValueError: If no policy is registered under that name
    """
    key = (name or "").strip().lower()
    try:
        return INDUSTRY_MATCHERS[key]()
    except KeyError:
        raise ValueError(
            f"Unknown industry matching policy: '{name}'. "
            f"Available: {', '.join(sorted(INDUSTRY_MATCHERS))}"
        ) from None
