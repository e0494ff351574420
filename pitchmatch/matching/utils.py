"""Helpers for presenting matching inputs to the UI."""

from typing import Dict, List, Sequence

from pitchmatch.domain.models import Opportunity


def available_industries(opportunities: Sequence[Opportunity]) -> List[str]:
    """Distinct industries among the given opportunities, for display.

    Values are trimmed and keep their case. Spellings differing only by case
    collapse to the first one seen. Blank industries are ignored.

    Args:
        opportunities: Active opportunities, in loader order

    Returns:
        Industries sorted lexicographically
    """
    seen: Dict[str, str] = {}
    for opp in opportunities:
        industry = (opp.industry or "").strip()
        if not industry:
            continue
        seen.setdefault(industry.lower(), industry)
    return sorted(seen.values())
