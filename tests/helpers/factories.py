"""Builders for domain objects and seeded databases used across tests."""

from datetime import date
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from pitchmatch.domain.models import Campaign, Contact, LeadPool, Opportunity, Template
from pitchmatch.persistence import (
    CampaignRepository,
    ContactRepository,
    OpportunityRepository,
    PoolRepository,
    TemplateRepository,
)

USER_ID = "user-1"


def make_contact(
    id: Optional[int] = None,
    industry: Optional[str] = "Tech",
    email: str = "jane@example.com",
    first_name: Optional[str] = "Jane",
    user_id: str = USER_ID,
    **kwargs,
) -> Contact:
    return Contact(
        id=id,
        user_id=user_id,
        email=email,
        first_name=first_name,
        industry=industry,
        **kwargs,
    )


def make_opportunity(
    id: Optional[int] = None,
    industry: Optional[str] = "Tech",
    journalist_name: str = "Sam Reporter",
    user_id: str = USER_ID,
    **kwargs,
) -> Opportunity:
    kwargs.setdefault("publication", "The Daily")
    kwargs.setdefault("subject", "AI in small business")
    return Opportunity(
        id=id,
        user_id=user_id,
        journalist_name=journalist_name,
        industry=industry,
        **kwargs,
    )


def make_template(number: int = 1, user_id: str = USER_ID, **kwargs) -> Template:
    kwargs.setdefault("subject", f"Step {number} for {{{{ first_name }}}}")
    kwargs.setdefault("body", f"Hi {{{{ first_name }}}}, message {number}.")
    return Template(user_id=user_id, template_number=number, **kwargs)


def seed_campaign(
    session: Session,
    contact_industries: Sequence[Optional[str]] = ("Tech",),
    opportunity_industries: Sequence[Optional[str]] = ("Tech",),
    template_numbers: Sequence[int] = (1,),
    user_id: str = USER_ID,
) -> dict:
    """Insert contacts, leads, templates and a draft campaign for one user."""
    contacts = [
        ContactRepository(session).create(
            make_contact(
                industry=industry,
                email=f"contact{i}@example.com",
                first_name=f"Contact{i}",
                user_id=user_id,
            )
        )
        for i, industry in enumerate(contact_industries)
    ]
    opportunities = [
        OpportunityRepository(session).create(
            make_opportunity(
                industry=industry,
                journalist_name=f"Journalist {i}",
                user_id=user_id,
                deadline=date(2026, 3, 1),
            )
        )
        for i, industry in enumerate(opportunity_industries)
    ]
    templates = [
        TemplateRepository(session).create(make_template(n, user_id=user_id))
        for n in template_numbers
    ]
    campaign = CampaignRepository(session).create(Campaign(user_id=user_id, name="Launch"))
    return {
        "contacts": contacts,
        "opportunities": opportunities,
        "templates": templates,
        "campaign": campaign,
    }


def make_pool(session: Session, contact_ids: Sequence[int], name: str = "Pool", user_id: str = USER_ID) -> LeadPool:
    repo = PoolRepository(session)
    pool = repo.create(LeadPool(user_id=user_id, name=name))
    repo.add_contacts(user_id, pool.id, contact_ids)
    return pool
