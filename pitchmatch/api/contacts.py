"""Contacts and lead pools."""

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pitchmatch.domain.models import AuthContext, Contact, LeadPool
from pitchmatch.persistence import ContactRepository, PoolRepository

from .deps import get_auth_context, get_db_session
from .schemas import ContactCreate, IndustryUpdate, PoolContacts, PoolCreate

router = APIRouter(prefix="/api", tags=["contacts"])

Auth = Annotated[AuthContext, Depends(get_auth_context)]
DbSession = Annotated[Session, Depends(get_db_session)]


@router.post("/contacts", status_code=status.HTTP_201_CREATED)
def create_contact(body: ContactCreate, auth: Auth, session: DbSession) -> Dict[str, Any]:
    contact = ContactRepository(session).create(
        Contact(user_id=auth.user_id, **body.model_dump())
    )
    return contact.model_dump(mode="json")


@router.post("/contacts/{contact_id}/industry")
def update_contact_industry(
    contact_id: int, body: IndustryUpdate, auth: Auth, session: DbSession
) -> Dict[str, Any]:
    industry = (body.industry or "").strip()
    if not industry:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Industry is required")

    contact = ContactRepository(session).update_industry(auth.user_id, contact_id, industry)
    return {
        "success": True,
        "contact": contact.model_dump(mode="json"),
        "message": f"Industry updated to {industry}",
    }


@router.post("/lead-pools", status_code=status.HTTP_201_CREATED)
def create_pool(body: PoolCreate, auth: Auth, session: DbSession) -> Dict[str, Any]:
    pool = PoolRepository(session).create(
        LeadPool(user_id=auth.user_id, name=body.name, description=body.description)
    )
    return {"success": True, "pool": pool.model_dump(mode="json")}


@router.post("/lead-pools/{pool_id}/contacts")
def add_pool_contacts(
    pool_id: int, body: PoolContacts, auth: Auth, session: DbSession
) -> Dict[str, Any]:
    if not body.contact_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Contact IDs are required"
        )

    added = PoolRepository(session).add_contacts(auth.user_id, pool_id, body.contact_ids)
    return {"success": True, "added": added, "message": f"Added {added} contact(s) to pool"}
