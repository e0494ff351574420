"""Journalist leads and email templates."""

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pitchmatch.domain.models import AuthContext, Opportunity, Template
from pitchmatch.persistence import OpportunityRepository, RecordNotFoundError, TemplateRepository

from .deps import get_auth_context, get_db_session
from .schemas import OpportunityCreate, TemplateCreate, TemplateToggle

router = APIRouter(prefix="/api", tags=["library"])

Auth = Annotated[AuthContext, Depends(get_auth_context)]
DbSession = Annotated[Session, Depends(get_db_session)]


@router.post("/journalist-leads", status_code=status.HTTP_201_CREATED)
def create_journalist_lead(
    body: OpportunityCreate, auth: Auth, session: DbSession
) -> Dict[str, Any]:
    lead = OpportunityRepository(session).create(
        Opportunity(user_id=auth.user_id, **body.model_dump())
    )
    return lead.model_dump(mode="json")


@router.delete("/journalist-leads")
def delete_journalist_lead(
    auth: Auth, session: DbSession, lead_id: Optional[int] = Query(None, alias="id")
) -> Dict[str, Any]:
    if lead_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Lead ID required")

    if not OpportunityRepository(session).delete(auth.user_id, lead_id):
        raise RecordNotFoundError(f"Journalist lead {lead_id} not found")
    return {"success": True}


@router.post("/email-templates", status_code=status.HTTP_201_CREATED)
def create_email_template(body: TemplateCreate, auth: Auth, session: DbSession) -> Dict[str, Any]:
    template = TemplateRepository(session).create(
        Template(user_id=auth.user_id, **body.model_dump())
    )
    return template.model_dump(mode="json")


@router.patch("/templates/toggle")
def toggle_template(body: TemplateToggle, auth: Auth, session: DbSession) -> Dict[str, Any]:
    template = TemplateRepository(session).set_enabled(
        auth.user_id, body.template_number, body.enabled
    )
    return {
        "success": True,
        "template": template.model_dump(mode="json"),
        "message": f"Template {'enabled' if body.enabled else 'disabled'} successfully",
    }
