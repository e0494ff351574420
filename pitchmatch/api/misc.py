"""Health check and email verification."""

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from pitchmatch.domain.models import AuthContext
from pitchmatch.sender import queue_stats
from pitchmatch.utils.timestamps import format_db_timestamp, utc_now
from pitchmatch.verification import NeverBounceClient

from .deps import get_auth_context, get_db_session
from .schemas import VerifyRequest

router = APIRouter(prefix="/api", tags=["misc"])


@router.get("/health")
def health(session: Annotated[Session, Depends(get_db_session)]) -> Dict[str, Any]:
    return {
        "ok": True,
        "status": "healthy",
        "timestamp": format_db_timestamp(utc_now()),
        "queue_stats": queue_stats(session),
    }


def get_verification_client(request: Request) -> NeverBounceClient:
    client = getattr(request.app.state, "verification_client", None)
    if client is None:
        client = NeverBounceClient(
            request.app.state.env_config.neverbounce_api_key,
            timeout=request.app.state.app_config.api.verify_timeout,
        )
        request.app.state.verification_client = client
    return client


@router.post("/verify")
def verify_emails(
    body: VerifyRequest,
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    client: Annotated[NeverBounceClient, Depends(get_verification_client)],
) -> Dict[str, Any]:
    emails = [e.strip() for e in body.emails if e and e.strip()]
    if not emails:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="emails[] required")
    return {"results": client.verify_many(emails)}
