"""Campaign creation, pool selection, lead linking and preview."""

from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pitchmatch.campaigns import CampaignService, PreviewService
from pitchmatch.config.models import AppConfig
from pitchmatch.domain.models import AuthContext
from pitchmatch.matching import CampaignMatcher, get_industry_matcher

from .deps import get_app_config, get_auth_context, get_db_session
from .schemas import CampaignCreate, CampaignLeads, PoolSelection

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])

Auth = Annotated[AuthContext, Depends(get_auth_context)]
DbSession = Annotated[Session, Depends(get_db_session)]
Config = Annotated[AppConfig, Depends(get_app_config)]


def build_matcher(config: AppConfig) -> CampaignMatcher:
    return CampaignMatcher(industry_matcher=get_industry_matcher(config.matching.policy))


def campaign_service(session: DbSession, config: Config) -> CampaignService:
    return CampaignService(session, config=config.campaign, matcher=build_matcher(config))


Campaigns = Annotated[CampaignService, Depends(campaign_service)]


def parse_pool_ids(raw: Optional[str]) -> Optional[List[int]]:
    """Parse ``"1,2,3"``. Blank means no explicit selection."""
    if raw is None or not raw.strip():
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="pool_ids must be a comma-separated list of integers",
        )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_campaign(body: CampaignCreate, auth: Auth, service: Campaigns) -> Dict[str, Any]:
    campaign = service.create_campaign(auth, body.name, body.pool_ids)
    return {"success": True, "campaign": campaign.model_dump(mode="json")}


@router.post("/{campaign_id}/pools")
def save_campaign_pools(
    campaign_id: int, body: PoolSelection, auth: Auth, service: Campaigns
) -> Dict[str, Any]:
    campaign = service.save_pools(auth, campaign_id, body.pool_ids)
    return {"success": True, "campaignId": campaign.id, "poolIds": campaign.pool_ids}


@router.post("/{campaign_id}/add-leads")
def add_campaign_leads(
    campaign_id: int, body: CampaignLeads, auth: Auth, service: Campaigns
) -> Dict[str, Any]:
    added = service.add_contacts(auth, campaign_id, body.lead_ids)
    return {"success": True, "leadsAdded": added, "message": f"{added} leads added to campaign"}


@router.get("/{campaign_id}/preview")
def preview_campaign(
    campaign_id: int,
    auth: Auth,
    session: DbSession,
    config: Config,
    pool_ids: Optional[str] = Query(None),
) -> Dict[str, Any]:
    service = PreviewService(
        session,
        matcher=build_matcher(config),
        sample_size=config.matching.preview_sample_size,
    )
    return service.preview(auth, campaign_id, parse_pool_ids(pool_ids)).to_response()
