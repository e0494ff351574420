"""Campaign start/stop and the cron-driven send batch."""

from dataclasses import asdict
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, Request

from pitchmatch.campaigns import StartCampaignOptions
from pitchmatch.config.models import AppConfig
from pitchmatch.domain.models import AuthContext
from pitchmatch.sender import BatchSender
from pitchmatch.utils.timestamps import format_db_timestamp

from .campaigns import Campaigns
from .deps import get_app_config, get_auth_context, require_cron_secret
from .schemas import StartCampaignRequest, StopCampaignRequest

router = APIRouter(prefix="/api/email-automation", tags=["email-automation"])

Auth = Annotated[AuthContext, Depends(get_auth_context)]
Config = Annotated[AppConfig, Depends(get_app_config)]


@router.post("/start-campaign")
def start_campaign(
    body: StartCampaignRequest, auth: Auth, config: Config, service: Campaigns
) -> Dict[str, Any]:
    options = StartCampaignOptions.from_config(
        config.campaign,
        max_emails_per_day=body.max_emails_per_day,
        sending_start_hour=body.sending_start_hour,
        sending_end_hour=body.sending_end_hour,
        follow_up_delay_days=body.follow_up_delay_days,
        skip_weekends=body.skip_weekends,
    )
    result = service.start_campaign(auth, body.campaign_id, options, pool_ids=body.pool_ids)
    return {
        "success": True,
        "message": "Campaign started successfully",
        "stats": {
            "emails_queued": result.emails_queued,
            "follow_ups_scheduled": result.follow_ups_scheduled,
            "total_emails": result.total_emails,
            "contacts_linked": result.contacts_linked,
            "first_send_date": format_db_timestamp(result.first_send_at),
            "estimated_completion_date": format_db_timestamp(result.estimated_completion_at),
        },
    }


@router.post("/stop-campaign")
def stop_campaign(body: StopCampaignRequest, auth: Auth, service: Campaigns) -> Dict[str, Any]:
    result = service.stop_campaign(auth, body.campaign_id, body.reason)
    return {
        "success": True,
        "message": "Campaign stopped successfully",
        "stats": asdict(result),
    }


@router.post("/send-batch", dependencies=[Depends(require_cron_secret)])
def send_batch(request: Request) -> Dict[str, Any]:
    sender: BatchSender = request.app.state.batch_sender
    result = sender.run_once()

    if result.skipped:
        return {"success": True, "message": "Batch already in progress", "processed": 0}
    if result.fetched == 0:
        return {"success": True, "message": "No emails to send", "processed": 0}

    return {
        "success": True,
        "message": "Batch processing complete",
        "stats": {
            "batch_id": result.batch_id,
            "processed": result.fetched,
            "successful": result.sent,
            "retried": result.retried,
            "failed": result.failed,
            "errors": result.errors,
            "released": result.released,
        },
        "failures": result.failures,
    }
