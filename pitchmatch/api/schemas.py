"""Request bodies. Keys follow the web client: camelCase where it sends camelCase."""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ContactCreate(_Body):
    email: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    industry: Optional[str] = None


class IndustryUpdate(_Body):
    industry: Optional[str] = None


class OpportunityCreate(_Body):
    journalist_name: str = Field(..., min_length=1)
    publication: Optional[str] = None
    subject: Optional[str] = None
    industry: Optional[str] = None
    deadline: Optional[date] = None
    linkedin_category: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True


class TemplateCreate(_Body):
    template_number: int = Field(..., ge=1)
    subject: str
    body: str
    is_enabled: bool = True
    sender_name: Optional[str] = None
    sender_email: Optional[str] = None
    description: Optional[str] = None


class TemplateToggle(_Body):
    template_number: int = Field(..., ge=1, alias="templateNumber")
    enabled: bool


class PoolCreate(_Body):
    name: str
    description: Optional[str] = None


class PoolContacts(_Body):
    contact_ids: List[int] = Field(default_factory=list, alias="contactIds")


class CampaignCreate(_Body):
    name: str = Field(..., min_length=1)
    pool_ids: List[int] = Field(default_factory=list, alias="poolIds")


class PoolSelection(_Body):
    pool_ids: List[int] = Field(default_factory=list, alias="poolIds")


class CampaignLeads(_Body):
    lead_ids: List[int] = Field(default_factory=list, alias="leadIds")


class StartCampaignRequest(_Body):
    """Omitted pacing fields fall back to the ``campaign`` config section."""

    campaign_id: int = Field(..., alias="campaignId")
    pool_ids: Optional[List[int]] = Field(None, alias="poolIds")
    max_emails_per_day: Optional[int] = Field(None, alias="maxEmailsPerDay")
    sending_start_hour: Optional[int] = Field(None, alias="sendingStartHour")
    sending_end_hour: Optional[int] = Field(None, alias="sendingEndHour")
    follow_up_delay_days: Optional[int] = Field(None, alias="followUpDelayDays")
    skip_weekends: Optional[bool] = Field(None, alias="skipWeekends")


class StopCampaignRequest(_Body):
    campaign_id: int = Field(..., alias="campaignId")
    reason: Optional[str] = None


class VerifyRequest(_Body):
    emails: List[str] = Field(default_factory=list)
