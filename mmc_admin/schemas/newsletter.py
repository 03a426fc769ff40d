# mmc_admin/schemas/newsletter.py
from pydantic import EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Literal

from mmc_admin.models.newsletter import NewsletterCategory, CampaignAudience, CampaignStatus
from mmc_admin.schemas.common import CamelModel, UTCDateTime


# Subscriber Schemas
class SubscriberPreferences(CamelModel):
    frequency: Literal["daily", "weekly", "monthly"] = "weekly"
    categories: List[str] = []


class SubscriberCreate(CamelModel):
    email: EmailStr
    name: Optional[str] = Field(None, max_length=100)
    source: str = Field("website", max_length=50)


class SubscriberUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=100)
    source: Optional[str] = Field(None, max_length=50)
    preferences: Optional[SubscriberPreferences] = None


class SubscriberRead(CamelModel):
    id: int
    email: str
    name: Optional[str] = None
    unsubscribed: bool
    unsubscribed_at: Optional[UTCDateTime] = None
    source: str
    preferences: SubscriberPreferences
    created_at: UTCDateTime
    updated_at: UTCDateTime


class SubscriberMutationResponse(CamelModel):
    message: str
    subscriber: SubscriberRead


# Campaign Schemas
class CampaignSend(CamelModel):
    subject: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    send_to: CampaignAudience = CampaignAudience.all
    subscriber_ids: Optional[List[int]] = None

    @model_validator(mode="after")
    def require_ids_for_selected(self):
        if self.send_to == CampaignAudience.selected and not self.subscriber_ids:
            raise ValueError("subscriberIds are required when sendTo is 'selected'")
        return self


class DeliveryStats(CamelModel):
    delivered: int = 0
    bounced: int = 0
    opened: int = 0
    clicked: int = 0


class CampaignRead(CamelModel):
    id: int
    subject: str
    content: str
    sent_to: CampaignAudience
    subscriber_ids: Optional[List[int]] = None
    recipient_count: int
    sent_at: Optional[UTCDateTime] = None
    status: CampaignStatus
    delivery_stats: DeliveryStats
    created_at: UTCDateTime
    updated_at: UTCDateTime


class CampaignSendResponse(CamelModel):
    message: str
    campaign: CampaignRead


# Upload Schemas
def parse_upload_date(value):
    # Form posts usually carry a bare calendar date
    if isinstance(value, str) and len(value.strip()) == 10:
        return f"{value.strip()}T00:00:00"
    return value


class NewsletterUploadCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: NewsletterCategory
    date: UTCDateTime

    @field_validator("date", mode="before")
    @classmethod
    def accept_calendar_date(cls, v):
        return parse_upload_date(v)


class NewsletterUploadUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[NewsletterCategory] = None
    date: Optional[UTCDateTime] = None
    active: Optional[bool] = None

    @field_validator("date", mode="before")
    @classmethod
    def accept_calendar_date(cls, v):
        return parse_upload_date(v)


class NewsletterUploadRead(CamelModel):
    id: int
    name: str
    category: NewsletterCategory
    date: UTCDateTime
    filename: str
    original_name: str
    file_size: Optional[int] = None
    download_count: int
    active: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime


class NewsletterUploadMutationResponse(CamelModel):
    message: str
    newsletter: NewsletterUploadRead


# Statistics
class NewsletterStats(CamelModel):
    total_subscribers: int
    active_subscribers: int
    unsubscribed_count: int
    total_campaigns: int
    total_uploads: int
    # Percentage with two decimals, e.g. "87.50"
    subscription_rate: str
