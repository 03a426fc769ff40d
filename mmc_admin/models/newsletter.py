# mmc_admin/models/newsletter.py
from sqlmodel import SQLModel, Field, Column, Text, JSON, DateTime
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from mmc_admin.core.clock import utcnow


# Enums
class NewsletterCategory(str, Enum):
    monthly = "monthly"
    weekly = "weekly"
    special = "special"
    announcement = "announcement"
    update = "update"


class CampaignAudience(str, Enum):
    all = "all"
    selected = "selected"
    unsubscribed = "unsubscribed"


class CampaignStatus(str, Enum):
    pending = "pending"
    sent = "sent"
    failed = "failed"


def default_preferences() -> Dict[str, Any]:
    return {"frequency": "weekly", "categories": []}


def default_delivery_stats() -> Dict[str, int]:
    return {"delivered": 0, "bounced": 0, "opened": 0, "clicked": 0}


# Newsletter Subscriber
class NewsletterSubscriber(SQLModel, table=True):
    __tablename__ = "newsletter_subscribers"

    id: Optional[int] = Field(default=None, primary_key=True)
    # Always stored lower-cased
    email: str = Field(max_length=255, unique=True, index=True)
    name: Optional[str] = Field(default=None, max_length=100)
    unsubscribed: bool = Field(default=False, index=True)
    unsubscribed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    source: str = Field(default="website", max_length=50)
    preferences: Dict[str, Any] = Field(default_factory=default_preferences, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


# Uploaded newsletter PDF
class NewsletterUpload(SQLModel, table=True):
    __tablename__ = "newsletter_uploads"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    category: NewsletterCategory = Field(index=True)
    date: datetime = Field(sa_type=DateTime(timezone=True))
    filename: str = Field(max_length=255, description="Stored filename under the newsletters directory")
    original_name: str = Field(max_length=255)
    file_size: Optional[int] = Field(default=None, description="File size in bytes")
    download_count: int = Field(default=0)
    active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


# Sent newsletter campaign
class NewsletterCampaign(SQLModel, table=True):
    __tablename__ = "newsletter_campaigns"

    id: Optional[int] = Field(default=None, primary_key=True)
    subject: str = Field(max_length=255)
    content: str = Field(sa_column=Column(Text, nullable=False))
    sent_to: CampaignAudience = Field()
    # Loose references to subscriber ids when sent_to == selected
    subscriber_ids: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))
    recipient_count: int = Field(default=0)
    sent_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    status: CampaignStatus = Field(default=CampaignStatus.pending, index=True)
    delivery_stats: Dict[str, int] = Field(default_factory=default_delivery_stats, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
