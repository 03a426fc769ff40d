# mmc_admin/models/contact.py
from sqlmodel import SQLModel, Field, Column, Text, DateTime
from typing import Optional
from datetime import datetime
from enum import Enum

from mmc_admin.core.clock import utcnow


class ContactPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


# Contact Form Submission
class ContactSubmission(SQLModel, table=True):
    __tablename__ = "contact_submissions"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=255, index=True)
    phone: Optional[str] = Field(default=None, max_length=30)
    subject: str = Field(max_length=255)
    message: str = Field(sa_column=Column(Text, nullable=False))
    read: bool = Field(default=False, index=True)
    replied: bool = Field(default=False, index=True)
    priority: ContactPriority = Field(default=ContactPriority.medium, index=True)
    source: str = Field(default="website", max_length=50)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
