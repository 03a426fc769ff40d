# mmc_admin/schemas/contact.py
from pydantic import EmailStr, Field
from typing import Optional

from mmc_admin.models.contact import ContactPriority
from mmc_admin.schemas.common import CamelModel, UTCDateTime


class ContactSubmissionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    priority: ContactPriority = ContactPriority.medium
    source: str = Field("website", max_length=50)


class ContactSubmissionRead(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    read: bool
    replied: bool
    priority: ContactPriority
    source: str
    created_at: UTCDateTime
    updated_at: UTCDateTime


class ContactSubmissionMutationResponse(CamelModel):
    message: str
    submission: ContactSubmissionRead


class ReadStatusUpdate(CamelModel):
    read: bool = True


class RepliedStatusUpdate(CamelModel):
    replied: bool = True


class PriorityUpdate(CamelModel):
    priority: ContactPriority


class ContactSubmissionStats(CamelModel):
    total_submissions: int
    unread_submissions: int
    today_submissions: int
    high_priority_submissions: int
    read_submissions: int
