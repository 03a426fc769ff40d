# mmc_admin/models/testimonial.py
from sqlmodel import SQLModel, Field, Column, Text, DateTime
from sqlalchemy import CheckConstraint
from typing import Optional
from datetime import datetime
from enum import Enum

from mmc_admin.core.clock import utcnow


class TestimonialSource(str, Enum):
    website = "website"
    email = "email"
    phone = "phone"
    social = "social"
    referral = "referral"


class Testimonial(SQLModel, table=True):
    __tablename__ = "testimonials"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_testimonials_rating_range"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    company: str = Field(max_length=150)
    position: Optional[str] = Field(default=None, max_length=150)
    rating: int = Field(default=5, index=True)
    testimonial: Optional[str] = Field(default=None, sa_column=Column(Text))
    image: Optional[str] = Field(default=None, max_length=500)
    active: bool = Field(default=True, index=True)
    featured: bool = Field(default=False, index=True)
    project_type: Optional[str] = Field(default=None, max_length=100)
    source: TestimonialSource = Field(default=TestimonialSource.website)
    verified: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
