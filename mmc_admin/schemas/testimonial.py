# mmc_admin/schemas/testimonial.py
from pydantic import Field
from typing import Optional, List

from mmc_admin.models.testimonial import TestimonialSource
from mmc_admin.schemas.common import CamelModel, UTCDateTime


class TestimonialBase(CamelModel):
    position: Optional[str] = Field(None, max_length=150)
    testimonial: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    project_type: Optional[str] = Field(None, max_length=100)
    source: Optional[TestimonialSource] = None
    verified: Optional[bool] = None
    active: Optional[bool] = None
    featured: Optional[bool] = None


class TestimonialCreate(TestimonialBase):
    name: str = Field(..., min_length=1, max_length=100)
    company: str = Field(..., min_length=1, max_length=150)
    rating: int = Field(..., ge=1, le=5)


class TestimonialUpdate(TestimonialBase):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    company: Optional[str] = Field(None, min_length=1, max_length=150)
    rating: Optional[int] = Field(None, ge=1, le=5)


class TestimonialRead(CamelModel):
    id: int
    name: str
    company: str
    position: Optional[str] = None
    rating: int
    testimonial: Optional[str] = None
    image: Optional[str] = None
    active: bool
    featured: bool
    project_type: Optional[str] = None
    source: TestimonialSource
    verified: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime


class TestimonialMutationResponse(CamelModel):
    message: str
    testimonial: TestimonialRead


class RatingBucket(CamelModel):
    rating: int
    count: int


class TestimonialStats(CamelModel):
    total_testimonials: int
    active_testimonials: int
    featured_testimonials: int
    verified_testimonials: int
    # One decimal place, e.g. "4.6"
    average_rating: str
    rating_distribution: List[RatingBucket]
