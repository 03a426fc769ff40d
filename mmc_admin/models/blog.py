# mmc_admin/models/blog.py
from sqlmodel import SQLModel, Field, Column, Text, JSON, DateTime
from typing import Optional, List
from datetime import datetime
from enum import Enum

from mmc_admin.core.clock import utcnow


class BlogStatus(str, Enum):
    draft = "draft"
    published = "published"
    scheduled = "scheduled"


class Blog(SQLModel, table=True):
    __tablename__ = "blogs"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255, index=True)
    excerpt: Optional[str] = Field(default=None, max_length=1000)
    content: str = Field(sa_column=Column(Text, nullable=False))
    author: str = Field(max_length=100)
    category: str = Field(max_length=100, index=True)
    # Ordered, duplicate-free list of tag strings
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Upload manager reference, or an external URL
    image: Optional[str] = Field(default=None, max_length=500)
    thumbnail: Optional[str] = Field(default=None, max_length=500)

    featured: bool = Field(default=False, index=True)
    status: BlogStatus = Field(default=BlogStatus.draft, index=True)
    publish_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True), index=True)
    reading_time: Optional[str] = Field(default=None, max_length=50)

    # SEO
    seo_title: Optional[str] = Field(default=None, max_length=255)
    seo_description: Optional[str] = Field(default=None, max_length=1000)
    seo_keywords: Optional[str] = Field(default=None, max_length=500)

    # Display date, e.g. "March 4, 2025"
    date: Optional[str] = Field(default=None, max_length=50)

    views: int = Field(default=0, ge=0)
    likes: int = Field(default=0, ge=0)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
