# mmc_admin/schemas/blog.py
from pydantic import Field, field_validator
from typing import Optional, List, Any

from mmc_admin.models.blog import BlogStatus
from mmc_admin.schemas.common import CamelModel, UTCDateTime


def normalize_tags(value: Any) -> Any:
    """Accept a list or a comma-separated string; strip blanks and duplicates, keep order."""
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return value

    tags: List[str] = []
    for tag in value:
        if not isinstance(tag, str):
            return value
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


# Blog Post Schemas
class BlogBase(CamelModel):
    excerpt: Optional[str] = Field(None, max_length=1000)
    tags: Optional[List[str]] = None
    image: Optional[str] = Field(None, max_length=500)
    thumbnail: Optional[str] = Field(None, max_length=500)
    featured: Optional[bool] = None
    status: Optional[BlogStatus] = None
    publish_date: Optional[UTCDateTime] = None
    reading_time: Optional[str] = Field(None, max_length=50)
    seo_title: Optional[str] = Field(None, max_length=255)
    seo_description: Optional[str] = Field(None, max_length=1000)
    seo_keywords: Optional[str] = Field(None, max_length=500)
    date: Optional[str] = Field(None, max_length=50)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        return normalize_tags(v)


class BlogCreate(BlogBase):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)


class BlogUpdate(BlogBase):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=100)


class BlogRead(CamelModel):
    id: int
    title: str
    excerpt: Optional[str] = None
    content: str
    author: str
    category: str
    tags: List[str] = []
    image: Optional[str] = None
    thumbnail: Optional[str] = None
    featured: bool
    status: BlogStatus
    publish_date: Optional[UTCDateTime] = None
    reading_time: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    seo_keywords: Optional[str] = None
    date: Optional[str] = None
    views: int
    likes: int
    created_at: UTCDateTime
    updated_at: UTCDateTime


class BlogMutationResponse(CamelModel):
    message: str
    blog: BlogRead


class BlogListResponse(CamelModel):
    """Paginated blog list, shaped the way the website frontend pages through posts."""
    blogs: List[BlogRead]
    total_pages: int
    current_page: int
    total_blogs: int


class BlogLikeResponse(CamelModel):
    likes: int
