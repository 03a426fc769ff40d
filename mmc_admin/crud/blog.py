# mmc_admin/crud/blog.py
from sqlmodel import Session, select
from typing import List, Mapping, Optional
from datetime import datetime

from mmc_admin.models.blog import Blog, BlogStatus
from mmc_admin.schemas.blog import BlogCreate, BlogUpdate
from mmc_admin.core.clock import utcnow
from mmc_admin.core.query import ListSpec, FilterField, FilterKind, Page, list_records
from mmc_admin.crud.common import get_or_404, apply_changes, save

BLOG_LIST_SPEC = ListSpec(
    model=Blog,
    filters=(
        FilterField("status", Blog.status, enum=BlogStatus),
        FilterField("category", Blog.category),
        FilterField("featured", Blog.featured, FilterKind.BOOLEAN),
    ),
    search_columns=(Blog.title, Blog.excerpt, Blog.content, Blog.tags),
    sort_fields={
        "createdAt": Blog.created_at,
        "updatedAt": Blog.updated_at,
        "publishDate": Blog.publish_date,
        "title": Blog.title,
        "category": Blog.category,
        "views": Blog.views,
        "likes": Blog.likes,
    },
    default_limit=10,
)


REQUIRED_FIELDS = ("title", "content", "author", "category", "featured", "status")


def display_date(moment: datetime) -> str:
    """Long US-style date, e.g. "March 4, 2025"."""
    return f"{moment.strftime('%B')} {moment.day}, {moment.year}"


class BlogCRUD:
    def get_blogs(self, db: Session, params: Mapping[str, str]) -> Page:
        """List blogs from raw query parameters."""
        return list_records(db, BLOG_LIST_SPEC, params)

    def get_blog(self, db: Session, blog_id) -> Blog:
        return get_or_404(db, Blog, blog_id, "Blog")

    def view_blog(self, db: Session, blog_id) -> Blog:
        """Fetch a blog and count the view."""
        blog = self.get_blog(db, blog_id)
        blog.views = (blog.views or 0) + 1
        return save(db, blog)

    def like_blog(self, db: Session, blog_id) -> Blog:
        blog = self.get_blog(db, blog_id)
        blog.likes = (blog.likes or 0) + 1
        return save(db, blog)

    def get_featured_blogs(self, db: Session, limit: int = 5) -> List[Blog]:
        query = (
            select(Blog)
            .where(Blog.featured == True, Blog.status == BlogStatus.published)
            .order_by(Blog.created_at.desc(), Blog.id.desc())
            .limit(limit)
        )
        return list(db.exec(query).all())

    def get_categories(self, db: Session) -> List[str]:
        query = select(Blog.category).distinct().order_by(Blog.category)
        return [category for category in db.exec(query).all() if category]

    def create_blog(self, db: Session, data: BlogCreate, image: Optional[str] = None) -> Blog:
        """Create a blog, filling display date, publish date and SEO defaults."""
        values = data.model_dump(exclude_none=True)
        now = utcnow()

        if image:
            values["image"] = image
            values["thumbnail"] = image
        elif values.get("image") and not values.get("thumbnail"):
            values["thumbnail"] = values["image"]

        if not values.get("date"):
            values["date"] = display_date(now)
        if values.get("status") == BlogStatus.published and not values.get("publish_date"):
            values["publish_date"] = now
        if not values.get("seo_title"):
            values["seo_title"] = values["title"]
        if not values.get("seo_description"):
            values["seo_description"] = values.get("excerpt") or values["title"]

        blog = Blog(**values)
        return save(db, blog)

    def update_blog(self, db: Session, blog: Blog, data: BlogUpdate, image: Optional[str] = None) -> Blog:
        changes = data.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if changes.get(field, "") is None:
                del changes[field]
        if changes.get("tags", []) is None:
            changes["tags"] = []

        if image:
            changes["image"] = image
            changes["thumbnail"] = image
        elif "image" in changes and changes["image"] != blog.image:
            # A thumbnail showing the old image follows it
            if changes.get("thumbnail", blog.thumbnail) == blog.image:
                changes["thumbnail"] = changes["image"]

        # First publish stamps the publish date
        status = changes.get("status", blog.status)
        if status == BlogStatus.published and not changes.get("publish_date") and not blog.publish_date:
            changes["publish_date"] = utcnow()

        apply_changes(blog, changes)
        return save(db, blog)

    def delete_blog(self, db: Session, blog: Blog) -> None:
        db.delete(blog)
        db.commit()


blog_crud = BlogCRUD()
