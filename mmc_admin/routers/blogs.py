# mmc_admin/routers/blogs.py
import logging
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session
from typing import List, Optional

from mmc_admin.database.engine import get_db
from mmc_admin.core.deps import require_admin
from mmc_admin.core.exceptions import ValidationError
from mmc_admin.core.forms import read_payload
from mmc_admin.core.storage import UploadManager, get_upload_manager, BLOG_IMAGES
from mmc_admin.crud.blog import blog_crud
from mmc_admin.schemas.auth import Principal
from mmc_admin.schemas.common import MessageResponse
from mmc_admin.schemas.blog import (
    BlogCreate, BlogUpdate, BlogRead,
    BlogListResponse, BlogMutationResponse, BlogLikeResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/blogs",
    tags=["blogs"],
    responses={404: {"description": "Not found"}},
)


def check_image_references(uploads: UploadManager, blog_data, current: Optional[str] = None) -> None:
    """Local image references come from an upload or keep the blog's current image; external URLs pass."""
    for field in ("image", "thumbnail"):
        value = getattr(blog_data, field)
        if uploads.is_local(value) and value != current:
            raise ValidationError(f"'{field}' must be uploaded as a file or be an external URL", fields=[field])


@router.get("", response_model=BlogListResponse)
async def get_blogs(request: Request, db: Session = Depends(get_db)):
    """
    Get a page of blogs.

    **Query Parameters**:
    - page, limit: Pagination (defaults 1 and 10)
    - status: draft, published or scheduled
    - category: Exact category
    - featured: true or false
    - search: Matches title, excerpt, content and tags
    - sortBy: createdAt, updatedAt, publishDate, title, category, views or likes
    - sortOrder: asc or desc (default desc)
    """
    page = blog_crud.get_blogs(db, request.query_params)
    return BlogListResponse(
        blogs=page.items,
        total_pages=page.total_pages,
        current_page=page.page,
        total_blogs=page.total,
    )


@router.get("/featured/list", response_model=List[BlogRead])
async def get_featured_blogs(db: Session = Depends(get_db)):
    """Newest five featured, published blogs."""
    return blog_crud.get_featured_blogs(db)


@router.get("/categories/list", response_model=List[str])
async def get_categories(db: Session = Depends(get_db)):
    return blog_crud.get_categories(db)


@router.get("/{blog_id}", response_model=BlogRead)
async def get_blog(blog_id: str, db: Session = Depends(get_db)):
    """Get a blog by ID. Each read counts as a view."""
    return blog_crud.view_blog(db, blog_id)


@router.post("", response_model=BlogMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_blog(
    request: Request,
    db: Session = Depends(get_db),
    uploads: UploadManager = Depends(get_upload_manager),
    current_principal: Principal = Depends(require_admin)
):
    """
    Create a blog from JSON or multipart form data.

    Multipart requests carry the blog as a JSON ``data`` field or as plain
    form fields, plus an optional ``image`` file.

    **Permissions**: Admin only
    """
    blog_data, image = await read_payload(request, BlogCreate, file_field="image")
    check_image_references(uploads, blog_data)

    if image is None:
        blog = blog_crud.create_blog(db, blog_data)
    else:
        stored = await uploads.store(BLOG_IMAGES, image)
        try:
            blog = blog_crud.create_blog(db, blog_data, image=stored.reference)
        except Exception:
            logger.error(f"Blog creation failed, discarding uploaded image {stored.reference}")
            await uploads.remove(stored.reference, BLOG_IMAGES)
            raise

    logger.info(f"Blog {blog.id} created by {current_principal.username}")
    return BlogMutationResponse(message="Blog created successfully", blog=blog)


@router.put("/{blog_id}", response_model=BlogMutationResponse)
async def update_blog(
    blog_id: str,
    request: Request,
    db: Session = Depends(get_db),
    uploads: UploadManager = Depends(get_upload_manager),
    current_principal: Principal = Depends(require_admin)
):
    """
    Update a blog. A new ``image`` replaces the stored one.

    **Permissions**: Admin only
    """
    blog = blog_crud.get_blog(db, blog_id)
    blog_data, image = await read_payload(request, BlogUpdate, file_field="image")
    check_image_references(uploads, blog_data, current=blog.image)
    previous_image = blog.image

    if image is None:
        blog = blog_crud.update_blog(db, blog, blog_data)
        # Committed; a detached upload goes last
        if blog.image != previous_image and uploads.is_local(previous_image):
            await uploads.remove(previous_image, BLOG_IMAGES)
    else:
        await uploads.replace(
            BLOG_IMAGES,
            previous_image if uploads.is_local(previous_image) else None,
            image,
            commit=lambda stored: blog_crud.update_blog(db, blog, blog_data, image=stored.reference),
        )

    logger.info(f"Blog {blog.id} updated by {current_principal.username}")
    return BlogMutationResponse(message="Blog updated successfully", blog=blog)


@router.delete("/{blog_id}", response_model=MessageResponse)
async def delete_blog(
    blog_id: str,
    db: Session = Depends(get_db),
    uploads: UploadManager = Depends(get_upload_manager),
    current_principal: Principal = Depends(require_admin)
):
    """
    Delete a blog and its image file.

    **Permissions**: Admin only
    """
    blog = blog_crud.get_blog(db, blog_id)
    if uploads.is_local(blog.image):
        await uploads.remove(blog.image, BLOG_IMAGES)

    blog_crud.delete_blog(db, blog)
    logger.info(f"Blog {blog_id} deleted by {current_principal.username}")
    return MessageResponse(message="Blog deleted successfully")


@router.post("/{blog_id}/like", response_model=BlogLikeResponse)
async def like_blog(blog_id: str, db: Session = Depends(get_db)):
    blog = blog_crud.like_blog(db, blog_id)
    return BlogLikeResponse(likes=blog.likes)
