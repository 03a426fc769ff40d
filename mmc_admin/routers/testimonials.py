# mmc_admin/routers/testimonials.py
import logging
from fastapi import APIRouter, Depends, Query, Request, status
from sqlmodel import Session
from typing import List

from mmc_admin.database.engine import get_db
from mmc_admin.core.deps import require_admin
from mmc_admin.crud.testimonial import testimonial_crud
from mmc_admin.schemas.auth import Principal
from mmc_admin.schemas.common import MessageResponse
from mmc_admin.schemas.testimonial import (
    TestimonialCreate, TestimonialUpdate, TestimonialRead,
    TestimonialMutationResponse, TestimonialStats
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/testimonials",
    tags=["testimonials"],
    responses={404: {"description": "Not found"}},
)


@router.get("/all", response_model=List[TestimonialRead])
async def get_all_testimonials(
    request: Request,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """
    Get testimonials for the admin panel.

    **Query Parameters**:
    - page, limit: Pagination (defaults 1 and 20)
    - active, featured: true or false
    - rating: Exact rating
    - search: Matches name, company and testimonial text
    - sortBy, sortOrder

    **Permissions**: Admin only
    """
    return testimonial_crud.get_all_testimonials(db, request.query_params).items


@router.get("", response_model=List[TestimonialRead])
async def get_public_testimonials(request: Request, db: Session = Depends(get_db)):
    """
    Get active testimonials for the website.

    **Query Parameters**:
    - limit: Default 10
    - featured: true or false
    - rating: Minimum rating
    - sortBy, sortOrder
    """
    return testimonial_crud.get_public_testimonials(db, request.query_params).items


@router.get("/featured/list", response_model=List[TestimonialRead])
async def get_featured_testimonials(
    limit: int = Query(5, ge=1),
    db: Session = Depends(get_db)
):
    return testimonial_crud.get_featured_testimonials(db, limit)


@router.get("/stats/overview", response_model=TestimonialStats)
async def get_testimonial_stats(
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    return testimonial_crud.get_stats(db)


@router.get("/{testimonial_id}", response_model=TestimonialRead)
async def get_testimonial(testimonial_id: str, db: Session = Depends(get_db)):
    return testimonial_crud.get_testimonial(db, testimonial_id)


@router.post("", response_model=TestimonialMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_testimonial(
    testimonial_data: TestimonialCreate,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """
    Create a testimonial. Name, company and a rating from 1 to 5 are required.

    **Permissions**: Admin only
    """
    testimonial = testimonial_crud.create_testimonial(db, testimonial_data)
    logger.info(f"Testimonial {testimonial.id} created by {current_principal.username}")
    return TestimonialMutationResponse(message="Testimonial created successfully", testimonial=testimonial)


@router.put("/{testimonial_id}", response_model=TestimonialMutationResponse)
async def update_testimonial(
    testimonial_id: str,
    testimonial_data: TestimonialUpdate,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    testimonial = testimonial_crud.get_testimonial(db, testimonial_id)
    testimonial = testimonial_crud.update_testimonial(db, testimonial, testimonial_data)
    return TestimonialMutationResponse(message="Testimonial updated successfully", testimonial=testimonial)


@router.delete("/{testimonial_id}", response_model=MessageResponse)
async def delete_testimonial(
    testimonial_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    testimonial = testimonial_crud.get_testimonial(db, testimonial_id)
    testimonial_crud.delete_testimonial(db, testimonial)
    logger.info(f"Testimonial {testimonial_id} deleted by {current_principal.username}")
    return MessageResponse(message="Testimonial deleted successfully")


@router.put("/{testimonial_id}/toggle-active", response_model=TestimonialMutationResponse)
async def toggle_testimonial_active(
    testimonial_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    testimonial = testimonial_crud.get_testimonial(db, testimonial_id)
    testimonial = testimonial_crud.toggle_active(db, testimonial)
    state = "activated" if testimonial.active else "deactivated"
    return TestimonialMutationResponse(message=f"Testimonial {state} successfully", testimonial=testimonial)


@router.put("/{testimonial_id}/toggle-featured", response_model=TestimonialMutationResponse)
async def toggle_testimonial_featured(
    testimonial_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    testimonial = testimonial_crud.get_testimonial(db, testimonial_id)
    testimonial = testimonial_crud.toggle_featured(db, testimonial)
    state = "featured" if testimonial.featured else "unfeatured"
    return TestimonialMutationResponse(message=f"Testimonial {state} successfully", testimonial=testimonial)
