# mmc_admin/routers/contact_submissions.py
import logging
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session
from typing import List, Optional

from mmc_admin.database.engine import get_db
from mmc_admin.core.deps import require_admin
from mmc_admin.crud.contact import contact_crud
from mmc_admin.schemas.auth import Principal
from mmc_admin.schemas.common import MessageResponse
from mmc_admin.schemas.contact import (
    ContactSubmissionCreate, ContactSubmissionRead, ContactSubmissionMutationResponse,
    ContactSubmissionStats, ReadStatusUpdate, RepliedStatusUpdate, PriorityUpdate
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/contact-submissions",
    tags=["contact submissions"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=List[ContactSubmissionRead])
async def get_submissions(
    request: Request,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """
    **Query Parameters**:
    - page, limit: Pagination (defaults 1 and 20)
    - read, replied: true or false
    - priority: low, medium or high
    - search: Matches name, email, subject and message
    - sortBy, sortOrder

    **Permissions**: Admin only
    """
    return contact_crud.get_submissions(db, request.query_params).items


@router.get("/stats/overview", response_model=ContactSubmissionStats)
async def get_submission_stats(
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    return contact_crud.get_stats(db)


@router.get("/{submission_id}", response_model=ContactSubmissionRead)
async def get_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    return contact_crud.get_submission(db, submission_id)


@router.post("", response_model=ContactSubmissionMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_submission(submission_data: ContactSubmissionCreate, db: Session = Depends(get_db)):
    """Contact form endpoint used by the public website."""
    submission = contact_crud.create_submission(db, submission_data)
    logger.info(f"Contact submission {submission.id} received from {submission.email}")
    return ContactSubmissionMutationResponse(
        message="Contact submission created successfully", submission=submission
    )


@router.put("/{submission_id}/read", response_model=ContactSubmissionMutationResponse)
async def mark_submission_read(
    submission_id: str,
    update: Optional[ReadStatusUpdate] = None,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    read = update.read if update else True
    submission = contact_crud.get_submission(db, submission_id)
    submission = contact_crud.mark_read(db, submission, read)
    return ContactSubmissionMutationResponse(
        message=f"Submission marked as {'read' if read else 'unread'}", submission=submission
    )


@router.put("/{submission_id}/replied", response_model=ContactSubmissionMutationResponse)
async def mark_submission_replied(
    submission_id: str,
    update: Optional[RepliedStatusUpdate] = None,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """
    Record the reply state. The submission is marked read as well.

    **Permissions**: Admin only
    """
    replied = update.replied if update else True
    submission = contact_crud.get_submission(db, submission_id)
    submission = contact_crud.mark_replied(db, submission, replied)
    return ContactSubmissionMutationResponse(
        message=f"Submission marked as {'replied' if replied else 'not replied'}", submission=submission
    )


@router.put("/{submission_id}/priority", response_model=ContactSubmissionMutationResponse)
async def set_submission_priority(
    submission_id: str,
    update: PriorityUpdate,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    submission = contact_crud.get_submission(db, submission_id)
    submission = contact_crud.set_priority(db, submission, update.priority)
    return ContactSubmissionMutationResponse(message="Submission priority updated", submission=submission)


@router.delete("/{submission_id}", response_model=MessageResponse)
async def delete_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    submission = contact_crud.get_submission(db, submission_id)
    contact_crud.delete_submission(db, submission)
    logger.info(f"Contact submission {submission_id} deleted by {current_principal.username}")
    return MessageResponse(message="Contact submission deleted successfully")
