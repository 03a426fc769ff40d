# mmc_admin/routers/newsletter.py
import logging
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import FileResponse
from sqlmodel import Session
from typing import List

from mmc_admin.database.engine import get_db
from mmc_admin.core.deps import require_admin
from mmc_admin.core.exceptions import NotFoundError, ValidationError
from mmc_admin.core.forms import read_payload
from mmc_admin.core.storage import UploadManager, get_upload_manager, NEWSLETTERS
from mmc_admin.crud.newsletter import newsletter_crud
from mmc_admin.services.newsletter_service import newsletter_service
from mmc_admin.services.campaign_service import campaign_service
from mmc_admin.schemas.auth import Principal
from mmc_admin.schemas.common import MessageResponse
from mmc_admin.schemas.newsletter import (
    SubscriberCreate, SubscriberUpdate, SubscriberRead, SubscriberMutationResponse,
    CampaignSend, CampaignRead, CampaignSendResponse,
    NewsletterUploadCreate, NewsletterUploadUpdate, NewsletterUploadRead,
    NewsletterUploadMutationResponse, NewsletterStats
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/newsletter",
    tags=["newsletter"],
    responses={404: {"description": "Not found"}},
)


# ========================================
# SUBSCRIBER ENDPOINTS
# ========================================

@router.get("/subscribers", response_model=List[SubscriberRead])
async def get_subscribers(
    request: Request,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """
    **Query Parameters**:
    - page, limit: Pagination (defaults 1 and 20)
    - unsubscribed: true or false
    - source: Exact signup source
    - search: Matches email and name
    - sortBy, sortOrder

    **Permissions**: Admin only
    """
    return newsletter_crud.get_subscribers(db, request.query_params).items


@router.get("/subscribers/{subscriber_id}", response_model=SubscriberRead)
async def get_subscriber(
    subscriber_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    return newsletter_crud.get_subscriber(db, subscriber_id)


@router.post("/subscribers", response_model=SubscriberMutationResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    subscriber_data: SubscriberCreate,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Subscribe an email address from the website.

    Returns 201 for a new subscriber and 200 when a previously unsubscribed
    address is resubscribed.
    """
    subscriber, created = newsletter_service.subscribe(db, subscriber_data)
    if created:
        return SubscriberMutationResponse(message="Successfully subscribed to newsletter", subscriber=subscriber)

    response.status_code = status.HTTP_200_OK
    return SubscriberMutationResponse(message="Successfully resubscribed to newsletter", subscriber=subscriber)


@router.put("/subscribers/{subscriber_id}", response_model=SubscriberMutationResponse)
async def update_subscriber(
    subscriber_id: str,
    subscriber_data: SubscriberUpdate,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    subscriber = newsletter_crud.get_subscriber(db, subscriber_id)
    subscriber = newsletter_crud.update_subscriber(db, subscriber, subscriber_data)
    return SubscriberMutationResponse(message="Subscriber updated successfully", subscriber=subscriber)


@router.put("/subscribers/{subscriber_id}/unsubscribe", response_model=SubscriberMutationResponse)
async def unsubscribe(
    subscriber_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    subscriber = newsletter_crud.get_subscriber(db, subscriber_id)
    subscriber = newsletter_service.unsubscribe(db, subscriber)
    return SubscriberMutationResponse(message="Subscriber unsubscribed successfully", subscriber=subscriber)


@router.put("/subscribers/{subscriber_id}/resubscribe", response_model=SubscriberMutationResponse)
async def resubscribe(
    subscriber_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    subscriber = newsletter_crud.get_subscriber(db, subscriber_id)
    subscriber = newsletter_service.resubscribe(db, subscriber)
    return SubscriberMutationResponse(message="Successfully resubscribed to newsletter", subscriber=subscriber)


@router.delete("/subscribers/{subscriber_id}", response_model=MessageResponse)
async def delete_subscriber(
    subscriber_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    subscriber = newsletter_crud.get_subscriber(db, subscriber_id)
    newsletter_crud.delete_subscriber(db, subscriber)
    logger.info(f"Subscriber {subscriber_id} deleted by {current_principal.username}")
    return MessageResponse(message="Subscriber deleted successfully")


# ========================================
# CAMPAIGN ENDPOINTS
# ========================================

@router.post("/send", response_model=CampaignSendResponse)
async def send_newsletter(
    campaign_data: CampaignSend,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """
    Send a newsletter to all active subscribers, selected subscribers, or
    unsubscribed addresses.

    **Permissions**: Admin only
    """
    campaign = await campaign_service.send_campaign(db, campaign_data)
    delivered = campaign.delivery_stats.get("delivered", 0)
    return CampaignSendResponse(
        message=f"Newsletter sent successfully to {delivered} recipients",
        campaign=campaign,
    )


@router.get("/campaigns", response_model=List[CampaignRead])
async def get_campaigns(
    request: Request,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """
    **Query Parameters**: page, limit, status, sendTo, search, sortBy, sortOrder

    **Permissions**: Admin only
    """
    return newsletter_crud.get_campaigns(db, request.query_params).items


@router.get("/campaigns/{campaign_id}", response_model=CampaignRead)
async def get_campaign(
    campaign_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    return newsletter_crud.get_campaign(db, campaign_id)


@router.delete("/campaigns/{campaign_id}", response_model=MessageResponse)
async def delete_campaign(
    campaign_id: str,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    campaign = newsletter_crud.get_campaign(db, campaign_id)
    newsletter_crud.delete_campaign(db, campaign)
    return MessageResponse(message="Campaign deleted successfully")


# ========================================
# UPLOAD ENDPOINTS
# ========================================

@router.get("/uploads", response_model=List[NewsletterUploadRead])
async def get_uploads(request: Request, db: Session = Depends(get_db)):
    """
    Get active newsletter PDFs, newest first.

    **Query Parameters**: page, limit, category, search, sortBy, sortOrder
    """
    return newsletter_crud.get_uploads(db, request.query_params).items


@router.get("/uploads/{upload_id}", response_model=NewsletterUploadRead)
async def get_upload(upload_id: str, db: Session = Depends(get_db)):
    return newsletter_crud.get_upload(db, upload_id)


@router.post("/upload", response_model=NewsletterUploadMutationResponse, status_code=status.HTTP_201_CREATED)
async def upload_newsletter(
    request: Request,
    db: Session = Depends(get_db),
    uploads: UploadManager = Depends(get_upload_manager),
    current_principal: Principal = Depends(require_admin)
):
    """
    Upload a newsletter PDF.

    Multipart form with a ``pdf`` file plus ``name``, ``category`` and ``date``.

    **Permissions**: Admin only
    """
    upload_data, pdf = await read_payload(request, NewsletterUploadCreate, file_field="pdf")
    if pdf is None:
        raise ValidationError("PDF file is required", fields=["pdf"])

    stored = await uploads.store(NEWSLETTERS, pdf)
    try:
        newsletter = newsletter_crud.create_upload(
            db, upload_data,
            filename=stored.filename,
            original_name=stored.original_name,
            file_size=stored.size,
        )
    except Exception:
        logger.error(f"Newsletter record creation failed, discarding {stored.filename}")
        await uploads.remove(stored.filename, NEWSLETTERS)
        raise

    logger.info(f"Newsletter {newsletter.id} uploaded by {current_principal.username}")
    return NewsletterUploadMutationResponse(message="Newsletter uploaded successfully", newsletter=newsletter)


@router.put("/uploads/{upload_id}", response_model=NewsletterUploadMutationResponse)
async def update_upload(
    upload_id: str,
    request: Request,
    db: Session = Depends(get_db),
    uploads: UploadManager = Depends(get_upload_manager),
    current_principal: Principal = Depends(require_admin)
):
    """
    Update newsletter metadata; an optional ``pdf`` replaces the stored file.

    **Permissions**: Admin only
    """
    newsletter = newsletter_crud.get_upload(db, upload_id)
    upload_data, pdf = await read_payload(request, NewsletterUploadUpdate, file_field="pdf")

    if pdf is None:
        newsletter = newsletter_crud.update_upload(db, newsletter, upload_data)
    else:
        await uploads.replace(
            NEWSLETTERS,
            newsletter.filename,
            pdf,
            commit=lambda stored: newsletter_crud.update_upload(
                db, newsletter, upload_data,
                filename=stored.filename,
                original_name=stored.original_name,
                file_size=stored.size,
            ),
        )

    return NewsletterUploadMutationResponse(message="Newsletter updated successfully", newsletter=newsletter)


@router.delete("/uploads/{upload_id}", response_model=MessageResponse)
async def delete_upload(
    upload_id: str,
    db: Session = Depends(get_db),
    uploads: UploadManager = Depends(get_upload_manager),
    current_principal: Principal = Depends(require_admin)
):
    """
    Delete a newsletter PDF and its record.

    **Permissions**: Admin only
    """
    newsletter = newsletter_crud.get_upload(db, upload_id)
    await uploads.remove(newsletter.filename, NEWSLETTERS)
    newsletter_crud.delete_upload(db, newsletter)
    logger.info(f"Newsletter {upload_id} deleted by {current_principal.username}")
    return MessageResponse(message="Newsletter deleted successfully")


@router.get("/uploads/{upload_id}/download")
async def download_upload(
    upload_id: str,
    db: Session = Depends(get_db),
    uploads: UploadManager = Depends(get_upload_manager)
):
    """Stream the PDF under its original name and count the download."""
    newsletter = newsletter_crud.get_upload(db, upload_id)

    if not uploads.exists(newsletter.filename, NEWSLETTERS):
        logger.error(f"Newsletter {newsletter.id} file is missing: {newsletter.filename}")
        raise NotFoundError("File not found")

    newsletter_crud.record_download(db, newsletter)
    return FileResponse(
        uploads.resolve(newsletter.filename, NEWSLETTERS),
        media_type="application/pdf",
        filename=newsletter.original_name,
    )


# ========================================
# STATISTICS
# ========================================

@router.get("/stats", response_model=NewsletterStats)
async def get_newsletter_stats(
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """**Permissions**: Admin only"""
    return newsletter_crud.get_stats(db)
