# mmc_admin/crud/newsletter.py
from sqlmodel import Session, select, func
from typing import List, Mapping, Optional

from mmc_admin.models.newsletter import (
    NewsletterSubscriber, NewsletterUpload, NewsletterCampaign,
    NewsletterCategory, CampaignAudience, CampaignStatus,
    default_delivery_stats,
)
from mmc_admin.schemas.newsletter import SubscriberUpdate, NewsletterUploadCreate, NewsletterUploadUpdate
from mmc_admin.core.clock import utcnow
from mmc_admin.core.query import ListSpec, FilterField, FilterKind, Page, list_records
from mmc_admin.crud.common import get_or_404, apply_changes, save

SUBSCRIBER_LIST_SPEC = ListSpec(
    model=NewsletterSubscriber,
    filters=(
        FilterField("unsubscribed", NewsletterSubscriber.unsubscribed, FilterKind.BOOLEAN),
        FilterField("source", NewsletterSubscriber.source),
    ),
    search_columns=(NewsletterSubscriber.email, NewsletterSubscriber.name),
    sort_fields={
        "createdAt": NewsletterSubscriber.created_at,
        "updatedAt": NewsletterSubscriber.updated_at,
        "email": NewsletterSubscriber.email,
        "name": NewsletterSubscriber.name,
    },
    default_limit=20,
)

UPLOAD_LIST_SPEC = ListSpec(
    model=NewsletterUpload,
    filters=(
        FilterField("category", NewsletterUpload.category, enum=NewsletterCategory),
    ),
    search_columns=(NewsletterUpload.name, NewsletterUpload.original_name),
    sort_fields={
        "createdAt": NewsletterUpload.created_at,
        "date": NewsletterUpload.date,
        "name": NewsletterUpload.name,
        "downloadCount": NewsletterUpload.download_count,
    },
    default_limit=20,
    forced=(NewsletterUpload.active == True,),
)

CAMPAIGN_LIST_SPEC = ListSpec(
    model=NewsletterCampaign,
    filters=(
        FilterField("status", NewsletterCampaign.status, enum=CampaignStatus),
        FilterField("sendTo", NewsletterCampaign.sent_to, enum=CampaignAudience),
    ),
    search_columns=(NewsletterCampaign.subject,),
    sort_fields={
        "createdAt": NewsletterCampaign.created_at,
        "sentAt": NewsletterCampaign.sent_at,
        "recipientCount": NewsletterCampaign.recipient_count,
    },
    default_limit=20,
)


class NewsletterCRUD:
    # ============================================================
    # Subscriber Operations
    # ============================================================

    def get_subscribers(self, db: Session, params: Mapping[str, str]) -> Page:
        return list_records(db, SUBSCRIBER_LIST_SPEC, params)

    def get_subscriber(self, db: Session, subscriber_id) -> NewsletterSubscriber:
        return get_or_404(db, NewsletterSubscriber, subscriber_id, "Subscriber")

    def get_subscriber_by_email(self, db: Session, email: str) -> Optional[NewsletterSubscriber]:
        return db.exec(
            select(NewsletterSubscriber).where(NewsletterSubscriber.email == email.lower())
        ).first()

    def create_subscriber(self, db: Session, email: str, name: Optional[str] = None,
                          source: str = "website") -> NewsletterSubscriber:
        subscriber = NewsletterSubscriber(email=email.lower(), name=name, source=source)
        return save(db, subscriber)

    def update_subscriber(self, db: Session, subscriber: NewsletterSubscriber,
                          data: SubscriberUpdate) -> NewsletterSubscriber:
        changes = data.model_dump(exclude_unset=True)
        if changes.get("source", "") is None:
            del changes["source"]
        if "preferences" in changes:
            # Reassign so the JSON column is flagged dirty
            changes["preferences"] = data.preferences.model_dump() if data.preferences else {
                "frequency": "weekly", "categories": []
            }
        apply_changes(subscriber, changes)
        return save(db, subscriber)

    def set_unsubscribed(self, db: Session, subscriber: NewsletterSubscriber,
                         unsubscribed: bool) -> NewsletterSubscriber:
        apply_changes(subscriber, {
            "unsubscribed": unsubscribed,
            "unsubscribed_at": utcnow() if unsubscribed else None,
        })
        return save(db, subscriber)

    def delete_subscriber(self, db: Session, subscriber: NewsletterSubscriber) -> None:
        db.delete(subscriber)
        db.commit()

    def get_recipients(self, db: Session, audience: CampaignAudience,
                       subscriber_ids: Optional[List[int]] = None) -> List[NewsletterSubscriber]:
        """Resolve a campaign audience to subscriber records."""
        query = select(NewsletterSubscriber)
        if audience == CampaignAudience.all:
            query = query.where(NewsletterSubscriber.unsubscribed == False)
        elif audience == CampaignAudience.selected:
            if not subscriber_ids:
                return []
            query = query.where(
                NewsletterSubscriber.id.in_(subscriber_ids),
                NewsletterSubscriber.unsubscribed == False,
            )
        else:
            query = query.where(NewsletterSubscriber.unsubscribed == True)
        return list(db.exec(query.order_by(NewsletterSubscriber.id)).all())

    # ============================================================
    # Upload Operations
    # ============================================================

    def get_uploads(self, db: Session, params: Mapping[str, str]) -> Page:
        return list_records(db, UPLOAD_LIST_SPEC, params)

    def get_upload(self, db: Session, upload_id) -> NewsletterUpload:
        return get_or_404(db, NewsletterUpload, upload_id, "Newsletter")

    def create_upload(self, db: Session, data: NewsletterUploadCreate, filename: str,
                      original_name: str, file_size: int) -> NewsletterUpload:
        upload = NewsletterUpload(
            name=data.name,
            category=data.category,
            date=data.date,
            filename=filename,
            original_name=original_name,
            file_size=file_size,
        )
        return save(db, upload)

    def update_upload(self, db: Session, upload: NewsletterUpload, data: NewsletterUploadUpdate,
                      filename: Optional[str] = None, original_name: Optional[str] = None,
                      file_size: Optional[int] = None) -> NewsletterUpload:
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if filename:
            changes.update(filename=filename, original_name=original_name, file_size=file_size)
        apply_changes(upload, changes)
        return save(db, upload)

    def record_download(self, db: Session, upload: NewsletterUpload) -> NewsletterUpload:
        upload.download_count = (upload.download_count or 0) + 1
        return save(db, upload)

    def delete_upload(self, db: Session, upload: NewsletterUpload) -> None:
        db.delete(upload)
        db.commit()

    # ============================================================
    # Campaign Operations
    # ============================================================

    def get_campaigns(self, db: Session, params: Mapping[str, str]) -> Page:
        return list_records(db, CAMPAIGN_LIST_SPEC, params)

    def get_campaign(self, db: Session, campaign_id) -> NewsletterCampaign:
        return get_or_404(db, NewsletterCampaign, campaign_id, "Campaign")

    def create_campaign(self, db: Session, subject: str, content: str, sent_to: CampaignAudience,
                        subscriber_ids: Optional[List[int]], recipient_count: int) -> NewsletterCampaign:
        campaign = NewsletterCampaign(
            subject=subject,
            content=content,
            sent_to=sent_to,
            subscriber_ids=subscriber_ids,
            recipient_count=recipient_count,
            status=CampaignStatus.pending,
            delivery_stats=default_delivery_stats(),
        )
        return save(db, campaign)

    def finish_campaign(self, db: Session, campaign: NewsletterCampaign, status: CampaignStatus,
                        delivered: int, bounced: int) -> NewsletterCampaign:
        """Move a pending campaign to its final status with delivery counts."""
        stats = dict(campaign.delivery_stats or default_delivery_stats())
        stats.update(delivered=delivered, bounced=bounced)
        apply_changes(campaign, {
            "status": status,
            "delivery_stats": stats,
            "sent_at": utcnow() if status == CampaignStatus.sent else None,
        })
        return save(db, campaign)

    def delete_campaign(self, db: Session, campaign: NewsletterCampaign) -> None:
        db.delete(campaign)
        db.commit()

    # ============================================================
    # Statistics
    # ============================================================

    def get_stats(self, db: Session) -> dict:
        def count(model, *conditions) -> int:
            query = select(func.count(model.id))
            if conditions:
                query = query.where(*conditions)
            return db.exec(query).one()

        total = count(NewsletterSubscriber)
        active = count(NewsletterSubscriber, NewsletterSubscriber.unsubscribed == False)
        return {
            "total_subscribers": total,
            "active_subscribers": active,
            "unsubscribed_count": count(NewsletterSubscriber, NewsletterSubscriber.unsubscribed == True),
            "total_campaigns": count(NewsletterCampaign),
            "total_uploads": count(NewsletterUpload, NewsletterUpload.active == True),
            "subscription_rate": f"{active / total * 100:.2f}" if total > 0 else "0.00",
        }


newsletter_crud = NewsletterCRUD()
