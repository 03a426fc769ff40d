# mmc_admin/services/campaign_service.py
"""
Campaign Service for sending newsletters and recording delivery.
"""
import logging
from sqlmodel import Session

from mmc_admin.crud.newsletter import newsletter_crud
from mmc_admin.models.newsletter import NewsletterCampaign, CampaignStatus
from mmc_admin.schemas.newsletter import CampaignSend
from mmc_admin.core import email as email_service
from mmc_admin.core.exceptions import ValidationError, DeliveryFailedError

logger = logging.getLogger(__name__)


class CampaignService:
    """Service for sending newsletter campaigns."""

    @staticmethod
    async def send_campaign(db: Session, data: CampaignSend) -> NewsletterCampaign:
        """
        Send a newsletter to the requested audience.

        The campaign is stored as pending, each recipient is handed to the
        email collaborator, and the campaign then moves to sent (at least one
        delivery) or failed, exactly once.

        Raises:
            ValidationError: the audience resolves to no recipients
            DeliveryFailedError: nothing could be delivered
        """
        recipients = newsletter_crud.get_recipients(db, data.send_to, data.subscriber_ids)
        if not recipients:
            raise ValidationError("No recipients found", fields=["sendTo"])

        campaign = newsletter_crud.create_campaign(
            db,
            subject=data.subject,
            content=data.content,
            sent_to=data.send_to,
            subscriber_ids=data.subscriber_ids,
            recipient_count=len(recipients),
        )
        logger.info(f"Campaign {campaign.id} sending to {len(recipients)} recipients ({data.send_to.value})")

        delivered = 0
        bounced = 0
        for subscriber in recipients:
            try:
                success = await email_service.send_newsletter_email(
                    to_email=subscriber.email,
                    subject=data.subject,
                    content=data.content,
                    recipient_name=subscriber.name,
                )
            except Exception as e:
                logger.error(f"Campaign {campaign.id}: failed to send to {subscriber.email}: {e}")
                success = False

            if success:
                delivered += 1
            else:
                bounced += 1

        status = CampaignStatus.sent if delivered > 0 else CampaignStatus.failed
        campaign = newsletter_crud.finish_campaign(db, campaign, status, delivered, bounced)
        logger.info(f"Campaign {campaign.id} {status.value}: {delivered} delivered, {bounced} bounced")

        if status == CampaignStatus.failed:
            raise DeliveryFailedError(details={"campaignId": campaign.id})
        return campaign


campaign_service = CampaignService()
