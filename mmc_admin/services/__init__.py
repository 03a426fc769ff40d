# mmc_admin/services/__init__.py
"""
Service layer for newsletter subscription and campaign delivery.
"""

from mmc_admin.services.newsletter_service import NewsletterService, newsletter_service
from mmc_admin.services.campaign_service import CampaignService, campaign_service

__all__ = [
    "NewsletterService",
    "newsletter_service",
    "CampaignService",
    "campaign_service",
]
