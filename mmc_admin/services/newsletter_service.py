# mmc_admin/services/newsletter_service.py
"""
Subscription lifecycle for newsletter subscribers.
"""
import logging
from typing import Tuple
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from mmc_admin.crud.newsletter import newsletter_crud
from mmc_admin.models.newsletter import NewsletterSubscriber
from mmc_admin.schemas.newsletter import SubscriberCreate
from mmc_admin.core.exceptions import AlreadySubscribedError

logger = logging.getLogger(__name__)


class NewsletterService:
    """Service for subscribing, unsubscribing and resubscribing."""

    @staticmethod
    def subscribe(db: Session, data: SubscriberCreate) -> Tuple[NewsletterSubscriber, bool]:
        """
        Subscribe an email address.

        A previously unsubscribed address is resubscribed in place and its
        unsubscribe stamp cleared.

        Returns:
            Tuple of (subscriber, created) where created is False for a resubscribe

        Raises:
            AlreadySubscribedError: the address is already an active subscriber
        """
        email = str(data.email).lower()
        existing = newsletter_crud.get_subscriber_by_email(db, email)

        if existing:
            if not existing.unsubscribed:
                logger.info(f"Rejected duplicate subscription for {email}")
                raise AlreadySubscribedError()
            subscriber = newsletter_crud.set_unsubscribed(db, existing, False)
            logger.info(f"Resubscribed {email}")
            return subscriber, False

        try:
            subscriber = newsletter_crud.create_subscriber(db, email, data.name, data.source)
        except IntegrityError:
            # Lost a race with a concurrent subscribe of the same address
            db.rollback()
            logger.info(f"Rejected duplicate subscription for {email}")
            raise AlreadySubscribedError()
        logger.info(f"New newsletter subscriber {email} via {data.source}")
        return subscriber, True

    @staticmethod
    def unsubscribe(db: Session, subscriber: NewsletterSubscriber) -> NewsletterSubscriber:
        subscriber = newsletter_crud.set_unsubscribed(db, subscriber, True)
        logger.info(f"Unsubscribed {subscriber.email}")
        return subscriber

    @staticmethod
    def resubscribe(db: Session, subscriber: NewsletterSubscriber) -> NewsletterSubscriber:
        """
        Raises:
            AlreadySubscribedError: the subscriber is already active
        """
        if not subscriber.unsubscribed:
            raise AlreadySubscribedError()
        subscriber = newsletter_crud.set_unsubscribed(db, subscriber, False)
        logger.info(f"Resubscribed {subscriber.email}")
        return subscriber


newsletter_service = NewsletterService()
