"""
Outbound newsletter email.

``EMAIL_DELIVERY_MODE=simulate`` (the default) only logs what would be sent;
``smtp`` renders the newsletter template and delivers through aiosmtplib.
"""

from pathlib import Path
from typing import Optional
from datetime import datetime
import logging
import re

import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from jinja2 import Environment, FileSystemLoader, select_autoescape

from mmc_admin.core.config import settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates" / "email"

jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(['html', 'xml'])
)


def html_to_text(html_content: str) -> str:
    """Plain-text alternative for clients that do not render HTML."""
    text = re.sub(r'<br\s*/?>', '\n', html_content, flags=re.IGNORECASE)
    text = re.sub(r'</p\s*>', '\n\n', text, flags=re.IGNORECASE)
    return re.sub(r'<[^<]+?>', '', text).strip()


def build_message(to_email: str, subject: str, html_content: str) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["From"] = formataddr((settings.EMAIL_FROM_NAME, settings.EMAIL_FROM))
    message["To"] = to_email
    message["Subject"] = subject
    message.attach(MIMEText(html_to_text(html_content), "plain"))
    message.attach(MIMEText(html_content, "html"))
    return message


async def send_email(to_email: str, subject: str, html_content: str) -> bool:
    """
    Deliver one HTML message over SMTP.

    Returns:
        False when SMTP is not configured or the server refuses the message
    """
    if not settings.SMTP_HOST or not settings.EMAIL_FROM:
        logger.error(f"SMTP is not configured, dropping message to {to_email}")
        return False

    # 465 is implicit TLS, 587 upgrades with STARTTLS
    try:
        await aiosmtplib.send(
            build_message(to_email, subject, html_content),
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_PORT == 465,
            start_tls=settings.SMTP_PORT == 587,
        )
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error(f"SMTP delivery to {to_email} failed: {e}")
        return False

    logger.info(f"Delivered '{subject}' to {to_email}")
    return True


def render_newsletter(subject: str, content: str, recipient_name: Optional[str] = None) -> str:
    template = jinja_env.get_template("newsletter.html")
    return template.render(
        subject=subject,
        content=content,
        name=recipient_name,
        frontend_url=settings.FRONTEND_URL,
        current_year=datetime.now().year,
    )


async def send_newsletter_email(
    to_email: str,
    subject: str,
    content: str,
    recipient_name: Optional[str] = None
) -> bool:
    """
    Deliver one newsletter to one subscriber.

    Returns:
        True if the message was accepted for delivery
    """
    if settings.EMAIL_DELIVERY_MODE != "smtp":
        logger.info(f"Simulated newsletter '{subject}' to {to_email}")
        logger.debug(f"Content preview: {content[:100]}...")
        return True

    html_content = render_newsletter(subject, content, recipient_name)
    return await send_email(to_email, subject, html_content)
