"""Outbound email over SMTP. Never raises; failures are logged and reported in the result."""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    ok: bool
    id: Optional[str] = None
    dev: bool = False


def wrap_html(html: str) -> str:
    return (
        '<!doctype html><html><head><meta charset="utf-8"/></head>'
        '<body style="font-family:Arial,Helvetica,sans-serif;line-height:1.4">'
        f"{html}</body></html>"
    )


async def _send_async(msg: EmailMessage) -> None:
    await aiosmtplib.send(
        msg,
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME or None,
        password=settings.SMTP_PASSWORD or None,
        start_tls=bool(settings.SMTP_USERNAME),
    )


def send_email(to: str, subject: str, html: str, text: Optional[str] = None) -> EmailResult:
    """Send an HTML email (with optional plain-text part)."""
    if not settings.SMTP_HOST:
        logger.info("[dev email] to=%s subject=%s", to, subject)
        return EmailResult(ok=True, dev=True)

    message_id = f"<{uuid.uuid4()}@{settings.SMTP_FROM.split('@')[-1]}>"
    msg = EmailMessage()
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to
    msg["Subject"] = subject
    msg["Message-ID"] = message_id
    msg.set_content(text or subject)
    msg.add_alternative(wrap_html(html), subtype="html")
    try:
        asyncio.run(_send_async(msg))
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email to %s: %s", to, exc)
        return EmailResult(ok=False)
    logger.info("Sent email '%s' to %s", subject, to)
    return EmailResult(ok=True, id=message_id)
