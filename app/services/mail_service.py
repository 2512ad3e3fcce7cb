# app/services/mail_service.py
"""
Outbound email over SMTP.
Used by notification dispatch and by member invitations.
smtplib is blocking, so async callers go through send_mail_async (worker thread).
"""

import asyncio
import smtplib
import uuid
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Optional, Union
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

Recipients = Union[str, list[str]]


class MailNotConfigured(RuntimeError):
    pass


@dataclass
class MailResult:
    message_id: str
    recipients: list[str]


def _as_list(value: Optional[Recipients]) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [v for v in value if v]


def build_message(
    subject: str,
    to: Recipients,
    text: str,
    sender_name: Optional[str] = None,
    reply_to: Optional[str] = None,
    is_important: bool = False,
    cc: Optional[Recipients] = None,
    html: Optional[str] = None,
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = formataddr((sender_name or settings.MAIL_SENDER_NAME, settings.SMTP_USER or ""))
    msg["To"] = ", ".join(_as_list(to))
    if cc:
        msg["Cc"] = ", ".join(_as_list(cc))
    msg["Subject"] = subject
    msg["Reply-To"] = reply_to or settings.SMTP_USER or ""
    msg["Message-ID"] = make_msgid(idstring=uuid.uuid4().hex[:12])
    if is_important:
        msg["Importance"] = "high"
        msg["X-Priority"] = "1"
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")
    return msg


def send_mail(subject: str, to: Recipients, text: str, **options) -> MailResult:
    """Send one email. Raises on configuration or SMTP errors."""
    if not settings.SMTP_ENABLED:
        raise MailNotConfigured("SMTP credentials are not configured")

    msg = build_message(subject, to, text, **options)
    recipients = _as_list(to) + _as_list(options.get("cc"))

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as smtp:
        if settings.SMTP_USE_TLS:
            smtp.starttls()
        smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        smtp.send_message(msg, to_addrs=recipients)

    logger.info(f"[MAIL] Sent '{subject}' to {len(recipients)} recipient(s)")
    return MailResult(message_id=msg["Message-ID"], recipients=recipients)


async def send_mail_async(subject: str, to: Recipients, text: str, **options) -> MailResult:
    return await asyncio.to_thread(send_mail, subject, to, text, **options)
