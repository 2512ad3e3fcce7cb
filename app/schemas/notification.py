# app/schemas/notification.py
"""
POST /api/notifications body. Field names match the dashboard client;
`notificationType` is one of email | call | both.
"""

from typing import Any, Optional, Union
from app.schemas.base import CamelModel


class NotificationRequest(CamelModel):
    api_key: Optional[str] = None
    notification_type: Optional[str] = None
    # Email
    recipient: Optional[Union[str, list[str]]] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    sender_name: Optional[str] = None
    reply_to: Optional[str] = None
    is_important: bool = False
    cc: Optional[Union[str, list[str]]] = None
    # Call
    phone_number: Optional[str] = None
    voice: Optional[str] = None
    language: Optional[str] = None
    loop: Optional[int] = None
    pause_duration: Optional[int] = None
    intro_pause: Optional[int] = None
    second_message: Optional[str] = None
    # Content generation
    ai_context: Optional[dict[str, Any]] = None
