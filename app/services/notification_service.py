# app/services/notification_service.py
"""
Notification dispatch for POST /api/notifications.

notificationType:
  email → SMTP (mail_service)
  call  → Twilio voice call (voice_service)
  both  → email then call; a failure in one channel does not stop the other

Required fields are checked for every requested channel before anything is
sent. When `aiContext` is given the message text is generated first; if that
fails the caller's own `message` is used.
"""

from app.schemas.notification import NotificationRequest
from app.services.content_service import generate_message
from app.services.mail_service import send_mail_async
from app.services.voice_service import CallOptions, make_call, DEFAULT_VOICE, DEFAULT_LANGUAGE
from app.utils.logger import get_logger

logger = get_logger(__name__)

NOTIFICATION_TYPES = {"email", "call", "both"}


class NotificationValidationError(ValueError):
    pass


def wants_email(req: NotificationRequest) -> bool:
    return req.notification_type in ("email", "both")


def wants_call(req: NotificationRequest) -> bool:
    return req.notification_type in ("call", "both")


def validate_channels(req: NotificationRequest, message_available: bool) -> None:
    if req.notification_type not in NOTIFICATION_TYPES:
        raise NotificationValidationError("notificationType must be one of: email, call, both")
    if wants_email(req) and not (req.recipient and req.subject and message_available):
        raise NotificationValidationError("Missing required fields for email")
    if wants_call(req) and not (req.phone_number and message_available):
        raise NotificationValidationError("Missing required fields for call")


def call_options(req: NotificationRequest) -> CallOptions:
    return CallOptions(
        voice=req.voice or DEFAULT_VOICE,
        language=req.language or DEFAULT_LANGUAGE,
        loop=req.loop or 1,
        pause_duration=req.pause_duration if req.pause_duration is not None else 1,
        intro_pause=req.intro_pause or 0,
        second_message=req.second_message or None,
    )


async def dispatch_notification(req: NotificationRequest) -> dict:
    """Returns per-channel results: {"email"?: {...}, "call"?: {...}, "aiGenerated"?: {...}}."""
    # Everything except the message can be checked before spending a generation call
    validate_channels(req, message_available=True)

    results = {}
    message = req.message

    if req.ai_context:
        try:
            message = await generate_message(req.ai_context)
            results["aiGenerated"] = {"success": True, "message": message}
        except Exception as e:
            logger.error(f"[AI] Content generation failed: {e}")
            results["aiGenerated"] = {"success": False, "error": str(e)}

    validate_channels(req, message_available=bool(message))

    if wants_email(req):
        try:
            mail = await send_mail_async(
                req.subject, req.recipient, message,
                sender_name=req.sender_name,
                reply_to=req.reply_to,
                is_important=req.is_important,
                cc=req.cc,
            )
            results["email"] = {"success": True, "messageId": mail.message_id}
        except Exception as e:
            logger.error(f"[MAIL] Sending failed: {e}", exc_info=True)
            results["email"] = {"success": False, "error": str(e)}

    if wants_call(req):
        try:
            results["call"] = await make_call(req.phone_number, message, call_options(req))
        except Exception as e:
            logger.error(f"[CALL] Call failed: {e}", exc_info=True)
            results["call"] = {"success": False, "error": str(e)}

    return results
