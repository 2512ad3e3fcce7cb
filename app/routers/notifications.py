# app/routers/notifications.py
"""
POST /notifications — email and/or voice call, authenticated by `apiKey` in the body.
GET  /notifications — liveness check.
"""

import secrets
from fastapi import APIRouter, HTTPException
from app.config import settings
from app.schemas.notification import NotificationRequest
from app.services.notification_service import dispatch_notification, NotificationValidationError
from app.utils.time_utils import to_iso_z, utcnow
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _api_key_valid(api_key) -> bool:
    return bool(settings.API_SECRET_KEY and api_key) and secrets.compare_digest(
        str(api_key), settings.API_SECRET_KEY
    )


@router.post("/notifications", summary="Send email and/or voice notifications")
async def send_notification(body: NotificationRequest):
    if not _api_key_valid(body.api_key):
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        results = await dispatch_notification(body)
    except NotificationValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing notification: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to process notification: {e}")

    return {"success": True, "message": "Notification(s) processed", "results": results}


@router.get("/notifications", summary="Notification API liveness")
def notifications_status():
    return {"status": "API is running", "time": to_iso_z(utcnow())}
