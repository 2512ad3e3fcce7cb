# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + live alert feed.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.utils.time_utils import to_iso_z, utcnow

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(request: Request, db: Session = Depends(get_db)):
    result = {
        "status": "ok",
        "timestamp": to_iso_z(utcnow()),
        "backend": "ok",
        "database": "unknown",
        "liveFeed": "disabled",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    client = getattr(request.app.state, "live_feed", None)
    if client is not None:
        result["liveFeed"] = client.state.value.lower()
        if client.state.value == "FAILED":
            result["status"] = "degraded"

    return result
