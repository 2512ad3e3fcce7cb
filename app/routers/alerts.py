# app/routers/alerts.py
"""
Alert endpoints.
GET   /alerts              — filtered, paginated list (newest first)
POST  /alerts              — ingest one raw alert into a zone/city
GET   /alerts/{id}         — full alert with zone, city, sensors, readings, actions
PATCH /alerts/{id}/status  — status change + audit action (signed-in users)
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.schemas.alert import (
    AlertCreate, AlertCreated, AlertDetailOut, AlertListMeta, AlertListOut, AlertOut, AlertStatusUpdate,
)
from app.services.alert_service import get_alert, get_alert_detail, ingest_alert, list_alerts
from app.services.auth_service import get_current_user, get_optional_user
from app.services.status_service import change_status, is_valid_status, UNKNOWN_PERFORMER
from app.utils.time_utils import resolve_timeframe, utcnow
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/alerts", response_model=AlertListOut, summary="List alerts — filterable and paginated")
def get_alerts(
    status: Optional[str] = None,
    severity: Optional[str] = None,
    timeframe: str = "24h",
    city_id: Optional[str] = Query(None, alias="cityId"),
    zone_id: Optional[str] = Query(None, alias="zoneId"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    timeframe: 1h | 6h | 24h | 7d | 30d | all (unknown values mean 24h).
    Signed-in users with an assigned city see their own city unless cityId is given.
    """
    timeframe = resolve_timeframe(timeframe)
    if not city_id and user is not None:
        city_id = user.city_id

    try:
        alerts, total = list_alerts(
            db, offset=offset, limit=limit,
            status=status, severity=severity, city_id=city_id, zone_id=zone_id, timeframe=timeframe,
        )
    except Exception as e:
        logger.error(f"Alert listing failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return AlertListOut(
        alerts=alerts,
        meta=AlertListMeta(total=total, offset=offset, limit=limit, timeframe=timeframe, generated=utcnow()),
    )


@router.post("/alerts", response_model=AlertCreated, summary="Ingest an alert")
def create_alert(body: AlertCreate, db: Session = Depends(get_db)):
    """Normalizes the raw alert, resolves (or creates) its sensor and stores everything in one commit."""
    if not isinstance(body.alert, dict) or not body.alert or not body.zone_id or not body.city_id:
        raise HTTPException(status_code=400, detail="Missing required fields: alert, zoneId and cityId")

    try:
        alert = ingest_alert(db, body.alert, body.zone_id, body.city_id)
    except Exception as e:
        logger.error(f"Alert ingestion failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return AlertCreated(alert_id=alert.id, timestamp=alert.timestamp)


@router.get("/alerts/{alert_id}", response_model=AlertDetailOut, summary="Alert detail")
def get_alert_by_id(alert_id: str, db: Session = Depends(get_db)):
    try:
        detail = get_alert_detail(db, alert_id)
    except Exception as e:
        logger.error(f"Error fetching alert {alert_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    if detail is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return detail


@router.patch("/alerts/{alert_id}/status", response_model=AlertOut, summary="Change alert status")
def update_alert_status(
    alert_id: str,
    body: AlertStatusUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Any status may move to any other. The change is audited as a STATUS_CHANGE action."""
    if not is_valid_status(body.status):
        raise HTTPException(status_code=400, detail="Invalid status value")

    alert = get_alert(db, alert_id)
    if alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")

    try:
        return change_status(db, alert, body.status, body.comment, user.email or UNKNOWN_PERFORMER)
    except Exception as e:
        logger.error(f"Error updating alert status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
