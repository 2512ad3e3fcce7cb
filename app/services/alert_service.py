# app/services/alert_service.py
"""
Alert ingestion and retrieval.
Used by the alerts router (POST/GET /api/alerts) and by the live feed listener.

Ingestion writes the sensor (if new), the alert, its sensor link and the
optional sensor-data snapshot in one transaction.
"""

from datetime import datetime
from typing import Any, Optional
from sqlalchemy.orm import Session, selectinload
from app.models.alert import Alert
from app.models.sensor import SensorData
from app.models.enums import SensorType
from app.schemas.alert import (
    ActionOut, AlertDetailOut, AlertListItem, AlertOut, CityOut, SensorDataOut,
    SensorFlags, SensorOut, SensorSummary, Weather, ZoneOut,
)
from app.services.alert_normalizer import NormalizedAlert, normalize_alert
from app.services.sensor_service import find_or_create_sensor
from app.utils.json_parser import as_dict
from app.utils.time_utils import timeframe_start
from app.utils.logger import get_logger

logger = get_logger(__name__)

DETAIL_SENSOR_DATA_LIMIT = 100


def ingest_alert(db: Session, raw_alert: Any, zone_id: str, city_id: str) -> Alert:
    """Normalize, resolve sensor, persist. Commits on success, rolls back on any failure."""
    event = normalize_alert(raw_alert)
    try:
        alert = _persist(db, event, zone_id, city_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.warning(
        f"[ALERT][{'/'.join(event.types)}] {event.severity} at {event.location}: {event.description}"
    )
    return alert


def _persist(db: Session, event: NormalizedAlert, zone_id: str, city_id: str) -> Alert:
    sensor = find_or_create_sensor(db, event.location, zone_id, city_id)

    alert = Alert(
        types=event.types,
        severity=event.severity,
        status=event.status,
        timestamp=event.timestamp,
        location=event.location,
        description=event.description,
        thumbnail=event.thumbnail,
        zone_id=zone_id,
        city_id=city_id,
    )
    alert.sensors = [sensor]
    db.add(alert)
    db.flush()

    if event.sensor_data:
        db.add(SensorData(
            sensor_id=sensor.id,
            alert_id=alert.id,
            data_value=event.sensor_data,
            timestamp=event.timestamp,
        ))
    return alert


# ── Retrieval ────────────────────────────────────────────────────────────────

def query_alerts(
    db: Session,
    status: Optional[str] = None,
    severity: Optional[str] = None,
    city_id: Optional[str] = None,
    zone_id: Optional[str] = None,
    timeframe: str = "24h",
    now: Optional[datetime] = None,
):
    """Filtered (unordered, unpaged) alert query."""
    q = db.query(Alert)
    if status:
        q = q.filter(Alert.status == status.upper())
    if severity:
        q = q.filter(Alert.severity == severity.upper())
    if city_id:
        q = q.filter(Alert.city_id == city_id)
    if zone_id:
        q = q.filter(Alert.zone_id == zone_id)
    since = timeframe_start(timeframe, now)
    if since is not None:
        q = q.filter(Alert.timestamp >= since)
    return q


def list_alerts(db: Session, offset: int = 0, limit: int = 50, **filters) -> tuple[list[AlertListItem], int]:
    """Returns (page of enriched alerts newest first, total matching count)."""
    q = query_alerts(db, **filters)
    total = q.count()
    alerts = (
        q.options(selectinload(Alert.sensors))
        .order_by(Alert.timestamp.desc(), Alert.created_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    latest = latest_sensor_data(db, [a.id for a in alerts])
    return [to_list_item(a, latest.get(a.id)) for a in alerts], total


def latest_sensor_data(db: Session, alert_ids: list[str]) -> dict[str, SensorData]:
    """Most recent snapshot per alert id."""
    if not alert_ids:
        return {}
    rows = (
        db.query(SensorData)
        .filter(SensorData.alert_id.in_(alert_ids))
        .order_by(SensorData.timestamp.desc())
        .all()
    )
    latest = {}
    for row in rows:
        latest.setdefault(row.alert_id, row)
    return latest


def sensor_flags(alert: Alert, latest: Optional[SensorData]) -> SensorFlags:
    """
    A flag is set when the latest reading says so, or when a linked sensor of
    that family exists. Weather comes from the reading only.
    """
    payload = as_dict(latest.data_value) if latest is not None else {}
    sensor_types = {s.type for s in alert.sensors}
    weather = as_dict(payload.get("weather"))

    return SensorFlags(
        video=bool(payload.get("video")) or SensorType.VIDEO.value in sensor_types,
        vibration=bool(payload.get("vibration")) or SensorType.VIBRATION.value in sensor_types,
        thermal=bool(payload.get("thermal")) or SensorType.THERMAL.value in sensor_types,
        weather=Weather(
            temp=_as_number(weather.get("temp")),
            conditions=str(weather.get("conditions") or "Unknown"),
        ),
    )


def _as_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def to_list_item(alert: Alert, latest: Optional[SensorData]) -> AlertListItem:
    return AlertListItem(
        id=alert.id,
        types=alert.types or ["OTHER"],
        severity=alert.severity,
        status=alert.status,
        timestamp=alert.timestamp,
        location=alert.location,
        description=alert.description,
        thumbnail=alert.thumbnail,
        zone_id=alert.zone_id,
        city_id=alert.city_id,
        created_at=alert.created_at,
        updated_at=alert.updated_at,
        sensors=[SensorSummary.model_validate(s) for s in alert.sensors],
        sensor_data=sensor_flags(alert, latest),
        latest_sensor_data=SensorDataOut.model_validate(latest) if latest is not None else None,
    )


def get_alert(db: Session, alert_id: str) -> Optional[Alert]:
    return db.query(Alert).filter(Alert.id == alert_id).first()


def get_alert_detail(db: Session, alert_id: str) -> Optional[AlertDetailOut]:
    """Full alert with zone, city, sensors, latest 100 readings and all actions."""
    alert = (
        db.query(Alert)
        .options(selectinload(Alert.sensors), selectinload(Alert.actions))
        .filter(Alert.id == alert_id)
        .first()
    )
    if not alert:
        return None

    readings = (
        db.query(SensorData)
        .filter(SensorData.alert_id == alert_id)
        .order_by(SensorData.timestamp.desc())
        .limit(DETAIL_SENSOR_DATA_LIMIT)
        .all()
    )
    return AlertDetailOut(
        **AlertOut.model_validate(alert).model_dump(),
        zone=ZoneOut.model_validate(alert.zone) if alert.zone else None,
        city=CityOut.model_validate(alert.city) if alert.city else None,
        sensors=[SensorOut.model_validate(s) for s in alert.sensors],
        sensor_data=[SensorDataOut.model_validate(r) for r in readings],
        actions=[ActionOut.model_validate(a) for a in alert.actions],
    )
