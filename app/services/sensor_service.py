# app/services/sensor_service.py
"""
Sensor resolution: find the sensor covering an alert's location, or create one.

Lookup is a case-insensitive substring match of the alert location inside the
stored sensor locations, scoped to zone + city, oldest sensor first.
New sensors get their type from keywords in the location name.

Nothing here commits — the caller owns the transaction.
"""

import re
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.sensor import Sensor
from app.models.enums import SensorType, Status
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Checked in order; first keyword found in the location wins
SENSOR_TYPE_KEYWORDS = [
    (("camera", "video"), SensorType.VIDEO),
    (("thermal",), SensorType.THERMAL),
    (("motion",), SensorType.MOTION),
    (("vibration",), SensorType.VIBRATION),
    (("audio",), SensorType.AUDIO),
    (("weather",), SensorType.WEATHER),
]
DEFAULT_SENSOR_TYPE = SensorType.VIDEO


def location_key(location: str) -> str:
    """'  North  Perimeter ' -> 'north perimeter'"""
    return re.sub(r"\s+", " ", (location or "").strip()).lower()


def infer_sensor_type(location: str) -> str:
    lowered = (location or "").lower()
    for keywords, sensor_type in SENSOR_TYPE_KEYWORDS:
        if any(k in lowered for k in keywords):
            return sensor_type.value
    return DEFAULT_SENSOR_TYPE.value


def find_sensor(db: Session, location: str, zone_id: str, city_id: str):
    """Oldest sensor in the zone whose location contains `location` (any case)."""
    return (
        db.query(Sensor)
        .filter(
            Sensor.zone_id == zone_id,
            Sensor.city_id == city_id,
            Sensor.location.icontains(location.strip(), autoescape=True),
        )
        .order_by(Sensor.created_at.asc())
        .first()
    )


def build_sensor(location: str, zone_id: str, city_id: str) -> Sensor:
    sensor_type = infer_sensor_type(location)
    location = location.strip()
    return Sensor(
        name=f"{location} Sensor",
        description=f"{sensor_type.title()} sensor auto-created for alerts at {location}",
        type=sensor_type,
        status=Status.ACTIVE.value,
        location=location,
        location_key=location_key(location),
        zone_id=zone_id,
        city_id=city_id,
    )


def find_or_create_sensor(db: Session, location: str, zone_id: str, city_id: str) -> Sensor:
    """
    Return the sensor for `location`, creating it if needed.
    Must be the first write of the caller's transaction: a lost creation race
    rolls the session back and re-reads the row the other writer inserted.
    """
    sensor = find_sensor(db, location, zone_id, city_id)
    if sensor:
        return sensor

    sensor = build_sensor(location, zone_id, city_id)
    db.add(sensor)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.info(f"[SENSOR] Concurrent creation for '{location}' in zone {zone_id} — reusing existing")
        sensor = find_sensor(db, location, zone_id, city_id) or (
            db.query(Sensor)
            .filter(
                Sensor.zone_id == zone_id,
                Sensor.city_id == city_id,
                Sensor.location_key == location_key(location),
            )
            .first()
        )
        if sensor is None:
            raise
        return sensor

    logger.info(f"[SENSOR] Created {sensor.type} sensor '{sensor.name}' in zone {zone_id}")
    return sensor
