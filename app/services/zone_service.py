# app/services/zone_service.py
"""Default zone lookup — every city gets one on first access."""

from sqlalchemy.orm import Session
from app.models.zone import Zone
from app.models.enums import Status
from app.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ZONE_NAME = "Default Zone"
DEFAULT_ZONE_DESCRIPTION = "Automatically created for security monitoring"


def get_or_create_default_zone(db: Session, city_id: str) -> tuple[Zone, bool]:
    """Returns (zone, is_new). The city's oldest zone is its default."""
    zone = (
        db.query(Zone)
        .filter(Zone.city_id == city_id)
        .order_by(Zone.created_at.asc())
        .first()
    )
    if zone:
        return zone, False

    zone = Zone(
        name=DEFAULT_ZONE_NAME,
        description=DEFAULT_ZONE_DESCRIPTION,
        status=Status.ACTIVE.value,
        city_id=city_id,
    )
    db.add(zone)
    db.commit()
    db.refresh(zone)
    logger.info(f"[ZONE] Created default zone {zone.id} for city {city_id}")
    return zone, True
