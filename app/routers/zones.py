# app/routers/zones.py
"""Zone endpoints — the live dashboard asks for its city's default zone before storing feed alerts."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.city import City
from app.schemas.zone import DefaultZoneOut
from app.services.zone_service import get_or_create_default_zone
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/zones/default", response_model=DefaultZoneOut, summary="Default zone for a city")
def get_default_zone(city_id: Optional[str] = Query(None, alias="cityId"), db: Session = Depends(get_db)):
    """Returns the city's oldest zone, creating 'Default Zone' if the city has none."""
    if not city_id:
        raise HTTPException(status_code=400, detail="cityId is required")
    if not db.query(City).filter(City.id == city_id).first():
        raise HTTPException(status_code=404, detail=f"City '{city_id}' not found")

    try:
        zone, is_new = get_or_create_default_zone(db, city_id)
    except Exception as e:
        logger.error(f"Error in default zone lookup: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return DefaultZoneOut(zone_id=zone.id, name=zone.name, is_new=is_new)
