# app/schemas/zone.py
from app.schemas.base import CamelModel


class DefaultZoneOut(CamelModel):
    success: bool = True
    zone_id: str
    name: str
    is_new: bool
