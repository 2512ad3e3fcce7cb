# app/schemas/alert.py
from typing import Any, Optional
from app.schemas.base import CamelModel, IsoDatetime


class CityOut(CamelModel):
    id: str
    name: str
    region: Optional[str] = None
    country: Optional[str] = None


class ZoneOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    status: str
    city_id: str


class SensorOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    type: str
    status: str
    location: str
    zone_id: str
    city_id: str


class SensorSummary(CamelModel):
    id: str
    name: str
    type: str
    status: str
    location: str


class SensorDataOut(CamelModel):
    id: str
    sensor_id: str
    alert_id: str
    data_value: dict[str, Any]
    timestamp: IsoDatetime


class ActionOut(CamelModel):
    id: str
    alert_id: str
    action_type: str
    description: Optional[str] = None
    performed_by: str
    timestamp: IsoDatetime


class Weather(CamelModel):
    temp: float = 0
    conditions: str = "Unknown"


class SensorFlags(CamelModel):
    """Which sensor families contributed to an alert, as shown on alert cards."""
    video: bool = False
    vibration: bool = False
    thermal: bool = False
    weather: Weather = Weather()


class AlertOut(CamelModel):
    id: str
    types: list[str]
    severity: str
    status: str
    timestamp: IsoDatetime
    location: str
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    zone_id: str
    city_id: str
    created_at: Optional[IsoDatetime] = None
    updated_at: Optional[IsoDatetime] = None


class AlertListItem(AlertOut):
    sensors: list[SensorSummary] = []
    sensor_data: SensorFlags
    latest_sensor_data: Optional[SensorDataOut] = None


class AlertListMeta(CamelModel):
    total: int
    offset: int
    limit: int
    timeframe: str
    generated: IsoDatetime


class AlertListOut(CamelModel):
    alerts: list[AlertListItem]
    meta: AlertListMeta


class AlertDetailOut(AlertOut):
    zone: Optional[ZoneOut] = None
    city: Optional[CityOut] = None
    sensors: list[SensorOut] = []
    sensor_data: list[SensorDataOut] = []
    actions: list[ActionOut] = []


class AlertCreate(CamelModel):
    """Body of POST /api/alerts. `alert` stays loose — normalization handles it."""
    alert: Optional[dict[str, Any]] = None
    zone_id: Optional[str] = None
    city_id: Optional[str] = None


class AlertCreated(CamelModel):
    success: bool = True
    alert_id: str
    timestamp: IsoDatetime


class AlertStatusUpdate(CamelModel):
    status: Optional[str] = None
    comment: Optional[str] = None
