# app/services/alert_normalizer.py
"""
Normalizes raw alert events (live feed frames or POST /api/alerts payloads)
into a NormalizedAlert ready for persistence.

Accepted shapes for the category:
  - "types": ["intrusion", "fire"]   current producers
  - "type":  "intrusion"             legacy producers
  - neither                          -> ["OTHER"]

Never raises: anything missing or unrecognised falls back to a default.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from app.models.enums import AlertCategory, Severity, AlertStatus
from app.utils.json_parser import as_dict
from app.utils.time_utils import parse_timestamp, utcnow

CATEGORY_MAP = {c.value.lower(): c.value for c in AlertCategory}
SEVERITY_MAP = {s.value.lower(): s.value for s in Severity}
STATUS_MAP = {s.value.lower(): s.value for s in AlertStatus}

DEFAULT_CATEGORY = AlertCategory.OTHER.value
DEFAULT_SEVERITY = Severity.LOW.value
DEFAULT_STATUS = AlertStatus.UNRESOLVED.value
DEFAULT_LOCATION = "Unknown location"

# Fits the location columns, leaving room for the " Sensor" name suffix
LOCATION_MAX_LENGTH = 255


@dataclass
class NormalizedAlert:
    types: list[str]
    severity: str
    status: str
    timestamp: datetime
    location: str
    description: str
    thumbnail: Optional[str] = None
    sensor_data: Optional[dict] = None
    raw: dict = field(default_factory=dict, repr=False)


def _clean(value: Any) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def map_category(value: Any) -> str:
    return CATEGORY_MAP.get(_clean(value), DEFAULT_CATEGORY)


def map_severity(value: Any) -> str:
    return SEVERITY_MAP.get(_clean(value), DEFAULT_SEVERITY)


def map_status(value: Any) -> str:
    return STATUS_MAP.get(_clean(value), DEFAULT_STATUS)


def map_types(raw: dict) -> list[str]:
    types = raw.get("types")
    if isinstance(types, list) and types:
        return [map_category(t) for t in types]
    legacy = raw.get("type")
    if legacy:
        return [map_category(legacy)]
    return [DEFAULT_CATEGORY]


def clean_location(value: Any) -> str:
    location = str(value or "").strip()[:LOCATION_MAX_LENGTH].rstrip()
    return location or DEFAULT_LOCATION


def has_category(raw: dict) -> bool:
    """True when the event carries any category field at all."""
    types = raw.get("types")
    return bool((isinstance(types, list) and types) or raw.get("type"))


def normalize_alert(raw: Any) -> NormalizedAlert:
    """Map a raw alert event onto the canonical enumerations."""
    raw = as_dict(raw)
    sensor_data = raw.get("sensorData")
    thumbnail = raw.get("thumbnail")

    return NormalizedAlert(
        types=map_types(raw),
        severity=map_severity(raw.get("severity")),
        status=map_status(raw.get("status")),
        timestamp=parse_timestamp(raw.get("timestamp")) or utcnow(),
        location=clean_location(raw.get("location")),
        description=str(raw.get("description") or "").strip(),
        thumbnail=thumbnail if isinstance(thumbnail, str) and thumbnail else None,
        sensor_data=sensor_data if isinstance(sensor_data, dict) and sensor_data else None,
        raw=raw,
    )
