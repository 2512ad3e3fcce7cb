# app/models/enums.py
"""
Enumerations shared by models, schemas and services.
Values are stored as plain strings in the database.
"""

import enum


class AlertCategory(str, enum.Enum):
    INTRUSION = "INTRUSION"
    ANOMALY = "ANOMALY"
    MOVEMENT = "MOVEMENT"
    FIRE = "FIRE"
    FLOOD = "FLOOD"
    TRAFFIC = "TRAFFIC"
    VIOLENCE = "VIOLENCE"
    CROWDED = "CROWDED"
    OTHER = "OTHER"
    NONE = "NONE"


class Severity(str, enum.Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class AlertStatus(str, enum.Enum):
    UNRESOLVED = "UNRESOLVED"
    INVESTIGATING = "INVESTIGATING"
    RESOLVED = "RESOLVED"


class SensorType(str, enum.Enum):
    VIDEO = "VIDEO"
    THERMAL = "THERMAL"
    MOTION = "MOTION"
    VIBRATION = "VIBRATION"
    AUDIO = "AUDIO"
    WEATHER = "WEATHER"


class Status(str, enum.Enum):
    """Operational status of zones and sensors."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    MAINTENANCE = "MAINTENANCE"


class ActionType(str, enum.Enum):
    STATUS_CHANGE = "STATUS_CHANGE"
    NOTE = "NOTE"
    NOTIFICATION = "NOTIFICATION"


class MemberRole(str, enum.Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class InvitationStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
