# app/models/alert.py
"""
Alerts table — one row per security event, whether ingested from the live
feed or posted by a client. Linked to its zone, city, the sensors that saw
it, their reading snapshots and the audit trail of actions taken on it.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, JSON, ForeignKey, Table
from sqlalchemy.orm import relationship
from app.database import Base
from app.models._ids import new_id


alert_sensors = Table(
    "alert_sensors",
    Base.metadata,
    Column("alert_id", String(36), ForeignKey("alerts.id", ondelete="CASCADE"), primary_key=True),
    Column("sensor_id", String(36), ForeignKey("sensors.id", ondelete="CASCADE"), primary_key=True),
)


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(String(36), primary_key=True, default=new_id)
    types = Column(JSON, nullable=False, default=lambda: ["OTHER"])   # non-empty list of AlertCategory values
    severity = Column(String(20), nullable=False, index=True)         # CRITICAL | HIGH | MEDIUM | LOW
    status = Column(String(20), nullable=False, default="UNRESOLVED", index=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    location = Column(String(300), nullable=False)
    description = Column(Text)
    thumbnail = Column(Text)                                          # URL or data URI
    zone_id = Column(String(36), ForeignKey("zones.id"), nullable=False, index=True)
    city_id = Column(String(36), ForeignKey("cities.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    zone = relationship("Zone")
    city = relationship("City")
    sensors = relationship("Sensor", secondary=alert_sensors, order_by="Sensor.created_at")
    sensor_data = relationship(
        "SensorData", order_by="SensorData.timestamp.desc()", cascade="all, delete-orphan"
    )
    actions = relationship(
        "Action", back_populates="alert", order_by="Action.timestamp.desc()", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Alert {self.id} types={self.types} severity={self.severity} status={self.status}>"
