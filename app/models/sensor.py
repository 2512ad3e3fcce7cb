# app/models/sensor.py
"""
Sensors and their readings.
Sensors are created lazily by sensor_service when an alert arrives for a
location nobody has registered yet. SensorData rows are immutable snapshots
attached to the alert that carried them.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.models._ids import new_id


class Sensor(Base):
    __tablename__ = "sensors"
    __table_args__ = (
        UniqueConstraint("zone_id", "city_id", "location_key", name="uq_sensor_zone_city_location"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(300), nullable=False)
    description = Column(Text)
    type = Column(String(20), nullable=False, default="VIDEO")      # VIDEO | THERMAL | MOTION | VIBRATION | AUDIO | WEATHER
    status = Column(String(20), nullable=False, default="ACTIVE")
    location = Column(String(300), nullable=False)
    location_key = Column(String(300), nullable=False)              # lower-cased, whitespace-collapsed location
    zone_id = Column(String(36), ForeignKey("zones.id"), nullable=False, index=True)
    city_id = Column(String(36), ForeignKey("cities.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<Sensor {self.id} type={self.type} location={self.location}>"


class SensorData(Base):
    __tablename__ = "sensor_data"

    id = Column(String(36), primary_key=True, default=new_id)
    sensor_id = Column(String(36), ForeignKey("sensors.id"), nullable=False, index=True)
    alert_id = Column(String(36), ForeignKey("alerts.id"), nullable=False, index=True)
    data_value = Column(JSON, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    sensor = relationship("Sensor")

    def __repr__(self):
        return f"<SensorData {self.id} sensor={self.sensor_id} alert={self.alert_id}>"
