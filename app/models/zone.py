# app/models/zone.py
"""
Zones within a city. The oldest zone of a city acts as its default zone and
is created on demand by zone_service.get_or_create_default_zone.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from app.models._ids import new_id


class Zone(Base):
    __tablename__ = "zones"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    status = Column(String(20), nullable=False, default="ACTIVE")   # ACTIVE | INACTIVE | MAINTENANCE
    city_id = Column(String(36), ForeignKey("cities.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    city = relationship("City", back_populates="zones")

    def __repr__(self):
        return f"<Zone {self.id} name={self.name} city={self.city_id}>"
