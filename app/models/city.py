# app/models/city.py
"""
Cities — top-level administrative grouping. Users, zones, sensors and alerts
all belong to exactly one city.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base
from app.models._ids import new_id


class City(Base):
    __tablename__ = "cities"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    region = Column(String(200))
    country = Column(String(100))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    zones = relationship("Zone", back_populates="city", order_by="Zone.created_at")

    def __repr__(self):
        return f"<City {self.id} name={self.name}>"
