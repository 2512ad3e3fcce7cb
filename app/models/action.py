# app/models/action.py
"""
Append-only audit trail of changes made to an alert.
Rows are never updated or deleted by the application.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from app.models._ids import new_id


class Action(Base):
    __tablename__ = "actions"

    id = Column(String(36), primary_key=True, default=new_id)
    alert_id = Column(String(36), ForeignKey("alerts.id"), nullable=False, index=True)
    action_type = Column(String(50), nullable=False)   # STATUS_CHANGE | NOTE | NOTIFICATION
    description = Column(Text)
    performed_by = Column(String(320), nullable=False, default="System")
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    alert = relationship("Alert", back_populates="actions")

    def __repr__(self):
        return f"<Action {self.id} type={self.action_type} alert={self.alert_id}>"
