# app/models/user.py
"""
Users and their login sessions.
Session rows are written by the external identity provider (database session
strategy); the backend only reads them to authenticate requests.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from app.models._ids import new_id


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200))
    email = Column(String(320), unique=True, nullable=False, index=True)
    city_id = Column(String(36), ForeignKey("cities.id"), nullable=True)   # scopes which alerts the user sees
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<User {self.email} city={self.city_id}>"


class AuthSession(Base):
    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=new_id)
    session_token = Column(String(255), unique=True, nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires = Column(DateTime, nullable=False)

    user = relationship("User")
