# app/models/organization.py
"""
Organizations, their members and pending member invitations.
Invitations are addressed by an unguessable URL-safe token that goes into
the accept link emailed to the invitee.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.models._ids import new_id


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    city_id = Column(String(36), ForeignKey("cities.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class OrganizationMember(Base):
    __tablename__ = "organization_members"
    __table_args__ = (UniqueConstraint("organization_id", "user_id", name="uq_org_member"),)

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="MEMBER")   # OWNER | ADMIN | MEMBER
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(String(36), primary_key=True, default=new_id)
    token = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(320), nullable=False, index=True)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="MEMBER")
    status = Column(String(20), nullable=False, default="PENDING")   # PENDING | ACCEPTED | CANCELLED | EXPIRED
    invited_by_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)

    organization = relationship("Organization")
    invited_by = relationship("User")

    def __repr__(self):
        return f"<Invitation {self.email} org={self.organization_id} status={self.status}>"
