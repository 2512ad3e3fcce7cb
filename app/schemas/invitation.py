# app/schemas/invitation.py
from typing import Optional
from app.schemas.base import CamelModel, IsoDatetime


class InvitationCreate(CamelModel):
    email: Optional[str] = None
    organization_id: Optional[str] = None
    role: str = "MEMBER"


class InvitationOut(CamelModel):
    id: str
    token: str
    email: str
    organization_id: str
    role: str
    status: str
    created_at: IsoDatetime
    expires_at: IsoDatetime


class InvitationCreated(CamelModel):
    success: bool = True
    invitation: InvitationOut
    email_sent: bool
