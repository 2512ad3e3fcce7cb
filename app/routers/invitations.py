# app/routers/invitations.py
"""Organization member invitations — create, list pending, cancel, accept."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.organization import Organization
from app.models.user import User
from app.schemas.invitation import InvitationCreate, InvitationCreated, InvitationOut
from app.services.auth_service import get_current_user
from app.services import invitation_service as invitations
from app.services.invitation_service import InvitationError

router = APIRouter()


@router.post("/invitations", response_model=InvitationCreated, summary="Invite a member")
async def create_invitation(
    body: InvitationCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not body.email or not body.organization_id:
        raise HTTPException(status_code=400, detail="email and organizationId are required")
    try:
        invitation = invitations.create_invitation(db, user, body.email, body.organization_id, body.role)
    except InvitationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    org = db.query(Organization).filter(Organization.id == invitation.organization_id).first()
    email_sent = await invitations.send_invitation_email(invitation, org.name, user.name or user.email)
    return InvitationCreated(invitation=InvitationOut.model_validate(invitation), email_sent=email_sent)


@router.get("/organizations/{organization_id}/invitations", response_model=list[InvitationOut],
            summary="Pending invitations of an organization")
def list_invitations(organization_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if invitations.member_role(db, organization_id, user.id) not in invitations.INVITER_ROLES:
        raise HTTPException(status_code=403, detail="Only organization admins can view invitations")
    return invitations.list_pending(db, organization_id)


@router.post("/invitations/{token}/cancel", response_model=InvitationOut, summary="Cancel an invitation")
def cancel_invitation(token: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return invitations.cancel_invitation(db, token, user)
    except InvitationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/invitations/{token}/accept", summary="Accept an invitation")
def accept_invitation(token: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        member = invitations.accept_invitation(db, token, user)
    except InvitationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"success": True, "organizationId": member.organization_id, "role": member.role}
