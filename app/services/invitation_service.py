# app/services/invitation_service.py
"""
Organization member invitations.

Only OWNER / ADMIN members may invite. An invitation is a PENDING row with a
random URL-safe token and an expiry; the invitee receives an email with the
accept link {APP_BASE_URL}/invitations/{token}. Accepting creates the
membership; cancelling or expiry closes the invitation.
"""

import secrets
from html import escape
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from app.config import settings
from app.models.organization import Organization, OrganizationMember, Invitation
from app.models.user import User
from app.models.enums import MemberRole, InvitationStatus
from app.services.mail_service import send_mail_async
from app.utils.logger import get_logger

logger = get_logger(__name__)

INVITER_ROLES = {MemberRole.OWNER.value, MemberRole.ADMIN.value}
INVITABLE_ROLES = {MemberRole.ADMIN.value, MemberRole.MEMBER.value}


class InvitationError(Exception):
    """Carries the HTTP status the router should answer with."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def member_role(db: Session, organization_id: str, user_id: str) -> Optional[str]:
    member = db.query(OrganizationMember).filter(
        OrganizationMember.organization_id == organization_id,
        OrganizationMember.user_id == user_id,
    ).first()
    return member.role if member else None


def create_invitation(db: Session, inviter: User, email: str, organization_id: str,
                      role: str = MemberRole.MEMBER.value) -> Invitation:
    email = (email or "").strip().lower()
    role = (role or MemberRole.MEMBER.value).upper()
    if not email or "@" not in email:
        raise InvitationError("A valid email is required")
    if role not in INVITABLE_ROLES:
        raise InvitationError(f"Invalid role: {role}")

    org = db.query(Organization).filter(Organization.id == organization_id).first()
    if not org:
        raise InvitationError("Organization not found", 404)
    if member_role(db, organization_id, inviter.id) not in INVITER_ROLES:
        raise InvitationError("Only organization admins can invite members", 403)

    now = datetime.utcnow()
    existing = db.query(Invitation).filter(
        Invitation.organization_id == organization_id,
        Invitation.email == email,
        Invitation.status == InvitationStatus.PENDING.value,
        Invitation.expires_at > now,
    ).first()
    if existing:
        raise InvitationError(f"{email} already has a pending invitation")

    invitation = Invitation(
        token=secrets.token_urlsafe(32),
        email=email,
        organization_id=organization_id,
        role=role,
        status=InvitationStatus.PENDING.value,
        invited_by_id=inviter.id,
        created_at=now,
        expires_at=now + timedelta(days=settings.INVITATION_EXPIRY_DAYS),
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)
    logger.info(f"[INVITE] {inviter.email} invited {email} to {org.name} as {role}")
    return invitation


def invite_url(invitation: Invitation) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/invitations/{invitation.token}"


def render_invitation_email(invitation: Invitation, organization_name: str,
                            invited_by_name: Optional[str] = None) -> tuple[str, str]:
    """Returns (plain text, html)."""
    who = f"{invited_by_name} has" if invited_by_name else "You have"
    expires = invitation.expires_at.strftime("%A, %B %d, %Y")
    url = invite_url(invitation)
    text = (
        f"{who} invited you ({invitation.email}) to join {organization_name}.\n\n"
        f"Accept the invitation: {url}\n\n"
        f"This invitation will expire on {expires}. If you did not expect this "
        f"invitation, you can safely ignore this email."
    )
    org, email = escape(organization_name), escape(invitation.email)
    html = (
        f"<h1>Join {org}</h1>"
        f"<p>{escape(who)} invited you ({email}) to join {org}.</p>"
        f'<p><a href="{escape(url)}">Accept Invitation</a></p>'
        f"<p>This invitation will expire on {expires}. If you did not expect this "
        f"invitation, you can safely ignore this email.</p>"
    )
    return text, html


async def send_invitation_email(invitation: Invitation, organization_name: str,
                                invited_by_name: Optional[str] = None) -> bool:
    """Email the invite link. Failure is logged and reported, never raised."""
    text, html = render_invitation_email(invitation, organization_name, invited_by_name)
    try:
        await send_mail_async(f"Join {organization_name}", invitation.email, text, html=html)
        return True
    except Exception as e:
        logger.error(f"[INVITE] Could not email {invitation.email}: {e}")
        return False


def list_pending(db: Session, organization_id: str) -> list[Invitation]:
    return (
        db.query(Invitation)
        .filter(
            Invitation.organization_id == organization_id,
            Invitation.status == InvitationStatus.PENDING.value,
            Invitation.expires_at > datetime.utcnow(),
        )
        .order_by(Invitation.created_at.desc())
        .all()
    )


def get_by_token(db: Session, token: str) -> Invitation:
    invitation = db.query(Invitation).filter(Invitation.token == token).first()
    if not invitation:
        raise InvitationError("Invitation not found", 404)
    return invitation


def cancel_invitation(db: Session, token: str, user: User) -> Invitation:
    invitation = get_by_token(db, token)
    if member_role(db, invitation.organization_id, user.id) not in INVITER_ROLES:
        raise InvitationError("Only organization admins can cancel invitations", 403)
    if invitation.status != InvitationStatus.PENDING.value:
        raise InvitationError(f"Invitation is already {invitation.status.lower()}")
    invitation.status = InvitationStatus.CANCELLED.value
    db.commit()
    logger.info(f"[INVITE] Invitation for {invitation.email} cancelled by {user.email}")
    return invitation


def accept_invitation(db: Session, token: str, user: User) -> OrganizationMember:
    invitation = get_by_token(db, token)
    if invitation.status != InvitationStatus.PENDING.value:
        raise InvitationError(f"Invitation is already {invitation.status.lower()}")
    if invitation.expires_at <= datetime.utcnow():
        invitation.status = InvitationStatus.EXPIRED.value
        db.commit()
        raise InvitationError("Invitation has expired")
    if invitation.email != (user.email or "").lower():
        raise InvitationError("This invitation was sent to a different email address", 403)

    member = db.query(OrganizationMember).filter(
        OrganizationMember.organization_id == invitation.organization_id,
        OrganizationMember.user_id == user.id,
    ).first()
    if member is None:
        member = OrganizationMember(
            organization_id=invitation.organization_id, user_id=user.id, role=invitation.role,
        )
        db.add(member)
    invitation.status = InvitationStatus.ACCEPTED.value
    db.commit()
    logger.info(f"[INVITE] {user.email} joined organization {invitation.organization_id}")
    return member
