# app/services/auth_service.py
"""
Request authentication against sessions issued by the external identity provider.

The session token is read from `Authorization: Bearer <token>` or from one of
the provider's session cookies (settings.SESSION_COOKIE_NAMES), then resolved
through the `sessions` table to a User. Expired sessions are rejected.
"""

from datetime import datetime
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from app.config import settings
from app.database import get_db
from app.models.user import User, AuthSession


def extract_session_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    for name in settings.SESSION_COOKIE_NAMES:
        token = request.cookies.get(name)
        if token:
            return token
    return None


def user_for_token(db: Session, token: Optional[str]) -> Optional[User]:
    if not token:
        return None
    session = (
        db.query(AuthSession)
        .filter(AuthSession.session_token == token, AuthSession.expires > datetime.utcnow())
        .first()
    )
    return session.user if session else None


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """FastAPI dependency — the signed-in user, or None."""
    return user_for_token(db, extract_session_token(request))


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """FastAPI dependency — the signed-in user, 401 otherwise."""
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user
