# app/routers/users.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.schemas.user import UserCityOut
from app.services.auth_service import get_current_user

router = APIRouter()


@router.get("/user/city", response_model=UserCityOut, summary="Assigned city of a user")
def get_user_city(
    email: Optional[str] = None,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Defaults to the signed-in user; `email` looks up someone else."""
    user = current
    if email and email != current.email:
        user = db.query(User).filter(User.email == email).first()

    if not user or not user.city_id:
        raise HTTPException(status_code=404, detail="User has no assigned city")
    return UserCityOut(city_id=user.city_id)
