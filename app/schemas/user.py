# app/schemas/user.py
from app.schemas.base import CamelModel


class UserCityOut(CamelModel):
    city_id: str
