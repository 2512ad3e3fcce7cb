# app/schemas/base.py
"""
Shared schema plumbing: camelCase JSON field names on the wire, snake_case in
Python, and datetimes rendered as '2025-03-15T08:24:00.000Z'.
"""

from datetime import datetime
from typing import Annotated
from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel
from app.utils.time_utils import to_iso_z

IsoDatetime = Annotated[datetime, PlainSerializer(to_iso_z, return_type=str, when_used="json")]


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
