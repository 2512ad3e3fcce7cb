# app/models/_ids.py
import uuid


def new_id() -> str:
    """Primary keys are opaque string identifiers."""
    return uuid.uuid4().hex
