# app/services/status_service.py
"""
Alert status workflow.

States: UNRESOLVED, INVESTIGATING, RESOLVED. Any state may move to any other
(RESOLVED alerts can be reopened). Every change appends a STATUS_CHANGE action
in the same commit as the status update.
"""

from typing import Optional
from sqlalchemy.orm import Session
from app.models.alert import Alert
from app.models.action import Action
from app.models.enums import AlertStatus, ActionType
from app.utils.logger import get_logger

logger = get_logger(__name__)

VALID_STATUSES = {s.value for s in AlertStatus}
UNKNOWN_PERFORMER = "Unknown user"


def is_valid_status(status: Optional[str]) -> bool:
    """Exact match only — the API takes the enumerated upper-case values."""
    return status in VALID_STATUSES


def change_status(
    db: Session,
    alert: Alert,
    status: str,
    comment: Optional[str] = None,
    performed_by: Optional[str] = None,
) -> Alert:
    """Set the alert status and record who did it. Commits once."""
    if not is_valid_status(status):
        raise ValueError(f"Invalid status value: {status!r}")

    previous = alert.status
    alert.status = status
    db.add(Action(
        alert_id=alert.id,
        action_type=ActionType.STATUS_CHANGE.value,
        description=comment or f"Alert status changed to {status}",
        performed_by=performed_by or UNKNOWN_PERFORMER,
    ))
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(alert)

    logger.info(f"[STATUS] Alert {alert.id}: {previous} → {status} by {performed_by or UNKNOWN_PERFORMER}")
    return alert
