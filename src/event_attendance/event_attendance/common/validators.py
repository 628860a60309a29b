from __future__ import annotations

from ..core.enums import Session
from ..core.exceptions import ValidationError


def require_non_empty(value, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number


def require_session(value) -> Session:
    if isinstance(value, Session):
        return value
    try:
        return Session(str(value).strip().lower())
    except ValueError:
        raise ValidationError("session must be 'morning' or 'afternoon'") from None


def require_event_schedule(event) -> None:
    """Check the time-box invariants of an event before evaluating a scan."""

    if event.start_time >= event.end_time:
        raise ValidationError(f"Event {event.event_id} starts at or after its end time")
    if event.scan_window_minutes_before < 0 or event.grace_minutes_after < 0:
        raise ValidationError(f"Event {event.event_id} has a negative scan window")
