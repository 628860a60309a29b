from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for authorization."""

    ADMIN = "admin"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Record-level status stored in the database."""

    PENDING = "PENDING"
    PRESENT = "PRESENT"
    EXCUSED = "EXCUSED"


class Session(str, Enum):
    """One of the two daily attendance slots of an event."""

    MORNING = "morning"
    AFTERNOON = "afternoon"


class SessionState(str, Enum):
    NOT_SIGNED_IN = "NOT_SIGNED_IN"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class WindowDecision(str, Enum):
    TOO_EARLY = "TOO_EARLY"
    ADMISSIBLE = "ADMISSIBLE"
    TOO_LATE = "TOO_LATE"


class AdmissionOutcome(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    REJECTED = "REJECTED"


class RejectionReason(str, Enum):
    """Why an admission attempt was refused."""

    INVALID_TOKEN = "INVALID_TOKEN"
    STUDENT_NOT_FOUND = "STUDENT_NOT_FOUND"
    ORGANIZATION_NOT_FOUND = "ORGANIZATION_NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TOO_EARLY = "TOO_EARLY"
    TOO_LATE = "TOO_LATE"
    ALREADY_SIGNED_IN = "ALREADY_SIGNED_IN"
    ALREADY_SIGNED_OUT = "ALREADY_SIGNED_OUT"
    NOT_YET_SIGNED_IN = "NOT_YET_SIGNED_IN"
