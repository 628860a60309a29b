"""Per-session state machine of an attendance record.

Each session moves NOT_SIGNED_IN -> SIGNED_IN -> SIGNED_OUT and never back.
The functions here are pure. The MySQL repository builds freshly inserted
records with ``apply_sign_in`` and enforces the rest as conditional UPDATEs
(see ``AttendanceRepository``); in-memory stores apply the transitions
directly.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, RejectionReason, Session, SessionState
from ..core.exceptions import AdmissionRejected
from .model import AttendanceRecord

# Column/attribute names are whitelisted here and nowhere else.
SIGN_IN_FIELDS = {
    Session.MORNING: "sign_in_morning",
    Session.AFTERNOON: "sign_in_afternoon",
}
SIGN_OUT_FIELDS = {
    Session.MORNING: "sign_out_morning",
    Session.AFTERNOON: "sign_out_afternoon",
}


def session_state(record: Optional[AttendanceRecord], session: Session) -> SessionState:
    if record is None:
        return SessionState.NOT_SIGNED_IN
    return record.state(session)


def rejection_for_sign_in(record: Optional[AttendanceRecord], session: Session) -> Optional[RejectionReason]:
    if session_state(record, session) == SessionState.NOT_SIGNED_IN:
        return None
    return RejectionReason.ALREADY_SIGNED_IN


def rejection_for_sign_out(record: Optional[AttendanceRecord], session: Session) -> Optional[RejectionReason]:
    state = session_state(record, session)
    if state == SessionState.NOT_SIGNED_IN:
        return RejectionReason.NOT_YET_SIGNED_IN
    if state == SessionState.SIGNED_OUT:
        return RejectionReason.ALREADY_SIGNED_OUT
    return None


def _messages(reason: RejectionReason, session: Session) -> str:
    return {
        RejectionReason.ALREADY_SIGNED_IN: f"Already signed in ({session.value})",
        RejectionReason.NOT_YET_SIGNED_IN: f"Not signed in yet ({session.value})",
        RejectionReason.ALREADY_SIGNED_OUT: f"Already signed out ({session.value})",
    }[reason]


def reject(reason: RejectionReason, session: Session) -> AdmissionRejected:
    return AdmissionRejected(reason, _messages(reason, session))


def apply_sign_in(record: AttendanceRecord, session: Session, at: datetime) -> AttendanceRecord:
    reason = rejection_for_sign_in(record, session)
    if reason:
        raise reject(reason, session)
    return replace(record, status=AttendanceStatus.PRESENT, **{SIGN_IN_FIELDS[session]: at})


def apply_sign_out(record: AttendanceRecord, session: Session, at: datetime) -> AttendanceRecord:
    reason = rejection_for_sign_out(record, session)
    if reason:
        raise reject(reason, session)
    return replace(record, **{SIGN_OUT_FIELDS[session]: at})
