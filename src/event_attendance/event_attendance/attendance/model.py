from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, Session, SessionState


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: the attendance of one student at one event.

    The four timestamps are the source of truth. ``morning`` / ``afternoon``
    are derived per-session states; ``status`` is kept for consumers that only
    need to know whether any session was attended.
    """

    attendance_id: int
    student_id: int
    event_id: int
    status: AttendanceStatus
    sign_in_morning: Optional[datetime] = None
    sign_out_morning: Optional[datetime] = None
    sign_in_afternoon: Optional[datetime] = None
    sign_out_afternoon: Optional[datetime] = None

    def sign_in_at(self, session: Session) -> Optional[datetime]:
        return self.sign_in_morning if session == Session.MORNING else self.sign_in_afternoon

    def sign_out_at(self, session: Session) -> Optional[datetime]:
        return self.sign_out_morning if session == Session.MORNING else self.sign_out_afternoon

    def state(self, session: Session) -> SessionState:
        if self.sign_in_at(session) is None:
            return SessionState.NOT_SIGNED_IN
        if self.sign_out_at(session) is None:
            return SessionState.SIGNED_IN
        return SessionState.SIGNED_OUT

    @property
    def morning(self) -> SessionState:
        return self.state(Session.MORNING)

    @property
    def afternoon(self) -> SessionState:
        return self.state(Session.AFTERNOON)

    @property
    def is_present(self) -> bool:
        return self.sign_in_morning is not None or self.sign_in_afternoon is not None
