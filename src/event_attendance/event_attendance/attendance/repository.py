from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Session
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Ledger storage.

    Writes are conditional single statements so that concurrent admissions
    for the same (student, event) cannot both pass the session guard.
    """

    def get_for_student_and_event(self, student_id: int, event_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_with_sign_in(
        self,
        *,
        student_id: int,
        event_id: int,
        session: Session,
        at: datetime,
    ) -> Optional[AttendanceRecord]:
        """Insert the record with the session signed in.

        Returns None when a record for the pair already exists.
        """

        raise NotImplementedError

    def mark_sign_in(
        self, *, student_id: int, event_id: int, session: Session, at: datetime
    ) -> Optional[AttendanceRecord]:
        """Set the session's sign-in only if it is still empty.

        Returns the updated record, read in the same transaction as the write,
        or None when the guard did not match.
        """

        raise NotImplementedError

    def mark_sign_out(
        self, *, student_id: int, event_id: int, session: Session, at: datetime
    ) -> Optional[AttendanceRecord]:
        """Set the session's sign-out only if signed in and not yet signed out.

        Same return contract as ``mark_sign_in``.
        """

        raise NotImplementedError

    def list_for_event(self, event_id: int, *, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
