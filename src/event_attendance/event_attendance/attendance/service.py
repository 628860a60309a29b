from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_session
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import AdmissionOutcome, RejectionReason, Session, WindowDecision
from ..core.exceptions import AdmissionRejected, MalformedTokenError, NotFoundError
from ..events.model import Event
from ..events.repository import EventRepository
from ..organizations.model import Organization
from ..organizations.repository import OrganizationRepository
from ..qr import codec
from ..students.matchers import DEFAULT_MATCHERS, LookupCriteria, StudentMatcher, resolve_student
from ..students.model import Student
from ..students.repository import StudentRepository
from . import ledger
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .window import ScanWindow, scan_window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of one attempt to mark attendance."""

    outcome: AdmissionOutcome
    message: str
    record: Optional[AttendanceRecord] = None
    reason: Optional[RejectionReason] = None
    window: Optional[ScanWindow] = None

    @property
    def accepted(self) -> bool:
        return self.outcome != AdmissionOutcome.REJECTED


class AdmissionService:
    """Use case: decide whether a scan or a manual entry may be recorded.

    Every refusal is a REJECTED result, never an exception. Storage errors are
    not caught here; each ledger write and the read of its result share one
    transaction, so a failed request leaves nothing committed.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        organizations: OrganizationRepository,
        events: EventRepository,
        *,
        system_secret: Optional[str] = None,
        matchers: Sequence[StudentMatcher] = DEFAULT_MATCHERS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._students = students
        self._organizations = organizations
        self._events = events
        self._system_secret = system_secret
        self._matchers = tuple(matchers)
        self._clock = clock

    # ----- entry points -----

    def admit(self, token: str, event_id: int, session) -> AdmissionResult:
        """QR admission: decode, resolve, verify, check the window, sign in."""

        session = require_session(session)
        now = self._now()
        try:
            decoded = self._decode(token)
            student = self._resolve_student_by_token(token, decoded)
            organization = self._resolve_organization(student)
            self._verify_token(token, student, organization)
            event = self._resolve_event(event_id)
            self._check_window(now, event)
            return self._sign_in(student, event, session, now)
        except AdmissionRejected as exc:
            return self._rejected(exc, event_id=event_id, session=session)

    def manual_sign_in(self, student_id: int, event_id: int, session) -> AdmissionResult:
        """Admin entry without a token; timing and duplicate rules still apply."""

        session = require_session(session)
        now = self._now()
        try:
            student = self._resolve_student_by_id(student_id)
            event = self._resolve_event(event_id)
            self._check_window(now, event)
            return self._sign_in(student, event, session, now)
        except AdmissionRejected as exc:
            return self._rejected(exc, event_id=event_id, session=session, student_id=student_id)

    def manual_sign_out(self, student_id: int, event_id: int, session) -> AdmissionResult:
        """Admin sign-out; allowed after the scan window has closed."""

        session = require_session(session)
        now = self._now()
        try:
            student = self._resolve_student_by_id(student_id)
            event = self._resolve_event(event_id)
            return self._sign_out(student, event, session, now)
        except AdmissionRejected as exc:
            return self._rejected(exc, event_id=event_id, session=session, student_id=student_id)

    def list_for_event(self, event_id: int, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[AttendanceRecord]:
        if not self._events.get_by_id(event_id):
            raise NotFoundError("Event not found")
        return self._attendance.list_for_event(event_id, limit=limit)

    # ----- steps -----

    def _now(self) -> datetime:
        # Stored in DATETIME columns, which keep whole seconds.
        return self._clock().replace(microsecond=0)

    def _decode(self, token: str) -> codec.DecodedToken:
        try:
            return codec.decode(token)
        except MalformedTokenError as exc:
            raise AdmissionRejected(RejectionReason.INVALID_TOKEN, str(exc)) from exc

    def _resolve_student_by_token(self, token: str, decoded: codec.DecodedToken) -> Student:
        criteria = LookupCriteria(raw_token=token.strip(), student_external_id=decoded.student_external_id)
        student = resolve_student(self._students, criteria, self._matchers)
        if not student:
            raise AdmissionRejected(RejectionReason.STUDENT_NOT_FOUND, "Student not found")
        return student

    def _resolve_student_by_id(self, student_id: int) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise AdmissionRejected(RejectionReason.STUDENT_NOT_FOUND, "Student not found")
        return student

    def _resolve_organization(self, student: Student) -> Organization:
        organization = self._organizations.get_by_id(student.organization_id)
        if not organization:
            raise AdmissionRejected(RejectionReason.ORGANIZATION_NOT_FOUND, "Organization not found")
        return organization

    def _verify_token(self, token: str, student: Student, organization: Organization) -> None:
        secret = codec.secret_for(organization, self._system_secret)
        if not codec.validate(token, student=student, organization=organization, secret=secret):
            raise AdmissionRejected(RejectionReason.INVALID_TOKEN, "Invalid QR code")

    def _resolve_event(self, event_id: int) -> Event:
        event = self._events.get_by_id(event_id)
        if not event:
            raise AdmissionRejected(RejectionReason.EVENT_NOT_FOUND, "Event not found")
        return event

    def _check_window(self, now: datetime, event: Event) -> None:
        window = scan_window(event)
        decision = window.classify(now)
        if decision == WindowDecision.TOO_EARLY:
            raise AdmissionRejected(RejectionReason.TOO_EARLY, "Scan not allowed yet", window=window)
        if decision == WindowDecision.TOO_LATE:
            raise AdmissionRejected(RejectionReason.TOO_LATE, "Scan window closed", window=window)

    def _sign_in(self, student: Student, event: Event, session: Session, now: datetime) -> AdmissionResult:
        created = self._attendance.create_with_sign_in(
            student_id=student.student_id,
            event_id=event.event_id,
            session=session,
            at=now,
        )
        if created:
            logger.info(
                "Attendance created: student=%s event=%s session=%s",
                student.external_student_id, event.event_id, session.value,
            )
            return AdmissionResult(AdmissionOutcome.CREATED, "Attendance marked", record=created)

        record = self._attendance.mark_sign_in(
            student_id=student.student_id,
            event_id=event.event_id,
            session=session,
            at=now,
        )
        if not record:
            raise ledger.reject(RejectionReason.ALREADY_SIGNED_IN, session)

        logger.info(
            "Attendance updated: student=%s event=%s session=%s",
            student.external_student_id, event.event_id, session.value,
        )
        return AdmissionResult(AdmissionOutcome.UPDATED, "Attendance updated", record=record)

    def _sign_out(self, student: Student, event: Event, session: Session, now: datetime) -> AdmissionResult:
        record = self._attendance.mark_sign_out(
            student_id=student.student_id,
            event_id=event.event_id,
            session=session,
            at=now,
        )
        if not record:
            # The write already decided; this read only names the reason.
            current = self._attendance.get_for_student_and_event(student.student_id, event.event_id)
            reason = ledger.rejection_for_sign_out(current, session) or RejectionReason.NOT_YET_SIGNED_IN
            raise ledger.reject(reason, session)

        logger.info(
            "Signed out: student=%s event=%s session=%s",
            student.external_student_id, event.event_id, session.value,
        )
        return AdmissionResult(AdmissionOutcome.UPDATED, f"Signed out ({session.value})", record=record)

    def _rejected(self, exc: AdmissionRejected, *, event_id, session: Session, student_id=None) -> AdmissionResult:
        logger.info(
            "Admission rejected: reason=%s event=%s session=%s student=%s",
            exc.reason.value, event_id, session.value, student_id if student_id is not None else "-",
        )
        return AdmissionResult(
            AdmissionOutcome.REJECTED,
            str(exc),
            reason=exc.reason,
            window=exc.window,
        )
