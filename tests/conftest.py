from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.event_attendance.event_attendance.attendance import ledger
from src.event_attendance.event_attendance.attendance.model import AttendanceRecord
from src.event_attendance.event_attendance.attendance.service import AdmissionService
from src.event_attendance.event_attendance.core.enums import AttendanceStatus
from src.event_attendance.event_attendance.core.exceptions import AdmissionRejected
from src.event_attendance.event_attendance.events.model import Event
from src.event_attendance.event_attendance.organizations.model import Organization
from src.event_attendance.event_attendance.qr import codec
from src.event_attendance.event_attendance.students.model import Student

SECRET = "org-secret"
EVENT_DAY = date(2026, 3, 2)


class InMemoryStudents:
    def __init__(self, students=()):
        self._by_id: dict[int, Student] = {s.student_id: s for s in students}

    def add(self, student: Student) -> None:
        self._by_id[student.student_id] = student

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._by_id.get(int(student_id))

    def get_by_external_id(self, external_student_id: str) -> Optional[Student]:
        return next((s for s in self._by_id.values() if s.external_student_id == external_student_id), None)

    def get_by_token(self, qr_code_data: str) -> Optional[Student]:
        return next((s for s in self._by_id.values() if s.qr_code_data == qr_code_data), None)

    def get_by_token_prefix(self, prefix: str) -> Optional[Student]:
        hits = [s for s in self._by_id.values() if (s.qr_code_data or "").startswith(prefix)]
        return hits[0] if len(hits) == 1 else None

    def list_for_organization(self, organization_id: int):
        return [s for s in self._by_id.values() if s.organization_id == organization_id]

    def update_token_data(self, student_id: int, qr_code_data: str) -> bool:
        student = self._by_id.get(int(student_id))
        if not student:
            return False
        self._by_id[student.student_id] = replace(student, qr_code_data=qr_code_data)
        return True


class InMemoryOrganizations:
    def __init__(self, organizations=()):
        self._by_id = {o.organization_id: o for o in organizations}

    def get_by_id(self, organization_id: int) -> Optional[Organization]:
        return self._by_id.get(int(organization_id))


class InMemoryEvents:
    def __init__(self, events=()):
        self._by_id = {e.event_id: e for e in events}

    def get_by_id(self, event_id: int) -> Optional[Event]:
        return self._by_id.get(int(event_id))


class InMemoryAttendance:
    """Ledger fake; the lock makes each conditional write atomic like a SQL transaction.

    ``before_commit`` (if set) is called with the new record before it is
    stored; raising from it leaves the ledger untouched, like a rollback.
    """

    def __init__(self):
        self.before_commit = None
        self._lock = threading.Lock()
        self._by_key: dict[tuple[int, int], AttendanceRecord] = {}
        self._id = 0

    def get_for_student_and_event(self, student_id: int, event_id: int) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._by_key.get((student_id, event_id))

    def create_with_sign_in(self, *, student_id, event_id, session, at) -> Optional[AttendanceRecord]:
        with self._lock:
            if (student_id, event_id) in self._by_key:
                return None
            self._id += 1
            rec = ledger.apply_sign_in(
                AttendanceRecord(
                    attendance_id=self._id,
                    student_id=student_id,
                    event_id=event_id,
                    status=AttendanceStatus.PENDING,
                ),
                session,
                at,
            )
            self._commit(rec)
            return rec

    def mark_sign_in(self, *, student_id, event_id, session, at) -> Optional[AttendanceRecord]:
        return self._mark(ledger.apply_sign_in, student_id, event_id, session, at)

    def mark_sign_out(self, *, student_id, event_id, session, at) -> Optional[AttendanceRecord]:
        return self._mark(ledger.apply_sign_out, student_id, event_id, session, at)

    def _mark(self, transition, student_id, event_id, session, at) -> Optional[AttendanceRecord]:
        with self._lock:
            rec = self._by_key.get((student_id, event_id))
            if rec is None:
                return None
            try:
                updated = transition(rec, session, at)
            except AdmissionRejected:
                return None
            self._commit(updated)
            return updated

    def _commit(self, rec: AttendanceRecord) -> None:
        if self.before_commit:
            self.before_commit(rec)
        self._by_key[(rec.student_id, rec.event_id)] = rec

    def list_for_event(self, event_id: int, *, limit: int):
        with self._lock:
            items = [r for r in self._by_key.values() if r.event_id == event_id]
        items.sort(key=lambda r: r.attendance_id)
        return items[:limit]

    def count(self) -> int:
        with self._lock:
            return len(self._by_key)


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def fixed_now() -> datetime:
    return datetime.combine(EVENT_DAY, time(8, 50))


@pytest.fixture
def organization() -> Organization:
    return Organization(organization_id=1, name="ACME Univ", qr_secret=SECRET)


@pytest.fixture
def student(organization) -> Student:
    token = codec.encode(
        "S1",
        codec.organization_identifier(organization.name),
        display_name="Ana Santos",
        secret=SECRET,
    )
    return Student(
        student_id=1,
        external_student_id="S1",
        display_name="Ana Santos",
        organization_id=organization.organization_id,
        qr_code_data=token,
    )


@pytest.fixture
def event() -> Event:
    return Event(
        event_id=10,
        organization_id=1,
        title="Assembly",
        event_date=EVENT_DAY,
        start_time=time(9, 0),
        end_time=time(12, 0),
        scan_window_minutes_before=15,
        grace_minutes_after=60,
    )


@pytest.fixture
def students_repo(student) -> InMemoryStudents:
    return InMemoryStudents([student])


@pytest.fixture
def organizations_repo(organization) -> InMemoryOrganizations:
    return InMemoryOrganizations([organization])


@pytest.fixture
def events_repo(event) -> InMemoryEvents:
    return InMemoryEvents([event])


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def clock(fixed_now) -> Clock:
    return Clock(fixed_now)


@pytest.fixture
def admission_service(attendance_repo, students_repo, organizations_repo, events_repo, clock) -> AdmissionService:
    return AdmissionService(
        attendance_repo,
        students_repo,
        organizations_repo,
        events_repo,
        system_secret="system-secret",
        clock=clock,
    )
