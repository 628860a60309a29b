from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from src.event_attendance.event_attendance.core.enums import AdmissionOutcome, RejectionReason

WORKERS = 50


def _run_concurrently(fn, n: int = WORKERS):
    barrier = threading.Barrier(n)

    def call(_):
        barrier.wait()
        return fn()

    with ThreadPoolExecutor(max_workers=n) as pool:
        return list(pool.map(call, range(n)))


def test_concurrent_scans_for_same_session_admit_exactly_once(admission_service, attendance_repo, student, event):
    results = _run_concurrently(lambda: admission_service.admit(student.qr_code_data, event.event_id, "morning"))

    accepted = [r for r in results if r.accepted]
    rejected = [r for r in results if not r.accepted]

    assert len(accepted) == 1
    assert accepted[0].outcome == AdmissionOutcome.CREATED
    assert len(rejected) == WORKERS - 1
    assert {r.reason for r in rejected} == {RejectionReason.ALREADY_SIGNED_IN}
    assert attendance_repo.count() == 1


def test_concurrent_scans_for_both_sessions_share_one_record(admission_service, attendance_repo, student, event):
    sessions = ["morning", "afternoon"] * (WORKERS // 2)
    it = iter(sessions)
    lock = threading.Lock()

    def next_session():
        with lock:
            return next(it)

    results = _run_concurrently(lambda: admission_service.admit(student.qr_code_data, event.event_id, next_session()))

    outcomes = sorted(r.outcome.value for r in results if r.accepted)
    assert outcomes == [AdmissionOutcome.CREATED.value, AdmissionOutcome.UPDATED.value]
    assert attendance_repo.count() == 1

    record = attendance_repo.get_for_student_and_event(student.student_id, event.event_id)
    assert record.sign_in_morning is not None
    assert record.sign_in_afternoon is not None


def test_concurrent_manual_sign_outs_succeed_once(admission_service, student, event):
    admission_service.admit(student.qr_code_data, event.event_id, "morning")

    results = _run_concurrently(lambda: admission_service.manual_sign_out(student.student_id, event.event_id, "morning"))

    assert sum(1 for r in results if r.accepted) == 1
    assert {r.reason for r in results if not r.accepted} == {RejectionReason.ALREADY_SIGNED_OUT}
