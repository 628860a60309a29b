from __future__ import annotations

from dataclasses import replace

from src.event_attendance.event_attendance.students.matchers import (
    ExactTokenMatcher,
    ExternalIdMatcher,
    LookupCriteria,
    TokenPrefixMatcher,
    resolve_student,
)


def test_external_id_wins_first(students_repo, student):
    other = replace(student, student_id=2, external_student_id="S9", qr_code_data="S1-ACMEUniv-zzz")
    students_repo.add(other)

    found = resolve_student(students_repo, LookupCriteria("S1-ACMEUniv-zzz", "S1"))

    assert found.student_id == student.student_id


def test_each_matcher_in_isolation(students_repo, student):
    criteria = LookupCriteria(raw_token=student.qr_code_data, student_external_id="S1")

    assert ExternalIdMatcher().try_find(students_repo, criteria) == student
    assert ExactTokenMatcher().try_find(students_repo, criteria) == student
    assert TokenPrefixMatcher().try_find(students_repo, criteria) == student
    assert ExternalIdMatcher().try_find(students_repo, LookupCriteria("x", "nobody")) is None


def test_prefix_requires_the_delimiter(students_repo, student):
    students_repo.add(replace(student, student_id=2, external_student_id="S10", qr_code_data="S10-ACMEUniv-abc"))
    students_repo.update_token_data(student.student_id, "S1X-ACMEUniv-abc")

    assert TokenPrefixMatcher().try_find(students_repo, LookupCriteria("S1-ACMEUniv-abc", "S1")) is None


def test_ambiguous_prefix_matches_nobody(students_repo, student):
    students_repo.add(replace(student, student_id=2, external_student_id="S2", qr_code_data="S1-ACMEUniv-other"))

    assert TokenPrefixMatcher().try_find(students_repo, LookupCriteria("S1-ACMEUniv-new", "S1")) is None


def test_no_matcher_finds_anything(students_repo):
    assert resolve_student(students_repo, LookupCriteria("Z-ACMEUniv-abc", "Z")) is None
