from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.constants import TOKEN_DELIMITER
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupCriteria:
    """What a scanned payload tells us about the student it belongs to."""

    raw_token: str
    student_external_id: str


class StudentMatcher(ABC):
    """Strategy Pattern: one way of resolving the student behind a payload."""

    name: str = "matcher"

    @abstractmethod
    def try_find(self, directory: StudentRepository, criteria: LookupCriteria) -> Optional[Student]:
        raise NotImplementedError


class ExternalIdMatcher(StudentMatcher):
    name = "external-id"

    def try_find(self, directory: StudentRepository, criteria: LookupCriteria) -> Optional[Student]:
        return directory.get_by_external_id(criteria.student_external_id)


class ExactTokenMatcher(StudentMatcher):
    """Payload stored verbatim on the student (codes printed before an id change)."""

    name = "exact-token"

    def try_find(self, directory: StudentRepository, criteria: LookupCriteria) -> Optional[Student]:
        return directory.get_by_token(criteria.raw_token)


class TokenPrefixMatcher(StudentMatcher):
    """Stored payload issued for the same student id under another tag."""

    name = "token-prefix"

    def try_find(self, directory: StudentRepository, criteria: LookupCriteria) -> Optional[Student]:
        return directory.get_by_token_prefix(f"{criteria.student_external_id}{TOKEN_DELIMITER}")


DEFAULT_MATCHERS: Sequence[StudentMatcher] = (
    ExternalIdMatcher(),
    ExactTokenMatcher(),
    TokenPrefixMatcher(),
)


def resolve_student(
    directory: StudentRepository,
    criteria: LookupCriteria,
    matchers: Sequence[StudentMatcher] = DEFAULT_MATCHERS,
) -> Optional[Student]:
    """Try each matcher in order and return the first hit."""

    for matcher in matchers:
        student = matcher.try_find(directory, criteria)
        if student:
            logger.debug("Student %s resolved by %s", student.external_student_id, matcher.name)
            return student
    return None
