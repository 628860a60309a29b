from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    """Directory lookups for students.

    The admission flow depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_external_id(self, external_student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_token(self, qr_code_data: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_token_prefix(self, prefix: str) -> Optional[Student]:
        """Return the single student whose stored payload starts with ``prefix``.

        None when nothing matches or the prefix is ambiguous.
        """

        raise NotImplementedError

    def list_for_organization(self, organization_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def update_token_data(self, student_id: int, qr_code_data: str) -> bool:
        raise NotImplementedError
