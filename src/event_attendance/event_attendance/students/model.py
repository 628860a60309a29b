from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a student carrying a QR code.

    Note: plain data object, no DB access code here.
    """

    student_id: int
    external_student_id: str
    display_name: str
    organization_id: int
    qr_code_data: Optional[str] = None
