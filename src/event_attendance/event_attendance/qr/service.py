from __future__ import annotations

import io
import logging
from typing import Optional

import qrcode

from ..core.exceptions import NotFoundError, ValidationError
from ..organizations.repository import OrganizationRepository
from ..students.repository import StudentRepository
from . import codec

logger = logging.getLogger(__name__)


class QRService:
    """Use case: issue, re-issue and render students' QR payloads."""

    def __init__(
        self,
        students: StudentRepository,
        organizations: OrganizationRepository,
        *,
        system_secret: Optional[str] = None,
    ):
        self._students = students
        self._organizations = organizations
        self._system_secret = system_secret

    def _issue(self, student, organization) -> str:
        token = codec.encode(
            student.external_student_id,
            codec.organization_identifier(organization.name),
            display_name=student.display_name,
            secret=codec.secret_for(organization, self._system_secret),
        )
        if not self._students.update_token_data(student.student_id, token):
            raise ValidationError(f"Could not store QR code for student {student.student_id}")
        return token

    def issue_for_student(self, student_id: int) -> str:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        organization = self._organizations.get_by_id(student.organization_id)
        if not organization:
            raise NotFoundError("Organization not found")

        token = self._issue(student, organization)
        logger.info("Issued QR code for student %s", student.external_student_id)
        return token

    def regenerate_for_organization(self, organization_id: int) -> int:
        """Re-issue every student's payload, e.g. after rotating the secret."""

        organization = self._organizations.get_by_id(organization_id)
        if not organization:
            raise NotFoundError("Organization not found")

        count = 0
        for student in self._students.list_for_organization(organization.organization_id):
            self._issue(student, organization)
            count += 1
        logger.info("Regenerated %d QR codes for organization %s", count, organization.name)
        return count

    def render_png(self, student_id: int) -> bytes:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        token = student.qr_code_data or self.issue_for_student(student_id)

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(token)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()
