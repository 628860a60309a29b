"""QR payload codec.

A payload is the plain string ``{student_external_id}-{organization_identifier}-{tag}``.
The tag is a truncated HMAC-SHA256 over the student id, display name and
organization identifier, keyed with the organization's secret. Organization
identifiers and tags never contain the delimiter, so the payload is split on
its two right-most delimiters and student ids such as ``2021-0003`` survive a
round trip.
"""

from __future__ import annotations

import hashlib
import hmac
import re
from dataclasses import dataclass
from typing import Optional

from ..core.constants import (
    DEFAULT_ORGANIZATION_IDENTIFIER,
    ORGANIZATION_IDENTIFIER_LENGTH,
    TAG_LENGTH,
    TOKEN_DELIMITER,
)
from ..core.exceptions import MalformedTokenError, ValidationError


@dataclass(frozen=True)
class DecodedToken:
    student_external_id: str
    organization_identifier: str
    tag: str


def organization_identifier(name: Optional[str]) -> str:
    """Short identifier of an organization as embedded in payloads."""
    compact = re.sub(r"\s+", "", name or "").replace(TOKEN_DELIMITER, "")
    return compact[:ORGANIZATION_IDENTIFIER_LENGTH] or DEFAULT_ORGANIZATION_IDENTIFIER


def secret_for(organization, system_secret: Optional[str]) -> str:
    return (getattr(organization, "qr_secret", None) or system_secret or "").strip()


def signing_payload(student_external_id: str, display_name: str, org_identifier: str) -> str:
    return TOKEN_DELIMITER.join([student_external_id, display_name, org_identifier])


def sign(payload: str, secret: str) -> str:
    if not secret:
        raise ValidationError("A signing secret is required to issue QR codes")
    digest = hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()
    return digest[:TAG_LENGTH]


def verify(payload: str, tag: str, secret: str) -> bool:
    if not secret or not tag:
        return False
    return hmac.compare_digest(tag.lower(), sign(payload, secret))


def encode(student_external_id: str, org_identifier: str, *, display_name: str, secret: str) -> str:
    student_external_id = (student_external_id or "").strip()
    if not student_external_id:
        raise ValidationError("Student id is required")
    if not org_identifier or TOKEN_DELIMITER in org_identifier:
        raise ValidationError(f"Invalid organization identifier: {org_identifier!r}")

    tag = sign(signing_payload(student_external_id, display_name, org_identifier), secret)
    return TOKEN_DELIMITER.join([student_external_id, org_identifier, tag])


def decode(token: str) -> DecodedToken:
    raw = (token or "").strip()
    parts = raw.rsplit(TOKEN_DELIMITER, 2)
    if len(parts) < 3 or not all(p.strip() for p in parts):
        raise MalformedTokenError("QR code format is invalid")

    student_external_id, org_identifier, tag = (p.strip() for p in parts)
    return DecodedToken(
        student_external_id=student_external_id,
        organization_identifier=org_identifier,
        tag=tag,
    )


def validate(token: str, *, student, organization, secret: str) -> bool:
    """Check that a payload was issued for this student by this organization."""

    try:
        decoded = decode(token)
    except MalformedTokenError:
        return False

    expected_org = organization_identifier(organization.name)
    if decoded.organization_identifier != expected_org:
        return False

    payload = signing_payload(decoded.student_external_id, student.display_name, expected_org)
    return verify(payload, decoded.tag, secret)
