from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Organization:
    """Domain entity: an organization students and events belong to.

    ``qr_secret`` signs the QR payloads of the organization's students. When it
    is empty the system-level secret from settings is used instead.
    """

    organization_id: int
    name: str
    qr_secret: Optional[str] = None
