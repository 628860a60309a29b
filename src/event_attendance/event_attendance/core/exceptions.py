from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .enums import RejectionReason

if TYPE_CHECKING:
    from ..attendance.window import ScanWindow


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class MalformedTokenError(ValidationError):
    """Raised when a QR payload cannot be split into its fields."""


class AdmissionRejected(DomainError):
    """Raised inside the admission flow when a step refuses the attempt.

    The window is set for timing rejections so callers can explain the
    boundary times to the user.
    """

    def __init__(self, reason: RejectionReason, message: str, *, window: Optional["ScanWindow"] = None):
        super().__init__(message)
        self.reason = reason
        self.window = window
