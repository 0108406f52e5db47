from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Carries a stable ``kind`` and the HTTP status the controllers answer with.
    """

    kind = "DomainError"
    status_code = 400

    def __init__(self, message: str, *, classification: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.classification = classification

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": False, "kind": self.kind, "message": self.message}
        if self.classification:
            payload["classification"] = self.classification
        return payload


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "ValidationError"
    status_code = 400


class NotFoundError(DomainError):
    """Raised when a shift, anomaly, employee or record does not exist."""

    kind = "NotFound"
    status_code = 404


class ConflictError(DomainError):
    """Raised on a duplicate CheckIn/CheckOut for the same shift."""

    kind = "Conflict"
    status_code = 409


class AuthorizationError(DomainError):
    """Raised when an actor lacks permission for an action."""

    kind = "Forbidden"
    status_code = 403


class InvalidStateError(DomainError):
    """Raised when the target is not in a state that allows the action."""

    kind = "InvalidState"
    status_code = 409
