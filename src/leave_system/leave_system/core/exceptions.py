from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFound(ValidationError):
    """Raised when the target record does not exist."""


class InvalidDuration(ValidationError):
    """Chargeable hours are zero or the overtime time rules are violated."""


class QuotaExceeded(ValidationError):
    """Requested days exceed the remaining entitlement."""

    def __init__(self, label: str, *, remaining: float, requested: float):
        self.remaining = remaining
        self.requested = requested
        super().__init__(f"{label}不足！剩餘可用: {remaining:.2f} 天，本次申請: {requested:.2f} 天")


class OverlapConflict(ValidationError):
    """Requested time range collides with an existing active request."""

    def __init__(self, message: str, *, conflict_id: int | None = None):
        self.conflict_id = conflict_id
        super().__init__(message)


class VehicleUnavailable(ValidationError):
    """Selected company car is already booked for an overlapping window."""

    def __init__(self, message: str, *, vehicle_id: int):
        self.vehicle_id = vehicle_id
        super().__init__(message)


class InvalidTransition(ValidationError):
    """The request's current status does not allow the attempted action."""


class PermissionDenied(DomainError):
    """Raised when an actor lacks permission for an action."""
