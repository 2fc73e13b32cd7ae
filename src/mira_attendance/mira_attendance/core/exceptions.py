from __future__ import annotations

from .enums import LocationErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced user or session does not exist."""


class DeviceError(DomainError):
    """Camera unavailable or permission denied. Halts the capture session."""


class LocationError(DomainError):
    """Geolocation failed. Only downgrades the location qualifier."""

    def __init__(self, kind: LocationErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


class PersistenceError(DomainError):
    """Ledger write/read failed. Fatal to the session, nothing is stored."""


class NotificationError(DomainError):
    """A single notification channel failed."""


class InvalidTransition(DomainError):
    """An event is not legal for the current capture state."""
