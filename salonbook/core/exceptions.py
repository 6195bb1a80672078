# salonbook/core/exceptions.py
"""
Domain-specific exceptions for the salon booking engine.

Every failure the engine reports falls into one of these classes so the
API layer can map it onto a stable status code and error envelope.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised for malformed input, before any datastore access."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedException(DomainException):
    """Raised when the acting party could not be identified."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when the acting role lacks a capability."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundException(DomainException):
    """Raised when a resource is absent or not owned by the acting party."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when a concurrent or overlapping write was detected."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a rule that depends on current data is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails unexpectedly."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


class OperationCancelledException(ServiceException):
    """Raised instead of committing when the calling request was cancelled."""

    def __init__(self, message: str = "Request was cancelled before it completed") -> None:
        super().__init__(message, code="REQUEST_CANCELLED")


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking overlaps an existing booking of a provider."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class ScheduleOverlapException(ConflictException):
    """Raised when a recurring block overlaps another block on the same weekday."""

    def __init__(self, weekday: int, new_range: str, conflicting_range: str):
        super().__init__(
            message=(
                f"Overlapping block on weekday {weekday}: {new_range} conflicts with "
                f"{conflicting_range}"
            ),
            code="SCHEDULE_OVERLAP",
            details={
                "weekday": weekday,
                "new_block": new_range,
                "conflicting_block": conflicting_range,
            },
        )


class SameDayLockException(BusinessRuleException):
    """Raised when an appointment is changed on or after its own local day."""

    def __init__(self, action: str, appointment_date: str):
        super().__init__(
            message=(
                f"Cannot {action} a booking on the same day. "
                f"Please {action} at least one day in advance."
            ),
            code="SAME_DAY_LOCK",
            details={"appointment_date": appointment_date},
        )


class OutsideAvailabilityException(BusinessRuleException):
    """Raised when a requested interval does not fit a provider's schedule."""

    def __init__(self, provider_id: str, reason: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Provider {provider_id} is not available: {reason}",
            code="OUTSIDE_AVAILABILITY",
            details={"provider_id": provider_id, **(details or {})},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations.
    """
