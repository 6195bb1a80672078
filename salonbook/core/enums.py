# salonbook/core/enums.py
"""
Core enums for the salon booking engine.

Status values are stored as plain strings in the database; these enums
give the rest of the code type safety and a single spelling for each.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles an acting party can hold when calling the engine."""

    CUSTOMER = "customer"
    PROVIDER = "provider"
    OWNER = "owner"
    ADMIN = "admin"


class Capability(str, Enum):
    """Operations gated by the actor-capability table."""

    VIEW_AVAILABILITY = "view_availability"
    CREATE_BOOKING = "create_booking"
    RESCHEDULE_BOOKING = "reschedule_booking"
    CANCEL_BOOKING = "cancel_booking"
    CONFIRM_BOOKING = "confirm_booking"
    MANAGE_AVAILABILITY = "manage_availability"
    MANAGE_BUSINESS_HOURS = "manage_business_hours"


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Held until the payment collaborator confirms
    SCHEDULED = "SCHEDULED"
    CANCELED = "CANCELED"
    COMPLETED = "COMPLETED"  # Set once the appointment time has passed


# Statuses that occupy a provider's time
BLOCKING_BOOKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.SCHEDULED.value)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    REFUNDED = "REFUNDED"


class BusinessStatus(str, Enum):
    """Approval states of a tenant; only APPROVED businesses take bookings."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"
