"""
Booking Domain Entities

Closed status enumerations for bookings and payments, and the
transition rules between them. The Django models take their stored
values from these enums.
"""

from enum import Enum
from typing import Dict, FrozenSet


class BookingStatus(str, Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (payment succeeded)
    - PENDING -> REJECTED (payment failed)
    - PENDING -> CANCELLED (user cancelled, or checkout abandoned)
    - CONFIRMED -> CANCELLED (user cancelled)
    - CONFIRMED -> COMPLETED (stay concluded)
    """
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    REJECTED = 'REJECTED'
    CANCELLED = 'CANCELLED'
    COMPLETED = 'COMPLETED'

    @property
    def is_terminal(self) -> bool:
        return not BOOKING_TRANSITIONS[self]

    def can_transition_to(self, target: 'BookingStatus') -> bool:
        return target in BOOKING_TRANSITIONS[self]


class PaymentStatus(str, Enum):
    """PENDING -> SUCCEEDED | FAILED; both outcomes are final"""
    PENDING = 'PENDING'
    SUCCEEDED = 'SUCCEEDED'
    FAILED = 'FAILED'

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
    }),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

# Bookings in these states hold a unit of the room type's inventory.
ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


def statuses_that_can_become(target: BookingStatus) -> tuple:
    """Source states from which `target` is reachable in one step"""
    return tuple(
        status for status, targets in BOOKING_TRANSITIONS.items()
        if target in targets
    )


CANCELLABLE_STATUSES = statuses_that_can_become(BookingStatus.CANCELLED)

# Owners may still change a booking in these states.
MODIFIABLE_STATUSES = ACTIVE_STATUSES
