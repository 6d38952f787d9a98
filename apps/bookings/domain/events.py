"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
They are published after the transaction that produced them commits.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money


@dataclass
class BookingsCreated(DomainEvent):
    """
    Event: a checkout created N pending bookings sharing one payment

    Triggers:
    - Checkout session creation by the client
    """
    payment_id: UUID = None
    user_id: int = None
    booking_ids: List[UUID] = field(default_factory=list)
    total_amount: Optional[Money] = None


@dataclass
class BookingsConfirmed(DomainEvent):
    """
    Event: payment succeeded and PENDING bookings became CONFIRMED

    Only the settlement that actually moved bookings emits this event;
    replays of the same provider event do not.

    Triggers:
    - Confirmation email to the guest
    """
    booking_ids: List[UUID] = field(default_factory=list)
    provider_txn_id: str = ''
    source_event: str = ''


@dataclass
class BookingsRejected(DomainEvent):
    """Event: payment failed and PENDING bookings became REJECTED"""
    booking_ids: List[UUID] = field(default_factory=list)
    provider_txn_id: str = ''
    reason: str = ''


@dataclass
class BookingCancelled(DomainEvent):
    """Event: a booking was cancelled by its owner or by the system"""
    booking_id: UUID = None
    previous_status: str = ''
    reason: str = ''


@dataclass
class BookingModified(DomainEvent):
    """Event: the owner changed the dates or the guest count of a booking"""
    booking_id: UUID = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    number_of_guests: int = 0
    total_price: Optional[Money] = None
