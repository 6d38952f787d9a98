"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Reserve one or more rooms under a single payment
- CancelBookingCommand: Cancel a booking on behalf of its owner
- ModifyBookingCommand: Change the dates or guest count of a booking

Handlers never raise BookingError to their callers; expected failures
come back inside the result object. Database errors propagate.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
import logging

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import Money, nights_between
from shared.infrastructure.db import lock_queryset_if_possible
from apps.bookings.domain.entities import (
    BookingStatus,
    CANCELLABLE_STATUSES,
    MODIFIABLE_STATUSES,
)
from apps.bookings.domain.errors import (
    BookingError,
    BookingNotFound,
    CapacityExceeded,
    Forbidden,
    InsufficientInventory,
    InvalidBookingRequest,
    InvalidDateRange,
    InvalidStateForCancellation,
    InvalidStateForModification,
    PriceComputationError,
    RoomHotelMismatch,
    RoomNotFound,
    Unauthenticated,
    ZeroNightStay,
)
from apps.bookings.domain.events import BookingCancelled, BookingModified, BookingsCreated
from apps.bookings.domain.inventory import can_accommodate

logger = logging.getLogger(__name__)


def max_storable_amount() -> Decimal:
    """Largest amount the payment and booking price columns can hold"""
    from apps.bookings.models import Booking
    from apps.payments.models import Payment

    fields = (Payment._meta.get_field('amount'), Booking._meta.get_field('total_price'))
    return min(
        Decimal(10) ** (f.max_digits - f.decimal_places) - Decimal(1).scaleb(-f.decimal_places)
        for f in fields
    )


def ensure_storable(price: Money):
    if price.amount > max_storable_amount():
        raise PriceComputationError(
            f"Total price {price} exceeds the largest amount that can be charged."
        )


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to reserve `number_of_rooms` rooms of the same kind

    The authenticated user is passed explicitly; handlers never read
    the current request.
    """
    user_id: Optional[int]
    hotel_id: int
    room_id: int
    check_in: Optional[date]
    check_out: Optional[date]
    number_of_guests: int = 1
    number_of_rooms: int = 1


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: UUID
    user_id: Optional[int]
    reason: str = ''


@dataclass
class ModifyBookingCommand:
    """
    Command to change a booking

    Fields left as None keep their current value.
    """
    booking_id: UUID
    user_id: Optional[int]
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    number_of_guests: Optional[int] = None


# ===== Results =====

@dataclass
class CreateBookingResult:
    booking_ids: List[UUID] = field(default_factory=list)
    payment_id: Optional[UUID] = None
    total_amount: Optional[Money] = None
    error: Optional[BookingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CancelBookingResult:
    booking_id: Optional[UUID] = None
    previous_status: Optional[BookingStatus] = None
    error: Optional[BookingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ModifyBookingResult:
    booking_id: Optional[UUID] = None
    total_price: Optional[Money] = None
    error: Optional[BookingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Validation runs in a fixed order and the first failure wins:
    request shape, dates, room, capacity, nights, price, inventory.

    Strategy:
    1. Validate everything that does not need a lock
    2. Start database transaction (atomic)
    3. Lock the RoomInventory row for (hotel, room type)
    4. Count active bookings of that type overlapping the stay
    5. Create the Payment, then the Bookings referencing it
    6. Commit; BookingsCreated is published after commit

    Concurrent requests for the same room type queue up on the inventory
    row, so the overlap count they see already includes each other's
    bookings.
    """

    def handle(self, command: CreateBookingCommand) -> CreateBookingResult:
        logger.info(
            f"Creating {command.number_of_rooms} booking(s) for room {command.room_id}, "
            f"user {command.user_id}, dates {command.check_in} - {command.check_out}"
        )
        try:
            return self._create(command)
        except BookingError as e:
            logger.info(f"Booking request rejected ({e.code}): {e.message}")
            return CreateBookingResult(error=e)

    def _create(self, command: CreateBookingCommand) -> CreateBookingResult:
        from apps.bookings.models import Booking
        from apps.hotels.models import Room, RoomInventory
        from apps.payments.models import Payment

        if command.user_id is None:
            raise Unauthenticated()
        if command.number_of_guests is None or command.number_of_guests < 1:
            raise InvalidBookingRequest(
                'Number of guests must be at least 1.', field='number_of_guests'
            )
        if command.number_of_rooms is None or command.number_of_rooms < 1:
            raise InvalidBookingRequest(
                'Number of rooms must be at least 1.', field='number_of_rooms'
            )

        if command.check_in is None or command.check_out is None:
            raise InvalidDateRange('Check-in and check-out dates are required.')
        if command.check_in >= command.check_out:
            raise InvalidDateRange(field='check_out')

        room = Room.objects.filter(pk=command.room_id).first()
        if room is None:
            raise RoomNotFound(field='room_id')
        if str(room.hotel_id) != str(command.hotel_id):
            raise RoomHotelMismatch(field='room_id')

        if command.number_of_guests > room.capacity:
            raise CapacityExceeded(
                f"Guests count ({command.number_of_guests}) exceeds room capacity "
                f"({room.capacity})",
                field='number_of_guests',
            )

        nights = nights_between(command.check_in, command.check_out)
        if nights <= 0:
            raise ZeroNightStay()

        currency = getattr(settings, 'BOOKING_CURRENCY', 'USD')
        try:
            price_per_booking = Money(room.price_per_night, currency) * nights
            total = price_per_booking * command.number_of_rooms
        except (TypeError, ValueError) as e:
            raise PriceComputationError(f"Could not compute price: {e}")
        if not price_per_booking.is_positive:
            raise PriceComputationError()
        ensure_storable(total)

        with DjangoUnitOfWork() as uow:
            # Load inventory entry with pessimistic lock (SELECT FOR UPDATE)
            entry = lock_queryset_if_possible(
                RoomInventory.objects.filter(hotel_id=room.hotel_id, room_type=room.room_type)
            ).first()
            if entry is None:
                raise InsufficientInventory(
                    f"No inventory is defined for {room.room_type} at this hotel."
                )

            reserved = (
                Booking.objects.active()
                .for_room_type(room.hotel_id, room.room_type)
                .overlapping(command.check_in, command.check_out)
                .count()
            )
            if not can_accommodate(entry.to_entry(), reserved, command.number_of_rooms):
                raise InsufficientInventory(
                    f"Only {entry.to_entry().remaining(reserved)} room(s) of this type "
                    f"are available for these dates."
                )

            payment = Payment.objects.create(
                amount=total.amount,
                currency=total.currency,
                status=Payment.Status.PENDING,
            )
            bookings = Booking.objects.bulk_create([
                Booking(
                    user_id=command.user_id,
                    hotel_id=room.hotel_id,
                    room=room,
                    payment=payment,
                    check_in=command.check_in,
                    check_out=command.check_out,
                    number_of_guests=command.number_of_guests,
                    total_price=price_per_booking.amount,
                    currency=price_per_booking.currency,
                    status=Booking.Status.PENDING,
                )
                for _ in range(command.number_of_rooms)
            ])
            booking_ids = [booking.id for booking in bookings]

            uow.add_event(BookingsCreated(
                payment_id=payment.id,
                user_id=command.user_id,
                booking_ids=booking_ids,
                total_amount=total,
            ))

        logger.info(
            f"Created bookings {[str(b) for b in booking_ids]} with payment {payment.id} "
            f"for {total}"
        )
        return CreateBookingResult(
            booking_ids=booking_ids,
            payment_id=payment.id,
            total_amount=total,
        )


class CancelBookingHandler:
    """
    Handler for cancelling a booking

    The status change is a conditional update on the cancellable
    states; if a settlement or another cancellation moved the booking
    first, nothing is written and the request fails with
    InvalidStateForCancellation.
    """

    def handle(self, command: CancelBookingCommand) -> CancelBookingResult:
        logger.info(f"Cancelling booking {command.booking_id} for user {command.user_id}")
        try:
            return self._cancel(command)
        except BookingError as e:
            logger.info(f"Cancellation of {command.booking_id} rejected ({e.code})")
            return CancelBookingResult(booking_id=command.booking_id, error=e)

    def _cancel(self, command: CancelBookingCommand) -> CancelBookingResult:
        from apps.bookings.models import Booking

        if command.user_id is None:
            raise Unauthenticated()

        booking = Booking.objects.filter(pk=command.booking_id).first()
        if booking is None:
            raise BookingNotFound()
        if booking.user_id != command.user_id:
            raise Forbidden()

        previous_status = booking.domain_status
        if previous_status not in CANCELLABLE_STATUSES:
            raise InvalidStateForCancellation(
                f"Booking is {previous_status.value} and cannot be cancelled."
            )

        now = timezone.now()
        with DjangoUnitOfWork() as uow:
            updated = Booking.objects.filter(
                pk=booking.pk,
                status__in=[status.value for status in CANCELLABLE_STATUSES],
            ).update(
                status=BookingStatus.CANCELLED.value,
                cancelled_at=now,
                cancellation_reason=command.reason[:255],
                updated_at=now,
            )
            if not updated:
                raise InvalidStateForCancellation()

            uow.add_event(BookingCancelled(
                booking_id=booking.pk,
                previous_status=previous_status.value,
                reason=command.reason,
            ))

        logger.info(f"Booking {booking.pk} cancelled (was {previous_status.value})")
        return CancelBookingResult(booking_id=booking.pk, previous_status=previous_status)


class ModifyBookingHandler:
    """
    Handler for changing the dates or guest count of a booking

    Guest count may change while the booking is PENDING or CONFIRMED.
    Dates only change while the booking is still unpaid and no Stripe
    Checkout Session for its payment is open, because a new stay means
    a new price. The booking keeps its room type's inventory unit for
    the old dates until the update commits.

    Strategy:
    1. Validate the request, ownership and state
    2. Recompute the price from the room's nightly rate
    3. Lock the RoomInventory row and recount overlaps without this booking
    4. Conditional update on the values read in step 1
    5. Shift the pending payment's amount by the price difference
    """

    def handle(self, command: ModifyBookingCommand) -> ModifyBookingResult:
        logger.info(f"Modifying booking {command.booking_id} for user {command.user_id}")
        try:
            return self._modify(command)
        except BookingError as e:
            logger.info(f"Modification of {command.booking_id} rejected ({e.code}): {e.message}")
            return ModifyBookingResult(booking_id=command.booking_id, error=e)

    def _modify(self, command: ModifyBookingCommand) -> ModifyBookingResult:
        from apps.bookings.models import Booking
        from apps.hotels.models import RoomInventory
        from apps.payments.models import Payment

        if command.user_id is None:
            raise Unauthenticated()
        if command.check_in is None and command.check_out is None and command.number_of_guests is None:
            raise InvalidBookingRequest('No changes were provided.')
        if command.number_of_guests is not None and command.number_of_guests < 1:
            raise InvalidBookingRequest(
                'Number of guests must be at least 1.', field='number_of_guests'
            )

        booking = (
            Booking.objects.select_related('room', 'payment')
            .filter(pk=command.booking_id)
            .first()
        )
        if booking is None:
            raise BookingNotFound()
        if booking.user_id != command.user_id:
            raise Forbidden()
        if booking.domain_status not in MODIFIABLE_STATUSES:
            raise InvalidStateForModification(
                f"Booking is {booking.status} and cannot be modified."
            )

        check_in = command.check_in or booking.check_in
        check_out = command.check_out or booking.check_out
        guests = command.number_of_guests or booking.number_of_guests
        dates_changed = (check_in, check_out) != (booking.check_in, booking.check_out)

        if dates_changed:
            if check_in >= check_out:
                raise InvalidDateRange(field='check_out')
            if booking.domain_status is not BookingStatus.PENDING:
                raise InvalidStateForModification(
                    'Dates of a paid booking cannot be changed.'
                )
            expires_at = booking.payment.checkout_expires_at
            if expires_at is not None and expires_at > timezone.now():
                raise InvalidStateForModification(
                    'A checkout is open for this booking; dates can change once it closes.'
                )

        room = booking.room
        if guests > room.capacity:
            raise CapacityExceeded(
                f"Guests count ({guests}) exceeds room capacity ({room.capacity})",
                field='number_of_guests',
            )

        price = booking.price
        if dates_changed:
            nights = nights_between(check_in, check_out)
            if nights <= 0:
                raise ZeroNightStay()
            try:
                price = Money(room.price_per_night, booking.currency) * nights
            except (TypeError, ValueError) as e:
                raise PriceComputationError(f"Could not compute price: {e}")
            if not price.is_positive:
                raise PriceComputationError()
            ensure_storable(price)

        now = timezone.now()
        with DjangoUnitOfWork() as uow:
            if dates_changed:
                entry = lock_queryset_if_possible(
                    RoomInventory.objects.filter(hotel_id=booking.hotel_id, room_type=room.room_type)
                ).first()
                if entry is None:
                    raise InsufficientInventory(
                        f"No inventory is defined for {room.room_type} at this hotel."
                    )
                reserved = (
                    Booking.objects.active()
                    .for_room_type(booking.hotel_id, room.room_type)
                    .overlapping(check_in, check_out)
                    .exclude(pk=booking.pk)
                    .count()
                )
                if not can_accommodate(entry.to_entry(), reserved, 1):
                    raise InsufficientInventory(
                        'No room of this type is available for the new dates.'
                    )

            updated = Booking.objects.filter(
                pk=booking.pk,
                status=booking.status,
                check_in=booking.check_in,
                check_out=booking.check_out,
                number_of_guests=booking.number_of_guests,
            ).update(
                check_in=check_in,
                check_out=check_out,
                number_of_guests=guests,
                total_price=price.amount,
                updated_at=now,
            )
            if not updated:
                raise InvalidStateForModification(
                    'Booking changed while it was being modified; please retry.'
                )

            difference = price.amount - booking.total_price
            if difference:
                Payment.objects.filter(
                    pk=booking.payment_id,
                    status=Payment.Status.PENDING,
                ).update(amount=F('amount') + difference, updated_at=now)

            uow.add_event(BookingModified(
                booking_id=booking.pk,
                check_in=check_in,
                check_out=check_out,
                number_of_guests=guests,
                total_price=price,
            ))

        logger.info(
            f"Booking {booking.pk} modified: {check_in} - {check_out}, "
            f"{guests} guest(s), {price}"
        )
        return ModifyBookingResult(booking_id=booking.pk, total_price=price)
