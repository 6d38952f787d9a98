"""Object builders shared by the booking, payment and notification tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model

from apps.bookings.models import Booking
from apps.hotels.models import Hotel, Room, RoomInventory, RoomType
from apps.payments.models import Payment

User = get_user_model()


def make_user(username: str = "guest", email: str | None = "guest@example.com"):
    return User.objects.create_user(
        username=username,
        email=email or "",
        password="GuestPass123",
        first_name=username.title(),
    )


def make_hotel(name: str = "Hotel Central") -> Hotel:
    return Hotel.objects.create(
        name=name,
        address="Av. Reforma 10",
        city="Mexico City",
        country="Mexico",
    )


def make_room(
    hotel: Hotel,
    *,
    room_type: str = RoomType.STANDARD_DOUBLE,
    price: str = "100.00",
    capacity: int = 2,
    allowed_count: int | None = 2,
) -> Room:
    """Create a room; also creates the inventory entry unless it exists."""
    if allowed_count is not None:
        RoomInventory.objects.get_or_create(
            hotel=hotel,
            room_type=room_type,
            defaults={"allowed_count": allowed_count},
        )
    return Room.objects.create(
        hotel=hotel,
        room_type=room_type,
        price_per_night=Decimal(price),
        capacity=capacity,
    )


def make_pending_booking(
    user,
    room: Room,
    *,
    check_in: date = date(2024, 6, 1),
    check_out: date = date(2024, 6, 4),
    status: str = Booking.Status.PENDING,
    payment: Payment | None = None,
) -> Booking:
    """Insert a booking with its own payment directly, bypassing the handler."""
    if payment is None:
        payment = Payment.objects.create(amount=Decimal("300.00"))
    return Booking.objects.create(
        user=user,
        hotel=room.hotel,
        room=room,
        payment=payment,
        check_in=check_in,
        check_out=check_out,
        number_of_guests=1,
        total_price=Decimal("300.00"),
        status=status,
    )
