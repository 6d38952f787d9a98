"""Hotel administration services for materializing rooms."""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction  # type: ignore

from apps.bookings.domain.inventory import can_accommodate
from shared.infrastructure.db import lock_queryset_if_possible

from .models import Hotel, Room, RoomInventory

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Raised when rooms cannot be created within the hotel's inventory."""


@transaction.atomic
def add_rooms(
    hotel: Hotel,
    room_type: str,
    count: int,
    *,
    price_per_night: Decimal,
    capacity: int,
    beds: int = 1,
    description: str = "",
) -> list[Room]:
    """Create `count` identical rooms, refusing to exceed the inventory entry.

    Either all rooms are created or none.
    """

    if count < 1:
        raise InventoryError("At least one room must be requested.")

    entry_qs = lock_queryset_if_possible(
        RoomInventory.objects.filter(hotel=hotel, room_type=room_type)
    )
    entry = entry_qs.first()
    if entry is None:
        raise InventoryError(
            f"No inventory is defined for room type {room_type} at hotel {hotel.name}."
        )

    existing = Room.objects.filter(hotel=hotel, room_type=room_type).count()
    if not can_accommodate(entry.to_entry(), existing, count):
        raise InventoryError(
            f"Cannot add {count} rooms of type {room_type} to hotel {hotel.name}: "
            f"inventory is {entry.allowed_count} and {existing} already exist."
        )

    rooms = Room.objects.bulk_create(
        [
            Room(
                hotel=hotel,
                room_type=room_type,
                price_per_night=price_per_night,
                capacity=capacity,
                beds=beds,
                description=description,
            )
            for _ in range(count)
        ]
    )
    logger.info(f"Added {count} rooms of type {room_type} to hotel {hotel.pk}")
    return rooms
