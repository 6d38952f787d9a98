from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.hotels.models import Hotel, Room, RoomInventory, RoomType
from apps.hotels.services import InventoryError, add_rooms


class AddRoomsTests(TestCase):
    def setUp(self) -> None:
        self.hotel = Hotel.objects.create(
            name="Hotel Norte", address="Calle 1", city="Monterrey", country="Mexico"
        )
        RoomInventory.objects.create(hotel=self.hotel, room_type=RoomType.SUITE, allowed_count=3)

    def _add(self, count: int, room_type: str = RoomType.SUITE):
        return add_rooms(
            self.hotel, room_type, count, price_per_night=Decimal("250.00"), capacity=4
        )

    def test_rooms_within_inventory_are_created(self) -> None:
        rooms = self._add(2)

        self.assertEqual(len(rooms), 2)
        self.assertEqual(Room.objects.filter(hotel=self.hotel, room_type=RoomType.SUITE).count(), 2)

    def test_inventory_can_be_filled_exactly(self) -> None:
        self._add(2)
        self._add(1)
        self.assertEqual(Room.objects.filter(hotel=self.hotel).count(), 3)

    def test_exceeding_inventory_creates_nothing(self) -> None:
        self._add(2)

        with self.assertRaises(InventoryError):
            self._add(2)

        self.assertEqual(Room.objects.filter(hotel=self.hotel).count(), 2)

    def test_room_type_without_inventory_is_refused(self) -> None:
        with self.assertRaises(InventoryError):
            self._add(1, RoomType.DELUXE_KING)
        self.assertFalse(Room.objects.exists())

    def test_count_must_be_positive(self) -> None:
        with self.assertRaises(InventoryError):
            self._add(0)


class RoomCleanTests(TestCase):
    def setUp(self) -> None:
        self.hotel = Hotel.objects.create(
            name="Hotel Sur", address="Calle 2", city="Oaxaca", country="Mexico"
        )
        RoomInventory.objects.create(
            hotel=self.hotel, room_type=RoomType.STANDARD_SINGLE, allowed_count=1
        )

    def _room(self, room_type: str = RoomType.STANDARD_SINGLE) -> Room:
        return Room(
            hotel=self.hotel,
            room_type=room_type,
            price_per_night=Decimal("60.00"),
            capacity=1,
        )

    def test_room_within_inventory_is_valid(self) -> None:
        self._room().full_clean()

    def test_room_beyond_inventory_is_invalid(self) -> None:
        self._room().save()

        with self.assertRaises(ValidationError):
            self._room().full_clean()

    def test_room_without_inventory_is_invalid(self) -> None:
        with self.assertRaises(ValidationError):
            self._room(RoomType.SUITE).full_clean()

    def test_existing_room_can_be_edited_when_full(self) -> None:
        room = self._room()
        room.save()
        room.description = "Quiet side"

        room.full_clean()
