"""Concurrent checkouts against one room type.

The threaded test needs real row locks, so it only runs on PostgreSQL
(DB_ENGINE=django.db.backends.postgresql). The interleaved test runs on
every backend.
"""

from __future__ import annotations

import threading
import unittest
from datetime import date
from unittest.mock import patch

from django.db import connection, connections
from django.test import TestCase, TransactionTestCase

from apps.bookings.application import command_handlers
from apps.bookings.application.command_handlers import CreateBookingCommand, CreateBookingHandler
from apps.bookings.domain.errors import InsufficientInventory
from apps.bookings.models import Booking
from apps.payments.models import Payment

from .helpers import make_hotel, make_pending_booking, make_room, make_user


@unittest.skipUnless(connection.vendor == "postgresql", "row locks need PostgreSQL")
class ConcurrentCreateBookingTests(TransactionTestCase):
    def test_parallel_requests_never_exceed_inventory(self) -> None:
        users = [make_user(f"guest{i}", f"guest{i}@example.com") for i in range(6)]
        hotel = make_hotel()
        room = make_room(hotel, allowed_count=3)
        barrier = threading.Barrier(len(users))
        results = []
        lock = threading.Lock()

        def book(user) -> None:
            try:
                barrier.wait()
                result = CreateBookingHandler().handle(
                    CreateBookingCommand(
                        user_id=user.id,
                        hotel_id=hotel.id,
                        room_id=room.id,
                        check_in=date(2024, 6, 1),
                        check_out=date(2024, 6, 4),
                    )
                )
                with lock:
                    results.append(result)
            finally:
                connections.close_all()

        threads = [threading.Thread(target=book, args=(user,)) for user in users]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        succeeded = [r for r in results if r.ok]
        refused = [r for r in results if not r.ok]
        self.assertEqual(len(succeeded), 3)
        self.assertTrue(all(isinstance(r.error, InsufficientInventory) for r in refused))
        self.assertEqual(Booking.objects.count(), 3)
        self.assertEqual(Payment.objects.count(), 3)


class InterleavedCreateBookingTests(TestCase):
    """Each request lets the next one in right after taking the inventory lock."""

    def setUp(self) -> None:
        self.hotel = make_hotel()
        self.room = make_room(self.hotel, allowed_count=3)
        make_pending_booking(make_user("early", "early@example.com"), self.room)

    def _book(self, user):
        return CreateBookingHandler().handle(
            CreateBookingCommand(
                user_id=user.id,
                hotel_id=self.hotel.id,
                room_id=self.room.id,
                check_in=date(2024, 6, 2),
                check_out=date(2024, 6, 5),
            )
        )

    def test_queued_requests_never_exceed_remaining_inventory(self) -> None:
        users = [make_user(f"guest{i}", f"guest{i}@example.com") for i in range(6)]
        waiting = list(users[1:])
        results = []
        real_lock = command_handlers.lock_queryset_if_possible

        def lock_and_admit_next(queryset):
            locked = real_lock(queryset)
            if waiting:
                results.append(self._book(waiting.pop(0)))
            return locked

        with patch.object(command_handlers, "lock_queryset_if_possible", side_effect=lock_and_admit_next):
            results.append(self._book(users[0]))

        self.assertEqual(len(results), 6)
        successes = [result for result in results if result.ok]
        self.assertEqual(len(successes), 2)
        self.assertTrue(
            all(isinstance(r.error, InsufficientInventory) for r in results if not r.ok)
        )
        overlapping = Booking.objects.active().overlapping(date(2024, 6, 2), date(2024, 6, 5))
        self.assertEqual(overlapping.count(), 3)
        self.assertEqual(Payment.objects.filter(bookings__isnull=True).count(), 0)
