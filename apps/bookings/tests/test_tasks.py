from __future__ import annotations

from datetime import date, timedelta

from django.test import TestCase, override_settings
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.tasks import complete_finished_stays, release_abandoned_checkouts
from apps.payments.application.settlement import SettlementEvent, SettlementOutcome, SettlementReconciler
from apps.payments.models import Payment

from .helpers import make_hotel, make_pending_booking, make_room, make_user


class ReleaseAbandonedCheckoutsTests(TestCase):
    def setUp(self) -> None:
        self.user = make_user()
        self.room = make_room(make_hotel())

    def _age(self, payment: Payment, minutes: int) -> None:
        Payment.objects.filter(pk=payment.pk).update(created_at=timezone.now() - timedelta(minutes=minutes))

    def test_stale_checkout_is_released(self) -> None:
        booking = make_pending_booking(self.user, self.room)
        self._age(booking.payment, 120)

        result = release_abandoned_checkouts()

        self.assertEqual(result, {"payments": 1, "bookings": 1})
        booking.refresh_from_db()
        booking.payment.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(booking.cancellation_reason, "checkout abandoned")
        self.assertEqual(booking.payment.status, Payment.Status.FAILED)

    def test_recent_checkout_is_kept(self) -> None:
        booking = make_pending_booking(self.user, self.room)
        self._age(booking.payment, 10)

        self.assertEqual(release_abandoned_checkouts(), {"payments": 0, "bookings": 0})
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.PENDING)

    def test_settled_payments_are_untouched(self) -> None:
        booking = make_pending_booking(self.user, self.room, status=Booking.Status.CONFIRMED)
        Payment.objects.filter(pk=booking.payment_id).update(status=Payment.Status.SUCCEEDED)
        self._age(booking.payment, 120)

        self.assertEqual(release_abandoned_checkouts(), {"payments": 0, "bookings": 0})

    @override_settings(PENDING_BOOKING_TTL_MINUTES=0)
    def test_zero_ttl_disables_reaper(self) -> None:
        booking = make_pending_booking(self.user, self.room)
        self._age(booking.payment, 10_000)

        self.assertEqual(release_abandoned_checkouts(), {"payments": 0, "bookings": 0})

    def test_late_success_after_release_changes_nothing(self) -> None:
        booking = make_pending_booking(self.user, self.room)
        self._age(booking.payment, 120)
        release_abandoned_checkouts()

        result = SettlementReconciler().settle(
            SettlementEvent(
                outcome=SettlementOutcome.SUCCEEDED,
                booking_ids=(booking.pk,),
                provider_txn_id="pi_late",
            )
        )

        self.assertTrue(result.duplicate)
        self.assertTrue(result.refund_required)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)

    def test_payment_with_open_checkout_session_is_kept(self) -> None:
        booking = make_pending_booking(self.user, self.room)
        self._age(booking.payment, 120)
        Payment.objects.filter(pk=booking.payment_id).update(
            checkout_expires_at=timezone.now() + timedelta(minutes=10)
        )

        self.assertEqual(release_abandoned_checkouts(), {"payments": 0, "bookings": 0})
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.PENDING)

    def test_payment_whose_session_closed_is_released(self) -> None:
        booking = make_pending_booking(self.user, self.room)
        self._age(booking.payment, 120)
        Payment.objects.filter(pk=booking.payment_id).update(
            checkout_expires_at=timezone.now() - timedelta(minutes=1)
        )

        self.assertEqual(release_abandoned_checkouts(), {"payments": 1, "bookings": 1})


class CompleteFinishedStaysTests(TestCase):
    def test_confirmed_past_stays_are_completed(self) -> None:
        user = make_user()
        room = make_room(make_hotel())
        today = timezone.localdate()
        finished = make_pending_booking(
            user, room, check_in=today - timedelta(days=3), check_out=today, status=Booking.Status.CONFIRMED
        )
        upcoming = make_pending_booking(
            user, room, check_in=today, check_out=today + timedelta(days=2), status=Booking.Status.CONFIRMED
        )
        pending = make_pending_booking(
            user, room, check_in=date(2020, 1, 1), check_out=date(2020, 1, 3)
        )

        self.assertEqual(complete_finished_stays(), {"completed": 1})

        for booking in (finished, upcoming, pending):
            booking.refresh_from_db()
        self.assertEqual(finished.status, Booking.Status.COMPLETED)
        self.assertEqual(upcoming.status, Booking.Status.CONFIRMED)
        self.assertEqual(pending.status, Booking.Status.PENDING)
