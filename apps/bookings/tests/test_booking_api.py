"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.payments.models import Payment

from .helpers import make_hotel, make_pending_booking, make_room, make_user


class BookingAPITests(APITestCase):
    """Covers checkout, error mapping, listing and cancellation."""

    def setUp(self) -> None:
        self.guest = make_user("guest", "guest@example.com")
        self.other = make_user("other", "other@example.com")
        self.hotel = make_hotel()
        self.room = make_room(self.hotel, price="100.00", capacity=2, allowed_count=2)
        self.client.force_authenticate(self.guest)
        self.list_url = reverse("booking-list")

    def _payload(self, **overrides) -> dict:
        payload = {
            "hotel_id": self.hotel.id,
            "room_id": self.room.id,
            "check_in": "2024-06-01",
            "check_out": "2024-06-04",
            "number_of_guests": 2,
            "number_of_rooms": 1,
        }
        payload.update(overrides)
        return payload

    def test_guest_can_create_booking(self) -> None:
        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(len(response.data["booking_ids"]), 1)
        self.assertEqual(response.data["total_amount"], "300.00")
        self.assertEqual(response.data["currency"], "USD")
        booking = Booking.objects.get()
        self.assertEqual(booking.user, self.guest)
        self.assertEqual(str(booking.payment_id), response.data["payment_id"])
        self.assertEqual(Payment.objects.get().amount, Decimal("300.00"))

    def test_validation_error_maps_to_400(self) -> None:
        response = self.client.post(self.list_url, self._payload(number_of_guests=5), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "capacity_exceeded")
        self.assertEqual(Booking.objects.count(), 0)

    def test_same_day_stay_maps_to_400(self) -> None:
        response = self.client.post(self.list_url, self._payload(check_out="2024-06-01"), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "invalid_date_range")

    def test_malformed_payload_rejected_by_serializer(self) -> None:
        response = self.client.post(self.list_url, {"hotel_id": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_room_maps_to_404(self) -> None:
        response = self.client.post(self.list_url, self._payload(room_id=999999), format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_conflict_maps_to_409(self) -> None:
        make_pending_booking(self.other, self.room)
        make_pending_booking(self.other, self.room)

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "insufficient_inventory")

    def test_anonymous_user_gets_401(self) -> None:
        self.client.force_authenticate(None)
        response = self.client.post(self.list_url, self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_shows_only_own_bookings(self) -> None:
        own = make_pending_booking(self.guest, self.room)
        make_pending_booking(self.other, self.room)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual([item["id"] for item in results], [str(own.pk)])

    def test_list_filters_by_status(self) -> None:
        make_pending_booking(self.guest, self.room)
        confirmed = make_pending_booking(self.guest, self.room, status=Booking.Status.CONFIRMED)

        response = self.client.get(self.list_url, {"status": "CONFIRMED"})

        results = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual([item["id"] for item in results], [str(confirmed.pk)])

    def test_retrieve_other_users_booking_is_404(self) -> None:
        booking = make_pending_booking(self.other, self.room)
        response = self.client.get(reverse("booking-detail", args=[booking.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_owner_can_cancel(self) -> None:
        booking = make_pending_booking(self.guest, self.room)

        response = self.client.post(
            reverse("booking-cancel", args=[booking.pk]), {"reason": "plans changed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], "CANCELLED")
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)

    def test_cancel_someone_elses_booking_is_403(self) -> None:
        booking = make_pending_booking(self.other, self.room)
        response = self.client.post(reverse("booking-cancel", args=[booking.pk]), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cancel_terminal_booking_is_409(self) -> None:
        booking = make_pending_booking(self.guest, self.room, status=Booking.Status.REJECTED)
        response = self.client.post(reverse("booking-cancel", args=[booking.pk]), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "invalid_state_for_cancellation")

    def test_malformed_booking_id_is_404(self) -> None:
        dashes = "-" * 36
        self.assertEqual(
            self.client.post(f"/api/v1/bookings/{dashes}/cancel/", {}, format="json").status_code,
            status.HTTP_404_NOT_FOUND,
        )
        self.assertEqual(
            self.client.get(f"/api/v1/bookings/{dashes}/").status_code,
            status.HTTP_404_NOT_FOUND,
        )

    def test_owner_can_change_dates(self) -> None:
        booking = make_pending_booking(self.guest, self.room)

        response = self.client.patch(
            reverse("booking-detail", args=[booking.pk]),
            {"check_in": "2024-06-10", "check_out": "2024-06-12"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["check_in"], "2024-06-10")
        self.assertEqual(response.data["total_price"], "200.00")

    def test_modify_someone_elses_booking_is_403(self) -> None:
        booking = make_pending_booking(self.other, self.room)
        response = self.client.patch(
            reverse("booking-detail", args=[booking.pk]), {"number_of_guests": 2}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_modify_cancelled_booking_is_409(self) -> None:
        booking = make_pending_booking(self.guest, self.room, status=Booking.Status.CANCELLED)
        response = self.client.patch(
            reverse("booking-detail", args=[booking.pk]), {"number_of_guests": 2}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "invalid_state_for_modification")

    def test_empty_modification_is_400(self) -> None:
        booking = make_pending_booking(self.guest, self.room)
        response = self.client.patch(reverse("booking-detail", args=[booking.pk]), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
