"""Booking models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain.entities import ACTIVE_STATUSES, BookingStatus
from shared.domain.value_objects import Money


class BookingQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status__in=[status.value for status in ACTIVE_STATUSES])

    def overlapping(self, check_in, check_out):
        return self.filter(check_in__lt=check_out, check_out__gt=check_in)

    def for_room_type(self, hotel_id, room_type):
        return self.filter(hotel_id=hotel_id, room__room_type=room_type)


class Booking(models.Model):
    """Reservation of one room for a stay."""

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending payment")
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        REJECTED = BookingStatus.REJECTED.value, _("Payment rejected")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    hotel = models.ForeignKey(
        "hotels.Hotel",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    room = models.ForeignKey(
        "hotels.Room",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    payment = models.ForeignKey(
        "payments.Payment",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    check_in = models.DateField()
    check_out = models.DateField()
    number_of_guests = models.PositiveSmallIntegerField(default=1)
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Price of this room for the whole stay, fixed at booking time."),
    )
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    confirmation_email_sent = models.BooleanField(default=False)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["hotel", "check_in", "check_out"], name="bookings_hotel_dates_idx"),
            models.Index(fields=["status"], name="bookings_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.pk} ({self.status})"

    @property
    def domain_status(self) -> BookingStatus:
        return BookingStatus(self.status)

    @property
    def price(self) -> Money:
        return Money(self.total_price, self.currency)
