"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Checkout request: one or more rooms of the same kind for one stay.

    Only the shape of the request is checked here; the business rules
    run in CreateBookingHandler so they apply in a fixed order.
    """

    hotel_id = serializers.IntegerField()
    room_id = serializers.IntegerField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    number_of_guests = serializers.IntegerField(default=1)
    number_of_rooms = serializers.IntegerField(default=1)


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, allow_blank=True, default="")


class BookingModifySerializer(serializers.Serializer):
    """Partial change of a booking; omitted fields keep their value."""

    check_in = serializers.DateField(required=False)
    check_out = serializers.DateField(required=False)
    number_of_guests = serializers.IntegerField(required=False)


class BookingSerializer(serializers.ModelSerializer):
    """Read-only representation of a booking for its owner."""

    user_id = serializers.ReadOnlyField(source="user.id")
    hotel_id = serializers.ReadOnlyField(source="hotel.id")
    hotel_name = serializers.ReadOnlyField(source="hotel.name")
    room_id = serializers.ReadOnlyField(source="room.id")
    room_type = serializers.ReadOnlyField(source="room.room_type")
    payment_id = serializers.ReadOnlyField(source="payment.id")
    payment_status = serializers.ReadOnlyField(source="payment.status")

    class Meta:
        model = Booking
        fields = [
            "id",
            "user_id",
            "hotel_id",
            "hotel_name",
            "room_id",
            "room_type",
            "payment_id",
            "payment_status",
            "check_in",
            "check_out",
            "number_of_guests",
            "total_price",
            "currency",
            "status",
            "confirmation_email_sent",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
