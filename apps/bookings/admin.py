"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "hotel",
        "room",
        "user",
        "status",
        "check_in",
        "check_out",
        "total_price",
        "payment",
        "confirmation_email_sent",
        "created_at",
    )
    list_filter = ("status", "confirmation_email_sent", "check_in", "hotel")
    search_fields = ("id", "hotel__name", "user__email", "payment__stripe_payment_intent_id")
    readonly_fields = (
        "id",
        "payment",
        "total_price",
        "currency",
        "status",
        "cancelled_at",
        "created_at",
        "updated_at",
    )
