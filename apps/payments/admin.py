"""Admin registration for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import Payment, PaymentEvent


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "amount", "currency", "status", "stripe_payment_intent_id", "settled_at", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("id", "stripe_payment_intent_id", "stripe_checkout_session_id")
    readonly_fields = (
        "id", "amount", "currency", "status", "checkout_expires_at", "settled_at", "created_at", "updated_at",
    )


@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "event_type", "outcome", "bookings_updated", "payments_updated", "deliveries", "created_at")
    list_filter = ("event_type", "outcome")
    search_fields = ("event_id",)
    readonly_fields = ("payload",)
