"""Payment models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import PaymentStatus
from shared.domain.value_objects import Money


class Payment(models.Model):
    """One charge covering every booking created in the same checkout."""

    class Status(models.TextChoices):
        PENDING = PaymentStatus.PENDING.value, _("Pending")
        SUCCEEDED = PaymentStatus.SUCCEEDED.value, _("Succeeded")
        FAILED = PaymentStatus.FAILED.value, _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, db_index=True)
    stripe_checkout_session_id = models.CharField(max_length=255, blank=True, db_index=True)
    checkout_expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("When the latest Stripe Checkout Session for this payment closes."),
    )
    failure_reason = models.CharField(max_length=255, blank=True)
    settled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="payments_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Payment {self.pk} ({self.status})"

    @property
    def money(self) -> Money:
        return Money(self.amount, self.currency)


class PaymentEvent(models.Model):
    """Log of payment provider webhook deliveries."""

    class Outcome(models.TextChoices):
        APPLIED = "applied", _("Applied")
        DUPLICATE = "duplicate", _("Duplicate, no change")
        IGNORED = "ignored", _("Ignored")
        INVALID = "invalid", _("Invalid correlation data")
        REFUND_REQUIRED = "refund_required", _("Charged after the payment failed")

    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=100)
    payment = models.ForeignKey(
        Payment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="events",
    )
    payload = models.JSONField(default=dict)
    outcome = models.CharField(max_length=20, choices=Outcome.choices)
    bookings_updated = models.PositiveIntegerField(default=0)
    payments_updated = models.PositiveIntegerField(default=0)
    deliveries = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment event")
        verbose_name_plural = _("Payment events")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.event_type} {self.event_id} ({self.outcome})"
