"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork

from .domain.entities import BookingStatus, PaymentStatus
from .domain.events import BookingCancelled
from .models import Booking

logger = logging.getLogger(__name__)

ABANDONED_CHECKOUT_REASON = "checkout abandoned"


# ============================================================================
# PERIODIC TASKS (run by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="bookings.release_abandoned_checkouts")
def release_abandoned_checkouts() -> dict[str, int]:
    """
    Release inventory held by checkouts that were never paid.

    Payments still PENDING after PENDING_BOOKING_TTL_MINUTES, with no
    Stripe Checkout Session still open, have their PENDING bookings
    cancelled and are marked FAILED. Both writes are
    conditional on PENDING, so a webhook that settles the payment first
    wins and a late one afterwards changes nothing.

    Runs every 5 minutes.

    Returns:
        dict: {"payments": payments released, "bookings": bookings cancelled}
    """
    from apps.payments.models import Payment

    ttl_minutes = int(getattr(settings, "PENDING_BOOKING_TTL_MINUTES", 60))
    if ttl_minutes <= 0:
        return {"payments": 0, "bookings": 0}

    now = timezone.now()
    cutoff = now - timedelta(minutes=ttl_minutes)
    stale_payment_ids = list(
        Payment.objects.filter(
            status=PaymentStatus.PENDING.value,
            created_at__lte=cutoff,
        )
        .filter(Q(checkout_expires_at__isnull=True) | Q(checkout_expires_at__lte=now))
        .values_list("id", flat=True)
    )

    released_payments = 0
    cancelled_bookings = 0
    for payment_id in stale_payment_ids:
        now = timezone.now()
        with DjangoUnitOfWork() as uow:
            payments_updated = Payment.objects.filter(
                pk=payment_id,
                status=PaymentStatus.PENDING.value,
            ).update(
                status=PaymentStatus.FAILED.value,
                failure_reason=ABANDONED_CHECKOUT_REASON,
                settled_at=now,
                updated_at=now,
            )
            if not payments_updated:
                continue

            pending = Booking.objects.filter(payment_id=payment_id, status=BookingStatus.PENDING.value)
            booking_ids = list(pending.values_list("id", flat=True))
            bookings_updated = pending.filter(pk__in=booking_ids).update(
                status=BookingStatus.CANCELLED.value,
                cancelled_at=now,
                cancellation_reason=ABANDONED_CHECKOUT_REASON,
                updated_at=now,
            )
            for booking_id in booking_ids:
                uow.add_event(BookingCancelled(
                    booking_id=booking_id,
                    previous_status=BookingStatus.PENDING.value,
                    reason=ABANDONED_CHECKOUT_REASON,
                ))

        released_payments += payments_updated
        cancelled_bookings += bookings_updated
        logger.info(
            f"Released abandoned checkout: payment {payment_id}, "
            f"{bookings_updated} booking(s) cancelled"
        )

    if released_payments:
        logger.info(
            f"Released {released_payments} abandoned checkouts, "
            f"{cancelled_bookings} bookings cancelled"
        )
    return {"payments": released_payments, "bookings": cancelled_bookings}


@shared_task(name="bookings.complete_finished_stays")
def complete_finished_stays() -> dict[str, int]:
    """
    Mark confirmed bookings whose check-out date has passed as COMPLETED.

    Runs once a day.
    """
    today = timezone.localdate()
    completed = Booking.objects.filter(
        status=BookingStatus.CONFIRMED.value,
        check_out__lte=today,
    ).update(status=BookingStatus.COMPLETED.value, updated_at=timezone.now())

    if completed:
        logger.info(f"Completed {completed} finished stays")
    return {"completed": completed}
