"""Payment endpoints: Stripe webhook intake and checkout initiation."""

from __future__ import annotations

import logging

import stripe
from django.conf import settings  # type: ignore
from django.db.models import F  # type: ignore
from django.http import JsonResponse  # type: ignore
from django.utils import timezone  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_POST  # type: ignore
from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.serializers import BookingSerializer

from . import stripe_service
from .application.settlement import SettlementReconciler
from .models import Payment, PaymentEvent
from .stripe_service import CorrelationDataInvalid

logger = logging.getLogger(__name__)


def record_payment_event(event: dict, outcome: str, result=None) -> None:
    """Log one webhook delivery; a redelivered event id bumps the same row."""

    event_id = event.get("id")
    if not event_id:
        return

    payment_id = result.payment_ids[0] if result is not None and result.payment_ids else None
    bookings_updated = result.bookings_updated if result is not None else 0
    payments_updated = result.payments_updated if result is not None else 0

    record, created = PaymentEvent.objects.get_or_create(
        event_id=event_id,
        defaults={
            "event_type": event.get("type", ""),
            "payment_id": payment_id,
            "payload": event,
            "outcome": outcome,
            "bookings_updated": bookings_updated,
            "payments_updated": payments_updated,
        },
    )
    if not created:
        PaymentEvent.objects.filter(pk=record.pk).update(
            deliveries=F("deliveries") + 1,
            outcome=outcome,
            bookings_updated=bookings_updated,
            payments_updated=payments_updated,
            updated_at=timezone.now(),
        )


@csrf_exempt
@require_POST
def stripe_webhook(request):
    """
    Stripe webhook intake

    400 tells Stripe the request itself is broken; 500 makes it redeliver
    later. Everything that was understood, including events without
    usable booking metadata, is acknowledged with 200.
    """
    if not getattr(settings, "STRIPE_WEBHOOK_SECRET", ""):
        logger.error("STRIPE_WEBHOOK_SECRET is not configured; cannot verify webhook")
        return JsonResponse({"error": "Webhook secret not configured"}, status=500)

    signature = request.headers.get("Stripe-Signature")
    if not signature:
        logger.warning("Stripe webhook without Stripe-Signature header")
        return JsonResponse({"error": "Missing signature"}, status=400)

    try:
        event = stripe_service.construct_event(request.body, signature)
    except ValueError as e:
        logger.warning(f"Stripe webhook with invalid payload: {e}")
        return JsonResponse({"error": "Invalid payload"}, status=400)
    except stripe.SignatureVerificationError as e:
        logger.warning(f"Stripe webhook signature verification failed: {e}")
        return JsonResponse({"error": "Invalid signature"}, status=400)

    event_type = event.get("type", "")
    logger.info(f"Stripe webhook received: {event_type} ({event.get('id')})")

    try:
        settlement = stripe_service.settlement_event_from_stripe(event)
    except CorrelationDataInvalid as e:
        logger.error(f"Cannot correlate Stripe event {event.get('id')} to bookings: {e}")
        record_payment_event(event, PaymentEvent.Outcome.INVALID)
        return JsonResponse({"received": True})

    if settlement is None:
        if event_type in stripe_service.HANDLED_EVENT_TYPES:
            record_payment_event(event, PaymentEvent.Outcome.IGNORED)
        return JsonResponse({"received": True})

    try:
        result = SettlementReconciler().settle(settlement)
    except Exception as e:
        logger.error(f"Settlement of Stripe event {event.get('id')} failed: {e}", exc_info=True)
        return JsonResponse({"error": "Settlement failed"}, status=500)

    if result.refund_required:
        outcome = PaymentEvent.Outcome.REFUND_REQUIRED
    elif result.duplicate:
        outcome = PaymentEvent.Outcome.DUPLICATE
    else:
        outcome = PaymentEvent.Outcome.APPLIED
    record_payment_event(event, outcome, result)
    return JsonResponse({"received": True})


class PaymentCheckoutView(APIView):
    """Start Stripe Checkout for a pending payment owned by the current user."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk=None):  # type: ignore
        payment = Payment.objects.filter(pk=pk).first()
        if payment is None:
            return Response({"detail": "Payment not found."}, status=status.HTTP_404_NOT_FOUND)

        bookings = list(Booking.objects.filter(payment=payment))
        if not bookings or any(booking.user_id != request.user.id for booking in bookings):
            return Response(
                {"detail": "You do not have permission to pay for these bookings."},
                status=status.HTTP_403_FORBIDDEN,
            )

        pending = [b for b in bookings if b.status == Booking.Status.PENDING]
        if payment.status != Payment.Status.PENDING or not pending:
            return Response(
                {"detail": f"Payment is {payment.status} and cannot be paid."},
                status=status.HTTP_409_CONFLICT,
            )

        try:
            session = stripe_service.create_checkout_session(payment, pending)
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session for payment {payment.pk} failed: {e}")
            return Response(
                {"detail": "Payment provider unavailable, try again later."},
                status=status.HTTP_502_BAD_GATEWAY,
            )

        # The charge covers only the rooms still pending; cancelled ones drop out.
        Payment.objects.filter(pk=payment.pk, status=Payment.Status.PENDING).update(
            amount=session["amount"].amount,
            stripe_checkout_session_id=session["id"],
            checkout_expires_at=session["expires_at"],
            updated_at=timezone.now(),
        )
        return Response(
            {
                "url": session["url"],
                "session_id": session["id"],
                "amount": str(session["amount"].amount),
                "currency": session["amount"].currency,
                "expires_at": session["expires_at"].isoformat(),
            }
        )


class CheckoutSessionBookingsView(APIView):
    """
    Bookings paid through a Stripe Checkout Session

    Backs the payment-success page Stripe redirects to. The latest
    session id is stored on the Payment; older sessions of the same
    payment are resolved through their bookingIds metadata.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, session_id=None):  # type: ignore
        payment = Payment.objects.filter(stripe_checkout_session_id=session_id).first()
        if payment is not None:
            bookings = list(Booking.objects.filter(payment=payment).select_related("hotel", "room"))
        else:
            try:
                booking_ids = stripe_service.booking_ids_for_session(session_id)
            except stripe.InvalidRequestError:
                return Response({"detail": "Checkout session not found."}, status=status.HTTP_404_NOT_FOUND)
            except CorrelationDataInvalid as e:
                logger.error(f"Checkout session {session_id} cannot be resolved: {e}")
                return Response({"detail": "Checkout session not found."}, status=status.HTTP_404_NOT_FOUND)
            except stripe.StripeError as e:
                logger.error(f"Stripe lookup of checkout session {session_id} failed: {e}")
                return Response(
                    {"detail": "Payment provider unavailable, try again later."},
                    status=status.HTTP_502_BAD_GATEWAY,
                )
            bookings = list(Booking.objects.filter(pk__in=booking_ids).select_related("hotel", "room"))
            payment = bookings[0].payment if bookings else None

        if payment is None or not bookings:
            return Response({"detail": "Checkout session not found."}, status=status.HTTP_404_NOT_FOUND)
        if any(booking.user_id != request.user.id for booking in bookings):
            return Response(
                {"detail": "You do not have permission to view these bookings."},
                status=status.HTTP_403_FORBIDDEN,
            )

        return Response(
            {
                "session_id": session_id,
                "payment_id": str(payment.pk),
                "payment_status": payment.status,
                "amount": str(payment.amount),
                "currency": payment.currency,
                "bookings": BookingSerializer(bookings, many=True).data,
            }
        )
