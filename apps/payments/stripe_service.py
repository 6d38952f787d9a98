"""
Stripe Payment Gateway Integration

Translates Stripe webhook events into SettlementEvents and opens
Checkout Sessions for pending payments.
"""

import json
import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

import stripe
from django.conf import settings
from django.utils import timezone

from shared.domain.value_objects import Money
from .application.settlement import SettlementEvent, SettlementOutcome

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"

HANDLED_EVENT_TYPES = (
    CHECKOUT_SESSION_COMPLETED,
    PAYMENT_INTENT_SUCCEEDED,
    PAYMENT_INTENT_FAILED,
)

MIN_SESSION_MINUTES = 31
MAX_SESSION_MINUTES = 24 * 60


class CorrelationDataInvalid(Exception):
    """bookingIds metadata is missing or is not a JSON list of booking ids."""

    def __init__(self, message: str, *, source_id: str = ""):
        self.source_id = source_id
        super().__init__(message)


def _configure():
    stripe.api_key = getattr(settings, "STRIPE_SECRET_KEY", "")


def construct_event(payload: bytes, signature: str) -> dict:
    """Verify the Stripe-Signature header and parse the event.

    The verified payload is returned as plain JSON so the parsing below
    does not depend on StripeObject behaviour.

    Raises ValueError for a malformed payload and
    stripe.SignatureVerificationError for a bad signature.
    """
    stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
    return json.loads(payload)


def booking_ids_from_metadata(metadata, source_id: str) -> list[UUID]:
    """Decode metadata["bookingIds"], a JSON-encoded non-empty list of strings."""
    raw = (metadata or {}).get("bookingIds")
    if not raw:
        raise CorrelationDataInvalid(
            f"No bookingIds metadata on {source_id}", source_id=source_id
        )

    try:
        booking_ids = json.loads(raw)
    except (TypeError, ValueError):
        raise CorrelationDataInvalid(
            f"bookingIds on {source_id} is not valid JSON: {raw!r}", source_id=source_id
        )

    if (
        not isinstance(booking_ids, list)
        or not booking_ids
        or not all(isinstance(booking_id, str) for booking_id in booking_ids)
    ):
        raise CorrelationDataInvalid(
            f"bookingIds on {source_id} is not a non-empty list of strings: {raw!r}",
            source_id=source_id,
        )

    try:
        return [UUID(booking_id) for booking_id in booking_ids]
    except ValueError:
        raise CorrelationDataInvalid(
            f"bookingIds on {source_id} contains a malformed id: {raw!r}",
            source_id=source_id,
        )


def settlement_event_from_stripe(event) -> Optional[SettlementEvent]:
    """
    Map a Stripe event onto a SettlementEvent

    Returns None for event types (and checkout sessions not yet paid)
    that carry no settlement. Raises CorrelationDataInvalid when the
    booking correlation metadata is unusable.
    """
    event_type = event["type"]
    obj = event["data"]["object"]

    if event_type == CHECKOUT_SESSION_COMPLETED:
        if obj.get("payment_status") != "paid":
            logger.info(
                f"Checkout session {obj.get('id')} completed with payment_status "
                f"{obj.get('payment_status')!r}; nothing to settle"
            )
            return None
        booking_ids = booking_ids_from_metadata(obj.get("metadata"), obj.get("id", ""))
        payment_intent = obj.get("payment_intent") or ""
        if not isinstance(payment_intent, str):
            payment_intent = payment_intent.get("id", "")
        if not payment_intent:
            raise CorrelationDataInvalid(
                f"Checkout session {obj.get('id')} has no payment_intent",
                source_id=obj.get("id", ""),
            )
        return SettlementEvent(
            outcome=SettlementOutcome.SUCCEEDED,
            booking_ids=tuple(booking_ids),
            provider_txn_id=payment_intent,
            source_event=event_type,
        )

    if event_type == PAYMENT_INTENT_SUCCEEDED:
        booking_ids = booking_ids_from_metadata(obj.get("metadata"), obj.get("id", ""))
        return SettlementEvent(
            outcome=SettlementOutcome.SUCCEEDED,
            booking_ids=tuple(booking_ids),
            provider_txn_id=obj.get("id", ""),
            source_event=event_type,
        )

    if event_type == PAYMENT_INTENT_FAILED:
        booking_ids = booking_ids_from_metadata(obj.get("metadata"), obj.get("id", ""))
        last_error = obj.get("last_payment_error") or {}
        return SettlementEvent(
            outcome=SettlementOutcome.FAILED,
            booking_ids=tuple(booking_ids),
            provider_txn_id=obj.get("id", ""),
            source_event=event_type,
            failure_reason=last_error.get("message") or "",
        )

    logger.debug(f"Ignoring Stripe event type {event_type}")
    return None


def checkout_session_lifetime() -> timedelta:
    """
    How long a Checkout Session stays payable

    Matches the abandoned-checkout window so the reaper never releases a
    payment whose session can still be paid. Stripe accepts a little over
    30 minutes up to 24 hours.
    """
    ttl_minutes = int(getattr(settings, "PENDING_BOOKING_TTL_MINUTES", 60))
    if ttl_minutes <= 0:
        ttl_minutes = MAX_SESSION_MINUTES
    return timedelta(minutes=min(max(ttl_minutes, MIN_SESSION_MINUTES), MAX_SESSION_MINUTES))


def amount_due(bookings) -> Money:
    """Sum of the bookings' own prices; cancelled rooms are not charged."""
    currency = bookings[0].currency if bookings else "USD"
    return sum((booking.price for booking in bookings), Money.zero(currency))


def create_checkout_session(payment, bookings: list) -> dict:
    """
    Open a Stripe Checkout Session charging for `bookings`

    bookingIds is attached both to the session and to the payment
    intent, so either webhook can be correlated back to the bookings.

    Returns:
        dict: {"id", "url", "amount" (Money), "expires_at" (aware datetime)}
    """
    _configure()
    site_url = settings.SITE_URL.rstrip("/")
    amount = amount_due(bookings)
    expires_at = timezone.now() + checkout_session_lifetime()
    correlation = {"bookingIds": json.dumps([str(booking.pk) for booking in bookings])}

    logger.info(
        f"Creating Stripe checkout session for payment {payment.pk}, "
        f"{amount} ({len(bookings)} booking(s)), expires {expires_at.isoformat()}"
    )
    session = stripe.checkout.Session.create(
        mode="payment",
        payment_method_types=["card"],
        line_items=[
            {
                "price_data": {
                    "currency": amount.currency.lower(),
                    "unit_amount": amount.minor_units,
                    "product_data": {
                        "name": f"Hotel booking ({len(bookings)} room(s))",
                    },
                },
                "quantity": 1,
            }
        ],
        metadata=correlation,
        payment_intent_data={"metadata": correlation},
        client_reference_id=str(payment.pk),
        expires_at=int(expires_at.timestamp()),
        success_url=f"{site_url}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{site_url}/bookings",
    )
    return {"id": session.id, "url": session.url, "amount": amount, "expires_at": expires_at}


def booking_ids_for_session(session_id: str) -> list[UUID]:
    """Booking ids carried in a Checkout Session's metadata, read from Stripe."""
    _configure()
    session = stripe.checkout.Session.retrieve(session_id)
    metadata = session.metadata
    if hasattr(metadata, "to_dict"):
        metadata = metadata.to_dict()
    return booking_ids_from_metadata(dict(metadata or {}), session_id)
