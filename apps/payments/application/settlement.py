"""
Settlement Reconciler

Applies a payment provider outcome to the bookings it cites and to
their shared payments. Every write is a conditional update on the
current stored status (PENDING), so:

- a redelivered event changes nothing and reports zero rows
- of a success and a failure for the same bookings, whichever lands
  first decides the terminal state; the other one is inert

No row is read and then written back, so concurrent deliveries need
no locking.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple
from uuid import UUID
import logging

from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.domain.events import BookingsConfirmed, BookingsRejected

logger = logging.getLogger(__name__)


class SettlementOutcome(str, Enum):
    SUCCEEDED = 'SUCCEEDED'
    FAILED = 'FAILED'


# outcome -> (booking target, payment target)
SETTLEMENT_TARGETS = {
    SettlementOutcome.SUCCEEDED: (BookingStatus.CONFIRMED, PaymentStatus.SUCCEEDED),
    SettlementOutcome.FAILED: (BookingStatus.REJECTED, PaymentStatus.FAILED),
}


@dataclass(frozen=True)
class SettlementEvent:
    """Provider-neutral payment outcome for a set of bookings"""
    outcome: SettlementOutcome
    booking_ids: Tuple[UUID, ...]
    provider_txn_id: str = ''
    source_event: str = ''
    failure_reason: str = ''


@dataclass
class SettlementResult:
    bookings_updated: int = 0
    payments_updated: int = 0
    payment_ids: List[UUID] = field(default_factory=list)
    refund_required: bool = False

    @property
    def duplicate(self) -> bool:
        """Nothing was pending any more: a retry or a losing concurrent event"""
        return self.bookings_updated == 0 and self.payments_updated == 0


class SettlementReconciler:
    """
    Settle bookings and payments from a provider outcome

    Runs in one transaction. Database errors propagate so the webhook
    can answer non-2xx and the provider redelivers the event.
    """

    def settle(self, event: SettlementEvent) -> SettlementResult:
        from apps.bookings.models import Booking
        from apps.payments.models import Payment

        booking_target, payment_target = SETTLEMENT_TARGETS[event.outcome]
        booking_ids = list(event.booking_ids)
        tag = event.source_event or event.outcome.value
        now = timezone.now()

        with DjangoUnitOfWork() as uow:
            bookings_updated = Booking.objects.filter(
                pk__in=booking_ids,
                status=BookingStatus.PENDING.value,
            ).update(status=booking_target.value, updated_at=now)

            if bookings_updated:
                logger.info(
                    f"[{tag}] {bookings_updated} booking(s) moved to {booking_target.value}: "
                    f"{', '.join(str(b) for b in booking_ids)}"
                )
            else:
                logger.info(f"[{tag}] No PENDING bookings to update; event already applied")

            # Payments of every cited booking, not only the ones updated above.
            payment_ids = list(
                Booking.objects.filter(pk__in=booking_ids)
                .values_list('payment_id', flat=True)
                .distinct()
            )

            payments_updated = 0
            if payment_ids:
                payment_changes = {
                    'status': payment_target.value,
                    'settled_at': now,
                    'updated_at': now,
                }
                if event.provider_txn_id:
                    payment_changes['stripe_payment_intent_id'] = event.provider_txn_id
                if event.failure_reason:
                    payment_changes['failure_reason'] = event.failure_reason[:255]

                payments_updated = Payment.objects.filter(
                    pk__in=payment_ids,
                    status=PaymentStatus.PENDING.value,
                ).update(**payment_changes)
                logger.info(
                    f"[{tag}] {payments_updated} payment(s) moved to {payment_target.value} "
                    f"for provider transaction {event.provider_txn_id or '-'}"
                )
            else:
                logger.warning(f"[{tag}] None of the cited bookings exist: {booking_ids}")

            refund_required = False
            if event.outcome is SettlementOutcome.SUCCEEDED:
                if payments_updated and not bookings_updated:
                    logger.warning(
                        f"[{tag}] Payment(s) {payment_ids} settled as {payment_target.value} "
                        f"but no booking was pending; refund may be required"
                    )
                    refund_required = True
                elif payment_ids and not payments_updated:
                    refund_required = self._charged_after_settlement(payment_ids, event, tag)
            elif payments_updated and not bookings_updated:
                logger.info(f"[{tag}] Payment(s) {payment_ids} failed with no booking pending")

            if bookings_updated:
                if event.outcome is SettlementOutcome.SUCCEEDED:
                    uow.add_event(BookingsConfirmed(
                        booking_ids=booking_ids,
                        provider_txn_id=event.provider_txn_id,
                        source_event=event.source_event,
                    ))
                else:
                    uow.add_event(BookingsRejected(
                        booking_ids=booking_ids,
                        provider_txn_id=event.provider_txn_id,
                        reason=event.failure_reason,
                    ))

        return SettlementResult(
            bookings_updated=bookings_updated,
            payments_updated=payments_updated,
            payment_ids=payment_ids,
            refund_required=refund_required,
        )

    def _charged_after_settlement(self, payment_ids, event: SettlementEvent, tag: str) -> bool:
        """
        A success for payments that are no longer PENDING means money was
        captured after they failed (reaped or declined earlier), or captured
        a second time under another provider transaction.
        """
        from apps.payments.models import Payment

        stale = [
            payment for payment in Payment.objects.filter(pk__in=payment_ids)
            if payment.status == PaymentStatus.FAILED.value
            or (
                event.provider_txn_id
                and payment.stripe_payment_intent_id
                and payment.stripe_payment_intent_id != event.provider_txn_id
            )
        ]
        for payment in stale:
            logger.warning(
                f"[{tag}] Provider transaction {event.provider_txn_id or '-'} succeeded for payment "
                f"{payment.pk} already {payment.status} "
                f"(transaction {payment.stripe_payment_intent_id or '-'}); refund may be required"
            )
        return bool(stale)
