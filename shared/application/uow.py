"""
Unit of Work

One database transaction per booking or settlement command. Domain
events recorded inside it reach the message bus only after the
outermost transaction commits, so no email goes out for a booking
that was rolled back.
"""

from typing import List, Optional
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    transaction.atomic() plus deferred event publishing

    Usage:
        with DjangoUnitOfWork() as uow:
            updated = Booking.objects.filter(...).update(...)
            uow.add_event(BookingsConfirmed(booking_ids=...))
        # BookingsConfirmed is published once the commit happened

    An exception inside the block rolls back, drops the recorded events
    and propagates unchanged.
    """

    def __init__(self, using: Optional[str] = None):
        self._using = using
        self._atomic = None
        self._events: List[DomainEvent] = []

    def __enter__(self):
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._schedule_publish()
            elif self._events:
                logger.warning(
                    f"Transaction rolled back, dropping events: "
                    f"{', '.join(event.name for event in self._events)}"
                )
        finally:
            self._events = []
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def _schedule_publish(self):
        if not self._events:
            return
        events = list(self._events)
        # Dropped by Django if an enclosing atomic block rolls back later.
        transaction.on_commit(lambda: publish_after_commit(events), using=self._using)


def publish_after_commit(events: List[DomainEvent]):
    """
    Hand committed events to the message bus

    The data is already committed at this point; a publishing problem is
    logged and never raised back into the request.
    """
    from shared.application.message_bus import message_bus

    logger.info(f"Publishing {len(events)} domain event(s) after commit")
    try:
        message_bus.publish_events(events)
    except Exception as e:
        logger.error(f"Error publishing events: {e}", exc_info=True)
