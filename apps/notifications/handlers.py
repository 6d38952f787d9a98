"""Domain event handlers registered on the message bus."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingsConfirmed

logger = logging.getLogger(__name__)


def on_bookings_confirmed(event: BookingsConfirmed) -> None:
    """Queue the confirmation email; settlement has already committed."""
    from .tasks import send_booking_confirmation_task

    booking_ids = [str(booking_id) for booking_id in event.booking_ids]
    logger.info(f"Queueing confirmation email for bookings {booking_ids}")
    send_booking_confirmation_task.delay(booking_ids)
