"""
Message Bus

In-process fan-out of committed domain events (BookingsCreated,
BookingsConfirmed, BookingCancelled, ...) to the handlers that the
consuming apps register from AppConfig.ready().
"""

from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Event type -> handlers (1:N)

    Handlers run synchronously in registration order. Anything slow,
    like sending email, is expected to enqueue a Celery task instead of
    doing the work inline.
    """

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = defaultdict(list)

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        # ready() may run more than once under the test runner
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def unregister_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._handlers.get(event_type, ()))

    def publish_events(self, events: Iterable[DomainEvent]):
        """Dispatch each event; a failing handler is logged and skipped."""
        for event in events:
            handlers = self.handlers_for(type(event))
            if not handlers:
                logger.debug(f"{event.name} has no subscribers")
                continue

            logger.info(f"Dispatching {event.name} {event.event_id} to {len(handlers)} handler(s)")
            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Handler {getattr(handler, '__qualname__', handler)} failed on "
                        f"{event.name} {event.event_id}: {e}",
                        exc_info=True,
                    )


message_bus = MessageBus()
