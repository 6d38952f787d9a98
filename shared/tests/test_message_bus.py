from dataclasses import dataclass

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent


@dataclass
class SomethingHappened(DomainEvent):
    value: int = 0


def test_handlers_receive_events_once_even_if_registered_twice():
    bus = MessageBus()
    seen = []

    def handler(event):
        seen.append(event.value)

    bus.register_event_handler(SomethingHappened, handler)
    bus.register_event_handler(SomethingHappened, handler)
    bus.publish_events([SomethingHappened(value=1), SomethingHappened(value=2)])

    assert seen == [1, 2]


def test_failing_handler_does_not_stop_the_others():
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    def working(event):
        seen.append(event.name)

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, working)
    bus.publish_events([SomethingHappened()])

    assert seen == ["SomethingHappened"]


def test_unregister_handler():
    bus = MessageBus()

    def handler(event):
        pass

    bus.register_event_handler(SomethingHappened, handler)
    bus.unregister_event_handler(SomethingHappened, handler)
    assert bus.handlers_for(SomethingHappened) == []
