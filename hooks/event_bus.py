"""
Shop event hooks.

The ordering service announces new orders here; emails listen for the event
types they react to. Delivery is synchronous and follows subscription order.
A listener that raises is logged and skipped, so one broken email never
blocks the others or the checkout that published the event.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import uuid4

logger = logging.getLogger("event_bus")


@dataclass
class Event:
    """
    Something that happened in the shop.

    Attributes:
        event_type: Routing key, e.g. "OrderCreated"
        payload: Event data, e.g. {"order_id": 7, "order": None}
        source: Component that published the event
        event_id: Generated unique id
        timestamp: Generated publish time
    """
    event_type: str
    payload: dict[str, Any]
    source: str
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def __str__(self) -> str:
        return f"{self.event_type}#{self.event_id[:8]} from {self.source}"


EventHandler = Callable[[Event], None]


class EventBus:
    """
    In-process hook registry for shop events.

    Example:
        bus = EventBus()
        bus.subscribe("OrderCreated", email._handle_order_created)
        bus.publish(order_created(order_id=7))
    """

    def __init__(self):
        self._listeners: dict[str, list[EventHandler]] = defaultdict(list)
        self._published: list[Event] = []

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._listeners[event_type].append(handler)
        logger.debug(f"Listening for {event_type}: {getattr(handler, '__qualname__', handler)}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Remove one subscription of handler. Returns False if it was not listening."""
        listeners = self._listeners.get(event_type, [])
        if handler not in listeners:
            return False
        listeners.remove(handler)
        return True

    def publish(self, event: Event) -> int:
        """
        Deliver an event to its listeners.

        Listeners added or removed while delivering only take effect for the
        next event.

        Returns:
            How many listeners were called
        """
        self._published.append(event)
        listeners = list(self._listeners.get(event.event_type, []))
        logger.info(f"Publishing {event} to {len(listeners)} listener(s)")

        for handler in listeners:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Listener failed on {event}")

        return len(listeners)

    def get_subscriber_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def get_event_log(self) -> list[Event]:
        """Events published so far, oldest first."""
        return list(self._published)


_default_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """The process-wide bus used when no bus is injected."""
    global _default_bus
    if _default_bus is None:
        _default_bus = EventBus()
    return _default_bus


def reset_event_bus() -> EventBus:
    """Replace the process-wide bus with an empty one."""
    global _default_bus
    _default_bus = EventBus()
    return _default_bus
