"""
Shop events.

- The event bus components publish to and extensions subscribe to
- Event type constants and factories
- The ordering service, which publishes OrderCreated
"""

from hooks.event_bus import Event, EventBus, get_event_bus, reset_event_bus
from hooks.events import EventTypes, order_created
from hooks.ordering import OrderingService

__all__ = [
    "Event",
    "EventBus",
    "get_event_bus",
    "reset_event_bus",
    "EventTypes",
    "order_created",
    "OrderingService",
]
