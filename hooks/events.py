"""
Event definitions for the shop.

Events are named in past tense and carry what subscribers need to react.
The order created event carries the order id and, when the publisher has
it at hand, the fully loaded order; subscribers must cope with the order
being absent and look it up themselves.
"""

from typing import Optional, Union

from hooks.event_bus import Event
from shop_emails.models import Order


class EventTypes:
    """Constants for event type names."""
    ORDER_CREATED = "OrderCreated"


def order_created(
    order_id: Union[int, str],
    order: Optional[Order] = None,
    source: str = "ordering-service",
) -> Event:
    """
    Create an OrderCreated event.

    Published when a new order is placed.
    """
    return Event(
        event_type=EventTypes.ORDER_CREATED,
        source=source,
        payload={
            "order_id": order_id,
            "order": order,
        },
    )
