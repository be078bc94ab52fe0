"""
Ordering service.

Creates orders and publishes an OrderCreated event for each one. The service
does not know which emails (if any) react to the event.
"""

import logging
from datetime import datetime
from typing import Optional

from hooks.event_bus import EventBus, get_event_bus
from hooks.events import order_created
from shop_emails.data_store import OrderRepository, get_order_repository
from shop_emails.models import LineItem, Order, OrderStatus

logger = logging.getLogger("ordering_service")


class OrderingService:
    """
    Order creation that publishes events.

    Example:
        service = OrderingService()
        order = service.create_order(
            billing_first_name="Ada",
            billing_email="ada@example.com",
            line_items=[{"name": "Router", "quantity": 1, "unit_price": 89.0}],
        )
        # Any email subscribed to OrderCreated has now been triggered
    """

    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        orders: Optional[OrderRepository] = None,
    ):
        """
        Initialize the ordering service.

        Args:
            event_bus: Event bus for publishing events
            orders: Repository new orders are stored in
        """
        self.event_bus = event_bus or get_event_bus()
        self.orders = orders or get_order_repository()

    def create_order(
        self,
        line_items: list[dict],
        billing_first_name: str = "",
        billing_last_name: str = "",
        billing_email: Optional[str] = None,
        number: Optional[str] = None,
        currency: str = "USD",
        include_order: bool = True,
    ) -> Order:
        """
        Create a pending order and publish OrderCreated.

        Args:
            line_items: Dicts with name, quantity and unit_price
            billing_first_name: Customer first name
            billing_last_name: Customer last name
            billing_email: Customer email, used as Reply-To on admin emails
            number: Custom order number; defaults to the id
            currency: Currency code
            include_order: Put the loaded order in the event payload. When
                           False subscribers receive only the id.

        Returns:
            The created order
        """
        items = [LineItem(**item) for item in line_items]
        order = Order(
            id=self.orders.next_order_id(),
            number=number,
            status=OrderStatus.PENDING,
            created_at=datetime.utcnow(),
            billing_first_name=billing_first_name,
            billing_last_name=billing_last_name,
            billing_email=billing_email,
            currency=currency,
            line_items=items,
            total=round(sum(item.subtotal for item in items), 2),
        )
        self.orders.add_order(order)

        logger.info(f"Order {order.id} created (#{order.order_number}, {len(items)} items)")

        self.event_bus.publish(order_created(order.id, order if include_order else None))
        return order
