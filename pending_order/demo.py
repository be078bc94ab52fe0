"""
Demonstration script for the Pending Order email.

Shows an order being placed, the OrderCreated event being published and the
admin notification going out in each email format.
"""

import logging

from hooks.event_bus import reset_event_bus
from hooks.ordering import OrderingService
from pending_order import add_pending_order_email
from shop_emails.channels import EmailChannel
from shop_emails.data_store import OrderRepository
from shop_emails.models import EmailType
from shop_emails.registry import EmailRegistry
from shop_emails.settings import OptionsStore, update_email_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)


def run_pending_order_demo(email_type: EmailType = EmailType.HTML, show_body: bool = False):
    """
    Place an order and show the admin notification it triggers.

    This shows:
    1. OrderingService creates an order (publishes OrderCreated)
    2. PendingOrderEmail receives the event
    3. The email loads its settings, renders and dispatches
    """
    print("\n" + "=" * 70)
    print(f"PENDING ORDER EMAIL DEMO ({email_type.value})")
    print("=" * 70 + "\n")

    event_bus = reset_event_bus()
    orders = OrderRepository()
    options = OptionsStore()
    dispatcher = EmailChannel()
    registry = EmailRegistry()

    email = add_pending_order_email(
        registry,
        orders=orders,
        options=options,
        dispatcher=dispatcher,
        event_bus=event_bus,
    )
    update_email_settings(options, email.id, email.form_fields(), {"email_type": email_type.value})
    email.start()

    ordering = OrderingService(event_bus=event_bus, orders=orders)

    print("-" * 70)
    print("ACTION: Customer places an order with two items")
    print("-" * 70 + "\n")

    ordering.create_order(
        billing_first_name="Carol",
        billing_last_name="Davis",
        billing_email="carol.davis@example.com",
        line_items=[
            {"name": "Wireless Router X500", "quantity": 1, "unit_price": 149.99},
            {"name": "Mesh Extender", "quantity": 2, "unit_price": 59.5},
        ],
    )

    print("\nNotifications sent:")
    for msg in dispatcher.sent_messages:
        print(f"  {msg}")
        print(f"    Content-Type: {msg.content_type}")
        if show_body:
            print()
            print(msg.body)

    email.stop()
    return dispatcher.sent_messages


def run_all_formats_demo(show_body: bool = False):
    for email_type in EmailType:
        run_pending_order_demo(email_type, show_body=show_body)


if __name__ == "__main__":
    run_all_formats_demo(show_body=True)
