"""
Tests for the Pending Order email's event subscription and registration.

These tests verify the flow from an order being placed to the email being
sent, through the event bus.
"""

import pytest

from hooks.events import EventTypes, order_created
from hooks.ordering import OrderingService
from pending_order import EMAIL_CLASS_NAME, add_pending_order_email
from pending_order.order_email import PendingOrderEmail
from shop_emails.registry import EmailRegistry


@pytest.fixture
def setup_services(pending_email, orders, event_bus, dispatcher):
    """Started email plus an ordering service on the same bus."""
    ordering = OrderingService(event_bus=event_bus, orders=orders)
    pending_email.start()

    yield {
        "email": pending_email,
        "ordering": ordering,
        "dispatcher": dispatcher,
        "event_bus": event_bus,
    }

    pending_email.stop()


LINE_ITEMS = [{"name": "Mesh Extender", "quantity": 2, "unit_price": 59.5}]


class TestOrderCreatedSubscription:

    def test_creating_order_sends_email(self, setup_services):
        services = setup_services

        order = services["ordering"].create_order(
            line_items=LINE_ITEMS,
            billing_first_name="Carol",
            billing_email="carol@example.com",
        )

        dispatcher = services["dispatcher"]
        assert dispatcher.get_sent_count() == 1
        assert f"New order #{order.order_number}" in dispatcher.sent_messages[0].subject

    def test_event_with_only_an_id_is_resolved(self, setup_services):
        services = setup_services

        order = services["ordering"].create_order(line_items=LINE_ITEMS, include_order=False)

        event = services["event_bus"].get_event_log()[-1]
        assert event.payload["order"] is None
        assert services["dispatcher"].get_sent_count() == 1
        assert order.order_number in services["dispatcher"].sent_messages[0].subject

    def test_event_for_unknown_order_is_dropped(self, setup_services):
        services = setup_services

        handlers = services["event_bus"].publish(order_created(order_id=123456))

        assert handlers == 1
        assert services["dispatcher"].get_sent_count() == 0

    def test_republishing_sends_again(self, setup_services, alice_order_id):
        services = setup_services
        event = order_created(order_id=alice_order_id)

        services["event_bus"].publish(event)
        services["event_bus"].publish(event)

        assert services["dispatcher"].get_sent_count() == 2


class TestLifecycle:

    def test_only_receives_events_when_started(self, pending_email, event_bus, dispatcher, alice_order_id):
        event_bus.publish(order_created(alice_order_id))
        assert dispatcher.get_sent_count() == 0

        pending_email.start()
        event_bus.publish(order_created(alice_order_id))
        assert dispatcher.get_sent_count() == 1

        pending_email.stop()

    def test_stop_unsubscribes(self, pending_email, event_bus, dispatcher, alice_order_id):
        pending_email.start()
        pending_email.stop()

        event_bus.publish(order_created(alice_order_id))

        assert dispatcher.get_sent_count() == 0
        assert event_bus.get_subscriber_count(EventTypes.ORDER_CREATED) == 0

    def test_start_twice_subscribes_once(self, pending_email, event_bus):
        pending_email.start()
        pending_email.start()

        assert event_bus.get_subscriber_count(EventTypes.ORDER_CREATED) == 1

        pending_email.stop()


class TestRegistration:

    def test_add_pending_order_email(self, orders, options, dispatcher, event_bus):
        registry = EmailRegistry()

        email = add_pending_order_email(
            registry, orders=orders, options=options, dispatcher=dispatcher, event_bus=event_bus
        )

        assert EMAIL_CLASS_NAME in registry
        assert registry.get("wc_pending_order") is email
        assert isinstance(email, PendingOrderEmail)
        assert email.title == "Pending Order"
