"""
Shared pytest fixtures for the Pending Order email tests.

These fixtures provide fresh collaborators for each test so that settings
updates and sent messages never leak between tests.
"""

import pytest
from pathlib import Path

from hooks.event_bus import EventBus
from pending_order.order_email import PendingOrderEmail
from shop_emails.channels import EmailChannel
from shop_emails.data_store import OrderRepository
from shop_emails.settings import OptionsStore
from shop_emails.templates import TemplateRenderer


class RecordingRenderer(TemplateRenderer):
    """TemplateRenderer that remembers every render call."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: list[tuple[str, bool]] = []

    def render(self, template_id, context, is_html):
        self.calls.append((template_id, is_html))
        return super().render(template_id, context, is_html)


@pytest.fixture
def data_dir() -> Path:
    """Path to the fixture data directory."""
    return Path(__file__).parent.parent / "data"


@pytest.fixture
def orders(data_dir: Path) -> OrderRepository:
    """Fresh OrderRepository over the JSON fixtures."""
    return OrderRepository(data_dir=data_dir)


@pytest.fixture
def options(data_dir: Path) -> OptionsStore:
    """
    Fresh OptionsStore over the JSON fixtures.

    Updates stay in memory, so tests can change settings freely.
    """
    return OptionsStore(data_dir=data_dir)


@pytest.fixture
def empty_options(tmp_path: Path) -> OptionsStore:
    """OptionsStore with nothing configured at all."""
    return OptionsStore(data_dir=tmp_path)


@pytest.fixture
def dispatcher() -> EmailChannel:
    """Fresh EmailChannel for each test."""
    return EmailChannel(fail_rate=0.0)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def event_bus() -> EventBus:
    """Fresh event bus for each test."""
    return EventBus()


@pytest.fixture
def pending_email(orders, options, renderer, dispatcher, event_bus) -> PendingOrderEmail:
    """PendingOrderEmail wired to the fixture collaborators (not started)."""
    return PendingOrderEmail(
        orders=orders,
        options=options,
        renderer=renderer,
        dispatcher=dispatcher,
        event_bus=event_bus,
    )


# =============================================================================
# Order Fixtures
# =============================================================================

@pytest.fixture
def alice_order_id() -> int:
    """Order 7, number "1007", placed by Alice on 2024-01-01, USD."""
    return 7


@pytest.fixture
def bob_order_id() -> int:
    """Order 42, number "1042", placed by Bob, EUR."""
    return 42


@pytest.fixture
def guest_order_id() -> int:
    """Order 51, no custom number, no billing name or email."""
    return 51
