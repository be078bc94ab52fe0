"""
JSON-backed order repository.

This module provides the order lookup the email framework relies on. Orders
are read from a JSON fixture file; new orders are kept in memory only.

Design decisions:
- Lazy loading on first access
- Missing orders are reported as None, never as an exception
- Write operations update in-memory state only
"""

import json
from pathlib import Path
from typing import Optional, Union

from shop_emails.models import Order

OrderId = Union[int, str]


class OrderRepository:
    """
    Order lookup used by transactional emails.

    Orders may legitimately be missing when an event is handled (for example
    when the creating request has not finished writing), so lookups return
    None instead of raising.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the repository.

        Args:
            data_dir: Directory containing orders.json.
                     Defaults to ./data relative to project root.
        """
        if data_dir is None:
            data_dir = Path(__file__).parent.parent / "data"

        self.data_dir = Path(data_dir)
        self._orders: Optional[dict[int, Order]] = None

    def _load_json(self, filename: str) -> list[dict]:
        """Load a JSON fixture file."""
        filepath = self.data_dir / filename
        if not filepath.exists():
            return []
        with open(filepath, "r") as f:
            return json.load(f)

    def _ensure_orders_loaded(self):
        """Lazy load orders from JSON."""
        if self._orders is None:
            data = self._load_json("orders.json")
            self._orders = {o["id"]: Order(**o) for o in data}

    @staticmethod
    def _normalize_id(order_id: OrderId) -> Optional[int]:
        if isinstance(order_id, bool):
            return None
        if isinstance(order_id, int):
            return order_id
        if isinstance(order_id, str) and order_id.strip().isdigit():
            return int(order_id.strip())
        return None

    def get_order(self, order_id: OrderId) -> Optional[Order]:
        """Get an order by id, or None when it cannot be loaded."""
        key = self._normalize_id(order_id)
        if key is None:
            return None
        self._ensure_orders_loaded()
        return self._orders.get(key)

    def get_orders(self) -> list[Order]:
        """Get all orders."""
        self._ensure_orders_loaded()
        return list(self._orders.values())

    def next_order_id(self) -> int:
        """Next free order id."""
        self._ensure_orders_loaded()
        return max(self._orders, default=0) + 1

    def add_order(self, order: Order) -> Order:
        """Store an order (in-memory only), replacing any with the same id."""
        self._ensure_orders_loaded()
        self._orders[order.id] = order
        return order

    def reload(self):
        """Force reload from the JSON file, discarding in-memory writes."""
        self._orders = None


# Module-level singleton for convenience
# In tests, create a new OrderRepository with test fixtures
_default_repository: Optional[OrderRepository] = None


def get_order_repository() -> OrderRepository:
    """Get the default order repository singleton."""
    global _default_repository
    if _default_repository is None:
        _default_repository = OrderRepository()
    return _default_repository
