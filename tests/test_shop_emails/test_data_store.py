"""
Tests for the OrderRepository.

These tests verify that orders load from the JSON fixtures and that missing
orders are reported as None.
"""

import pytest
from datetime import datetime

from shop_emails.data_store import OrderRepository
from shop_emails.models import Order


class TestGetOrder:

    def test_get_order(self, orders: OrderRepository, alice_order_id: int):
        order = orders.get_order(alice_order_id)

        assert order is not None
        assert order.id == 7
        assert order.order_number == "1007"
        assert order.billing_email == "alice.johnson@example.com"
        assert order.created_at == datetime(2024, 1, 1, 9, 30)
        assert len(order.line_items) == 2

    def test_get_order_by_string_id(self, orders: OrderRepository):
        assert orders.get_order("42").order_number == "1042"
        assert orders.get_order(" 42 ").order_number == "1042"

    @pytest.mark.parametrize("order_id", [9999, "9999", "abc", "", None, True, -1])
    def test_unresolvable_ids_return_none(self, orders: OrderRepository, order_id):
        assert orders.get_order(order_id) is None

    def test_get_orders(self, orders: OrderRepository):
        assert sorted(o.id for o in orders.get_orders()) == [7, 42, 51]

    def test_missing_fixture_file(self, tmp_path):
        repo = OrderRepository(data_dir=tmp_path)

        assert repo.get_orders() == []
        assert repo.next_order_id() == 1


class TestAddOrder:

    def test_add_and_get(self, orders: OrderRepository):
        new_id = orders.next_order_id()
        assert new_id == 52

        orders.add_order(Order(id=new_id, total=5))

        assert orders.get_order(new_id).total == 5
        assert orders.next_order_id() == 53

    def test_reload_discards_in_memory_orders(self, orders: OrderRepository):
        orders.add_order(Order(id=100, total=1))
        orders.reload()

        assert orders.get_order(100) is None
