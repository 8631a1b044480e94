"""Tests for order payload parsing."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from giftback.models import Order


class TestOrder:
    def test_parses_shopify_payload(self):
        order = Order.model_validate(
            {
                "id": 820982911946154508,
                "total_price": "199.65",
                "currency": "USD",
                "line_items": [{"title": "IPod Nano - 8gb"}],
                "customer": {"id": 115310627314723954, "email": "john@example.com", "first_name": "John"},
            }
        )
        assert order.total() == Decimal("199.65")
        assert order.customer_id == 115310627314723954
        assert order.customer.email == "john@example.com"

    def test_guest_order_has_no_customer_id(self):
        order = Order.model_validate({"id": 1, "total_price": "10.00"})
        assert order.customer is None
        assert order.customer_id is None

    def test_null_customer(self):
        order = Order.model_validate({"id": 1, "total_price": "10.00", "customer": None})
        assert order.customer_id is None

    def test_customer_without_id(self):
        order = Order.model_validate(
            {"id": 1, "total_price": "10.00", "customer": {"email": "a@b.co"}}
        )
        assert order.customer_id is None

    def test_missing_total_is_allowed(self):
        order = Order.model_validate({"id": 1})
        assert order.total_price is None

    def test_numeric_total(self):
        order = Order.model_validate({"id": 1, "total_price": 12.5})
        assert order.total() == Decimal("12.5")

    @pytest.mark.parametrize("total", [None, "", "n/a", "NaN", "Infinity"])
    def test_unusable_total_raises_on_read(self, total):
        order = Order.model_validate({"id": 1, "total_price": total})
        with pytest.raises(ValueError):
            order.total()

    def test_object_total_rejected(self):
        with pytest.raises(ValidationError):
            Order.model_validate({"id": 1, "total_price": {"amount": "1.00"}})
