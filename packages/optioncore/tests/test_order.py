"""Tests for Order."""

from datetime import date
from decimal import Decimal

import pytest

from optioncore import Order, OrderError, OrderIntent, SideType


class TestOrderConstruction:
    """Tests for order factories and validation."""

    def test_buy_to_open_defaults_to_midpoint(self, call_quote):
        order = Order.buy_to_open(call_quote, 2)

        assert order.option_name == call_quote.name
        assert order.symbol == "XYZ"
        assert order.side == SideType.BUY
        assert order.intent == OrderIntent.OPEN
        assert order.quantity == 2
        assert order.limit_price == Decimal("1.10")
        assert order.expiration_date == date(2017, 11, 17)
        assert not order.broker_closed
        assert not order.is_filled

    def test_explicit_price(self, call_quote):
        order = Order.sell_to_close(call_quote, 1, price=call_quote.bid, broker_closed=True)

        assert order.is_sell
        assert order.is_closing
        assert order.limit_price == Decimal("1.00")
        assert order.broker_closed

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_rejected(self, call_quote, quantity):
        with pytest.raises(OrderError, match="quantity"):
            Order.buy_to_open(call_quote, quantity)

    def test_signed_quantity(self, call_quote):
        assert Order.buy_to_open(call_quote, 3).signed_quantity == 3
        assert Order.sell_to_open(call_quote, 3).signed_quantity == -3


class TestOrderFill:
    """Tests for fill lifecycle and cost basis."""

    def test_unfilled_order_has_no_cost_basis(self, call_quote):
        order = Order.buy_to_open(call_quote, 1)
        assert order.canonical_cost_basis() == Decimal("0")

    def test_filled_at_attaches_data(self, call_quote, fill):
        order = fill(Order.buy_to_open(call_quote, 1), "1.10", "0.65")

        assert order.is_filled
        assert order.fill_price == Decimal("1.10")
        assert order.commission == Decimal("0.65")
        assert order.filled_date == date(2017, 11, 1)
        assert order.order_id == "ord_00000001"

    def test_fill_exactly_once(self, call_quote, fill):
        order = fill(Order.buy_to_open(call_quote, 1), "1.10")

        with pytest.raises(OrderError, match="already filled"):
            fill(order, "1.20")
        assert order.fill_price == Decimal("1.10")

    def test_negative_commission_rejected(self, call_quote):
        order = Order.buy_to_open(call_quote, 1)
        with pytest.raises(OrderError):
            order.filled_at(Decimal("1.10"), Decimal("-1"), date(2017, 11, 1), "ord_1")
        assert not order.is_filled

    @pytest.mark.parametrize(
        "factory,expected",
        [
            (Order.buy_to_open, Decimal("-220.00")),
            (Order.buy_to_close, Decimal("-220.00")),
            (Order.sell_to_open, Decimal("220.00")),
            (Order.sell_to_close, Decimal("220.00")),
        ],
    )
    def test_canonical_cost_basis_sign(self, call_quote, fill, factory, expected):
        """Buys are cash out, sells are cash in."""
        order = fill(factory(call_quote, 2), "1.10")
        assert order.canonical_cost_basis() == expected

    def test_margin_requirement(self, call_quote):
        order = Order.buy_to_open(call_quote, 4)
        assert order.margin_requirement(Decimal("0.25")) == Decimal("100.00")

    def test_summary(self, call_quote, fill):
        order = Order.buy_to_open(call_quote, 2)
        assert order.summary() == "Buy to open 2 XYZ171117C00010000 @ 1.10"

        fill(order, "1.15")
        assert order.summary().endswith("@ 1.15")
