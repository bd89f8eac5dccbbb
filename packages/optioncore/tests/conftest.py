"""Test fixtures for optioncore package."""

from datetime import date
from decimal import Decimal

import pytest

from optioncore import OptionRight, Order, Quote, Tick


@pytest.fixture
def make_tick():
    """Factory for ticks with sensible defaults."""

    def _make_tick(
        symbol: str = "XYZ",
        expiration_date: date = date(2017, 11, 17),
        right: OptionRight = OptionRight.CALL,
        strike_price: str = "10",
        bid: str = "1.00",
        ask: str = "1.20",
        underlying_price: str = "10.50",
        data_date: date = date(2017, 11, 1),
        last_price: str = "",
        **kwargs,
    ) -> Tick:
        return Tick(
            symbol=symbol,
            expiration_date=expiration_date,
            right=right,
            strike_price=Decimal(strike_price),
            bid=Decimal(bid),
            ask=Decimal(ask),
            last_price=Decimal(last_price or bid),
            underlying_price=Decimal(underlying_price),
            data_date=data_date,
            **kwargs,
        )

    return _make_tick


@pytest.fixture
def call_quote(make_tick) -> Quote:
    """XYZ 10 call, bid 1.00 / ask 1.20, underlying 10.50."""
    return make_tick().quote()


@pytest.fixture
def put_quote(make_tick) -> Quote:
    """XYZ 10 put, bid 0.40 / ask 0.60, underlying 10.50."""
    return make_tick(right=OptionRight.PUT, bid="0.40", ask="0.60").quote()


@pytest.fixture
def fill():
    """Fill an order in place the way the broker does."""
    counter = {"n": 0}

    def _fill(order: Order, price: str, commission: str = "0", on: date = date(2017, 11, 1)) -> Order:
        counter["n"] += 1
        order.filled_at(
            fill_price=Decimal(price),
            commission=Decimal(commission),
            filled_date=on,
            order_id=f"ord_{counter['n']:08d}",
        )
        return order

    return _fill
