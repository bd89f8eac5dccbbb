"""Test fixtures for optionsim app."""

import sys
import types
from datetime import date
from decimal import Decimal

import pytest

from optioncore import BaseStrategy, OptionRight, Order, Tick

from optionsim.broker import Broker
from optionsim.commission import FlatFeeCommission
from optionsim.config import WindDownMode
from optionsim.data_feed import InMemoryDataFeed


DAY1 = date(2017, 11, 1)
EXPIRATION = date(2017, 11, 17)


@pytest.fixture
def make_tick():
    """Factory for ticks with sensible defaults."""

    def _make_tick(
        symbol: str = "XYZ",
        expiration_date: date = EXPIRATION,
        right: OptionRight = OptionRight.CALL,
        strike_price: str = "10",
        bid: str = "1.00",
        ask: str = "1.20",
        underlying_price: str = "10.50",
        data_date: date = DAY1,
        **kwargs,
    ) -> Tick:
        return Tick(
            symbol=symbol,
            expiration_date=expiration_date,
            right=right,
            strike_price=Decimal(strike_price),
            bid=Decimal(bid),
            ask=Decimal(ask),
            last_price=Decimal(bid),
            underlying_price=Decimal(underlying_price),
            data_date=data_date,
            **kwargs,
        )

    return _make_tick


class RecordingStrategy(BaseStrategy):
    """Strategy returning scripted orders and recording every call.

    ``script`` maps call index (0-based) to a function building orders from
    the view.
    """

    def __init__(self, script=None):
        self.script = script or {}
        self.calls = []
        self.results = []
        self.before_calls = 0
        self.after_calls = 0

    def before_simulation(self, view):
        self.before_calls += 1

    def run_logic(self, view):
        index = len(self.calls)
        self.calls.append({
            "date": view.current_date,
            "balance": view.account_balance,
            "quotes": [q.name for q in view.quotes_for("XYZ")],
            "open_positions": len(view.open_positions()),
        })
        build = self.script.get(index)
        return build(view) if build else []

    def after_simulation(self, view):
        self.after_calls += 1


def buy_call(quantity: int = 1, symbol: str = "XYZ"):
    """Script step: buy-to-open the first call quote for symbol."""

    def _build(view):
        quote = view.call_quotes_for(symbol)[0]
        return [Order.buy_to_open(quote, quantity)]

    return _build


@pytest.fixture
def make_broker():
    """Factory for brokers over an in-memory feed with a flat $1 fee."""

    def _make_broker(
        ticks,
        initial_balance: str = "10000",
        fee: str = "1",
        wind_down_mode: WindDownMode = WindDownMode.CLOSE_ALL,
    ) -> Broker:
        return Broker(
            initial_balance=Decimal(initial_balance),
            commission_schedule=FlatFeeCommission(Decimal(fee)),
            data_feed=InMemoryDataFeed(ticks),
            wind_down_mode=wind_down_mode,
        )

    return _make_broker


@pytest.fixture
def make_strategy():
    """Factory for RecordingStrategy instances."""
    return RecordingStrategy


@pytest.fixture(name="buy_call")
def buy_call_fixture():
    """Script step builder: buy-to-open the first call quote."""
    return buy_call


@pytest.fixture
def call_quote(make_tick):
    """XYZ 10 call, bid 1.00 / ask 1.20."""
    return make_tick().quote()


CSV_HEADER = (
    "Symbol,ExpirationDate,AskPrice,AskSize,BidPrice,BidSize,LastPrice,PutCall,StrikePrice,"
    "Volume,ImpliedVolatility,Delta,Gamma,Vega,Rho,OpenInterest,UnderlyingPrice,DataDate"
)


def csv_row(
    symbol="XYZ",
    expiration="2017-11-17",
    ask="1.20",
    bid="1.00",
    right="call",
    strike="10",
    underlying="10.50",
    data_date="2017-11-01",
    rho="0.002",
):
    return ",".join([
        symbol, expiration, ask, "10", bid, "12", bid, right, strike, "120",
        "0.25", "0.78", "0.05", "0.01", rho, "8666", underlying, data_date,
    ])


@pytest.fixture
def write_feed(tmp_path):
    """Write DiscountOptionData rows to a CSV file and return its path."""

    def _write_feed(rows, header: bool = True, name: str = "feed.csv"):
        path = tmp_path / name
        lines = ([CSV_HEADER] if header else []) + list(rows)
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write_feed


@pytest.fixture(name="csv_row")
def csv_row_fixture():
    """Builder for one DiscountOptionData CSV line."""
    return csv_row


class OnlyRunLogic:
    """Plain strategy object: run_logic only, no name or lifecycle hooks."""

    def __init__(self, symbol: str = "XYZ", quantity: int = 1):
        self.symbol = symbol
        self.quantity = quantity
        self.calls = 0

    def run_logic(self, view):
        self.calls += 1
        if self.calls > 1:
            return []
        return [Order.buy_to_open(view.call_quotes_for(self.symbol)[0], self.quantity)]


@pytest.fixture
def only_run_logic_module(monkeypatch):
    """Register an importable module exposing OnlyRunLogic; returns its name."""
    module = types.ModuleType("plain_strategies")
    module.OnlyRunLogic = OnlyRunLogic
    monkeypatch.setitem(sys.modules, "plain_strategies", module)
    return "plain_strategies"


@pytest.fixture(name="only_run_logic")
def only_run_logic_fixture():
    """The OnlyRunLogic class."""
    return OnlyRunLogic
