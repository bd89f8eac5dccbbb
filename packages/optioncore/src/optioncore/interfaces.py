"""
Collaborator contracts for the broker.

The broker owns exactly one data feed and one commission schedule, chosen at
construction time. Strategies never receive the broker itself: they get an
AccountView (read-only) and communicate intent only by returning Orders.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Iterator, Optional, Protocol

from optioncore.order import Order
from optioncore.position import PositionSnapshot
from optioncore.quote import Quote
from optioncore.tick import OptionRight, Tick


class CommissionSchedule(Protocol):
    """Pure fee function: no side effects, same order in, same fee out."""

    def commission_for(self, order: Order) -> Decimal:
        ...


class DataFeed(Protocol):
    """Lazy, finite, forward-only source of ticks.

    Ticks must come in non-decreasing date order; the broker does not
    re-sort. The broker iterates a feed once and never restarts it.
    """

    def __iter__(self) -> Iterator[Tick]:
        ...


class AccountView(Protocol):
    """Read-only capability set exposed to strategies."""

    @property
    def current_date(self) -> date:
        ...

    @property
    def account_balance(self) -> Decimal:
        ...

    @property
    def ticks_processed(self) -> int:
        ...

    @property
    def commission_paid(self) -> Decimal:
        ...

    @property
    def total_order_count(self) -> int:
        ...

    def quote_for(self, option_name: str) -> Optional[Quote]:
        ...

    def quotes_for(self, symbol: str, right: Optional[OptionRight] = None) -> list[Quote]:
        ...

    def call_quotes_for(self, symbol: str) -> list[Quote]:
        ...

    def put_quotes_for(self, symbol: str) -> list[Quote]:
        ...

    def positions(self) -> list[PositionSnapshot]:
        ...

    def open_positions(self) -> list[PositionSnapshot]:
        ...

    def underlying_price_for(self, symbol: str) -> Optional[Decimal]:
        ...


class Strategy(Protocol):
    """Decision callback invoked once per simulated day boundary.

    Only run_logic() is required. The broker and Simulation fall back to the
    class name and skip lifecycle hooks the strategy does not define.
    """

    @property
    def name(self) -> str:
        ...

    def before_simulation(self, view: AccountView) -> None:
        ...

    def run_logic(self, view: AccountView) -> list[Order]:
        ...

    def after_simulation(self, view: AccountView) -> None:
        ...


class BaseStrategy(ABC):
    """Convenience base with no-op lifecycle hooks.

    Subclasses only need to implement run_logic(). They may keep private
    state between calls but must never reach into the broker.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    def before_simulation(self, view: AccountView) -> None:
        """Called once before the first tick is consumed."""

    @abstractmethod
    def run_logic(self, view: AccountView) -> list[Order]:
        """Return the orders to submit for the day that just ended."""

    def after_simulation(self, view: AccountView) -> None:
        """Called once after terminal liquidation."""


def strategy_name(strategy: Strategy) -> str:
    """Display name of a strategy, defaulting to its class name."""
    return getattr(strategy, "name", None) or type(strategy).__name__
