"""Simulation driver: strategy lifecycle around a broker run, plus results."""

import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal

from optioncore import AccountView, PositionSnapshot, Strategy, strategy_name

from optionsim.broker import Broker


logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


@dataclass
class SimulationResult:
    """Final statistics for a simulation run."""

    strategy_name: str
    starting_balance: Decimal
    ending_balance: Decimal
    total_commission: Decimal = field(default_factory=lambda: Decimal("0"))
    total_orders: int = 0
    broker_closed_orders: int = 0
    highest_realized_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    lowest_realized_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    highest_unrealized_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    lowest_unrealized_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    ticks_processed: int = 0
    run_time_seconds: float = 0.0
    positions: list[PositionSnapshot] = field(default_factory=list)

    @property
    def balance_change(self) -> Decimal:
        return self.ending_balance - self.starting_balance

    @property
    def capital_growth_pct(self) -> float:
        return float(self.ending_balance / self.starting_balance * 100) - 100.0

    @property
    def commission_pct_of_profit(self) -> float:
        """Commission as a share of profit (0 when the run lost money)."""
        if self.balance_change <= 0:
            return 0.0
        return float(self.total_commission / self.balance_change * 100)

    @property
    def broker_closed_pct(self) -> float:
        if self.total_orders == 0:
            return 0.0
        return self.broker_closed_orders / self.total_orders * 100

    @property
    def average_commission(self) -> Decimal:
        if self.total_orders == 0:
            return _ZERO
        return self.total_commission / self.total_orders

    @property
    def ticks_per_second(self) -> float:
        if self.run_time_seconds <= 0:
            return 0.0
        return self.ticks_processed / self.run_time_seconds

    def get_summary(self) -> str:
        """Get human-readable summary of results."""
        return f"""
Simulation Results ({self.strategy_name})
{'='*50}
Balance:
  Starting:   {self.starting_balance:>12.2f}
  Ending:     {self.ending_balance:>12.2f}
  Change:     {self.balance_change:>12.2f}
  Growth:     {self.capital_growth_pct:>11.2f}%

Orders:
  Total: {self.total_orders}
  Closed by broker: {self.broker_closed_orders} ({self.broker_closed_pct:.2f}%)
  Commission: {self.total_commission:.2f} ({self.commission_pct_of_profit:.2f}% of profit)
  Average commission: {self.average_commission:.2f}

Account extremes:
  Realized:   {self.lowest_realized_balance:.2f} .. {self.highest_realized_balance:.2f}
  Unrealized: {self.lowest_unrealized_balance:.2f} .. {self.highest_unrealized_balance:.2f}

Ran {self.ticks_processed:,} ticks in {self.run_time_seconds:.2f}s ({self.ticks_per_second:,.0f}/sec)
"""


def _call_hook(strategy: Strategy, hook: str, view: AccountView) -> None:
    """Call an optional lifecycle hook if the strategy defines it."""
    method = getattr(strategy, hook, None)
    if method is not None:
        method(view)


class Simulation:
    """Runs one strategy against one broker.

    Example:
        simulation = Simulation(strategy=MyStrategy(), broker=broker)
        result = simulation.run()
        print(result.get_summary())
    """

    def __init__(self, strategy: Strategy, broker: Broker):
        self._strategy = strategy
        self._broker = broker
        self._result = None

    def run(self) -> SimulationResult:
        """Run the simulation to completion.

        Calls strategy.before_simulation (if defined), replays the feed through the
        broker (strategy invoked at every day boundary), then
        strategy.after_simulation (if defined).
        """
        strategy = self._strategy
        broker = self._broker
        name = strategy_name(strategy)
        starting_balance = broker.account_balance

        logger.info(f"Running {name} with starting balance {starting_balance}")
        started = time.perf_counter()

        _call_hook(strategy, "before_simulation", broker.view)
        broker.process_simulation_data(strategy)
        _call_hook(strategy, "after_simulation", broker.view)

        run_time = time.perf_counter() - started

        positions = broker.positions()
        self._result = SimulationResult(
            strategy_name=name,
            starting_balance=starting_balance,
            ending_balance=broker.account_balance,
            total_commission=broker.commission_paid,
            total_orders=sum(p.order_count for p in positions),
            broker_closed_orders=sum(p.broker_closed_order_count for p in positions),
            highest_realized_balance=broker.highest_realized_account_balance,
            lowest_realized_balance=broker.lowest_realized_account_balance,
            highest_unrealized_balance=broker.highest_unrealized_account_balance,
            lowest_unrealized_balance=broker.lowest_unrealized_account_balance,
            ticks_processed=broker.ticks_processed,
            run_time_seconds=run_time,
            positions=[p.snapshot() for p in positions],
        )

        logger.info(
            f"Simulation complete: balance {starting_balance} -> {broker.account_balance} "
            f"({self._result.total_orders} orders)"
        )
        return self._result

    @property
    def broker(self) -> Broker:
        return self._broker

    @property
    def result(self):
        """Result of the last run (None before run())."""
        return self._result
