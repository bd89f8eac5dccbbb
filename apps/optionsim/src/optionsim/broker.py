"""Simulated options broker - the engine that drives a backtest.

Owns the account (balance, positions, commission), the current-day quote
table and the simulated clock. Pulls ticks from the data feed, hands a
read-only view to the strategy at every day boundary, force-closes expiring
positions and fills orders at the quote midpoint.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterator, Optional

from optioncore import (
    CommissionSchedule,
    ConfigurationError,
    DataFeed,
    DataInconsistencyError,
    ForcedCloseError,
    MissingQuoteError,
    OptionRight,
    Order,
    OrderError,
    Position,
    PositionSnapshot,
    Quote,
    Strategy,
    Tick,
    strategy_name,
)

from optionsim.config import WindDownMode


logger = logging.getLogger(__name__)


class BrokerView:
    """Read-only window onto a Broker handed to strategies.

    Exposes quotes (immutable) and position snapshots, never the live
    Position objects, so the only way to change account state is to return
    orders.
    """

    def __init__(self, broker: "Broker"):
        self._broker = broker

    @property
    def current_date(self) -> Optional[date]:
        return self._broker.current_date

    @property
    def account_balance(self) -> Decimal:
        return self._broker.account_balance

    @property
    def ticks_processed(self) -> int:
        return self._broker.ticks_processed

    @property
    def commission_paid(self) -> Decimal:
        return self._broker.commission_paid

    @property
    def total_order_count(self) -> int:
        return self._broker.total_order_count

    def quote_for(self, option_name: str) -> Optional[Quote]:
        return self._broker.quote_for(option_name)

    def quotes_for(self, symbol: str, right: Optional[OptionRight] = None) -> list[Quote]:
        return self._broker.quotes_for(symbol, right)

    def call_quotes_for(self, symbol: str) -> list[Quote]:
        return self._broker.call_quotes_for(symbol)

    def put_quotes_for(self, symbol: str) -> list[Quote]:
        return self._broker.put_quotes_for(symbol)

    def positions(self) -> list[PositionSnapshot]:
        return [p.snapshot() for p in self._broker.positions()]

    def open_positions(self) -> list[PositionSnapshot]:
        return [p.snapshot() for p in self._broker.open_positions()]

    def underlying_price_for(self, symbol: str) -> Optional[Decimal]:
        return self._broker.underlying_price_for(symbol)


class Broker:
    """Single-threaded accounting engine for option backtests.

    process_order() is the only code path that changes the balance.

    Example:
        broker = Broker(
            initial_balance=Decimal("10000"),
            commission_schedule=PerContractCommission(Decimal("0.65")),
            data_feed=DiscountOptionDataFeed("aapl_2013.csv"),
        )
        broker.process_simulation_data(MyStrategy())
        print(broker.account_balance)
    """

    def __init__(
        self,
        initial_balance: Decimal,
        commission_schedule: CommissionSchedule,
        data_feed: DataFeed,
        wind_down_mode: WindDownMode = WindDownMode.CLOSE_ALL,
        progress_interval: int = 100000,
    ):
        """Initialize broker.

        Args:
            initial_balance: Starting cash, must be > 0.
            commission_schedule: Fee function applied to every fill.
            data_feed: Tick source, consumed once.
            wind_down_mode: What to do with open positions when the feed ends.
            progress_interval: Log progress every N ticks.

        Raises:
            ConfigurationError: If initial_balance <= 0.
        """
        if initial_balance <= 0:
            raise ConfigurationError(f"balance must be > 0 (got {initial_balance})")
        if progress_interval <= 0:
            raise ConfigurationError(f"progress_interval must be > 0 (got {progress_interval})")

        self._initial_balance = initial_balance
        self._balance = initial_balance
        self._commission_schedule = commission_schedule
        self._data_feed = data_feed
        self._wind_down_mode = wind_down_mode
        self._progress_interval = progress_interval

        # Current position per identifier, plus positions that were closed
        # and later re-opened under the same identifier
        self._positions: dict[str, Position] = {}
        self._closed_positions: list[Position] = []

        # Current-day quote table; reset at every day boundary
        self._quotes: dict[str, Quote] = {}
        self._quote_table_capacity = 0

        # Last quote seen for every traded contract (survives day resets)
        self._last_quotes: dict[str, Quote] = {}

        self._underlying_prices: dict[str, Decimal] = {}
        self._current_date: Optional[date] = None
        self._ticks_processed = 0
        self._commission_paid = Decimal("0")
        self._order_counter = 0
        self._consumed = False

        self._highest_realized_balance = initial_balance
        self._lowest_realized_balance = initial_balance
        self._highest_unrealized_balance = initial_balance
        self._lowest_unrealized_balance = initial_balance

        self.view = BrokerView(self)

    # ----- simulation loop ---------------------------------------------------

    def process_simulation_data(self, strategy: Strategy) -> None:
        """Replay the whole data feed, invoking strategy at day boundaries.

        Blocks until the feed is exhausted, then runs terminal liquidation.

        Raises:
            DataInconsistencyError: On bad data (crossed quote, missing quote,
                                    ticks out of date order).
            ForcedCloseError: If a broker-initiated close cannot be filled.
        """
        if self._consumed:
            raise RuntimeError("Broker has already consumed its data feed")
        self._consumed = True

        ticks: Iterator[Tick] = iter(self._data_feed)

        # Seed the clock with the first tick; no day boundary fires for it
        first_tick = next(ticks, None)
        if first_tick is None:
            logger.warning("Data feed is empty, nothing to simulate")
            return

        self._current_date = first_tick.data_date
        self._underlying_prices[first_tick.symbol] = first_tick.underlying_price
        self._upsert_quote(first_tick)
        self._ticks_processed += 1
        logger.info(f"Simulation started on {self._current_date} with balance {self._balance}")

        for tick in ticks:
            self._process_tick(tick, strategy)

        logger.info(f"Data feed exhausted: {self._ticks_processed} ticks processed")

        self._record_unrealized_balance()
        self._wind_down()

    def _process_tick(self, tick: Tick, strategy: Strategy) -> None:
        """Process one tick.

        Order of operations on a day change:
        1. Strategy runs against the previous day's state and quotes
        2. Clock advances to the tick's date
        3. Expiring positions close against the still-resident quotes
        4. Quote table resets
        """
        if tick.data_date < self._current_date:
            raise DataInconsistencyError(
                f"Tick for {tick.option_name} dated {tick.data_date} arrived after {self._current_date}"
            )

        day_changed = tick.data_date != self._current_date

        # ----- trading day logic ---------------------------------------------

        if day_changed:
            self._run_strategy(strategy)

        # ----- after hours cleanup -------------------------------------------

        self._underlying_prices[tick.symbol] = tick.underlying_price
        self._current_date = tick.data_date

        if day_changed:
            self._close_expired_positions()
            self._reset_quotes()

        # ----- next day ------------------------------------------------------

        self._upsert_quote(tick)
        self._ticks_processed += 1

        if self._ticks_processed % self._progress_interval == 0:
            logger.info(f"Processed {self._ticks_processed} ticks (now at {self._current_date})...")

    def _run_strategy(self, strategy: Strategy) -> None:
        """Invoke the strategy once for the day that just ended."""
        self._record_unrealized_balance()

        name = strategy_name(strategy)
        logger.debug(f"Day boundary after {self._current_date}: running {name}")
        orders = strategy.run_logic(self.view) or []

        for order in orders:
            if not self.process_order(order):
                logger.warning(
                    f"{name}: order not filled on {self._current_date}: {order.summary()}"
                )

    def _upsert_quote(self, tick: Tick) -> None:
        quote = tick.quote()
        self._quotes[quote.name] = quote
        if quote.name in self._positions:
            self._last_quotes[quote.name] = quote

    def _reset_quotes(self) -> None:
        """Start a new day's quote table, remembering the largest day seen."""
        self._quote_table_capacity = max(self._quote_table_capacity, len(self._quotes))
        self._quotes = {}

    # ----- forced closes -----------------------------------------------------

    def _close_expired_positions(self) -> None:
        """Force close every open position expiring on or before today.

        Uses the previous day's quotes, which are still resident because the
        table is reset only after this sweep.
        """
        expired = [
            p for p in self._positions.values()
            if p.is_open() and p.is_expired(self._current_date)
        ]

        for position in expired:
            self._force_close_position(position, reason="expiration")

    def _wind_down(self) -> None:
        """Handle end-of-simulation open positions.

        Depending on wind_down_mode:
        - WindDownMode.CLOSE_ALL: close at each position's last known quote
        - WindDownMode.LEAVE_OPEN: leave open, logging every one of them
        """
        open_positions = self.open_positions()
        if not open_positions:
            return

        if self._wind_down_mode == WindDownMode.CLOSE_ALL:
            logger.info(f"Wind down: closing {len(open_positions)} open positions")
            for position in open_positions:
                self._force_close_position(position, reason="end of data")
        else:
            for position in open_positions:
                logger.warning(
                    f"Wind down: leaving {position.name} open "
                    f"(quantity={position.quantity}, expires {position.expiration_date})"
                )

    def _force_close_position(self, position: Position, reason: str) -> None:
        """Close a position at bid (long) or ask (short), filled at midpoint.

        Raises:
            ForcedCloseError: If no quote is known or the close is rejected.
        """
        name = position.name
        quote = self._quotes.get(name)
        if quote is None:
            quote = self._last_quotes.get(name)
        if quote is None:
            raise ForcedCloseError(f"No quote known for {name} on {self._current_date}")

        quantity = abs(position.quantity)
        if position.is_long():
            order = Order.sell_to_close(quote, quantity, price=quote.bid, broker_closed=True)
        else:
            order = Order.buy_to_close(quote, quantity, price=quote.ask, broker_closed=True)

        logger.info(
            f"Closing {name} due to {reason}: {order.side} {quantity} contracts "
            f"(quoted {order.limit_price}, fill at midpoint {quote.midpoint_price})"
        )

        if not self.process_order(order, quote=quote):
            raise ForcedCloseError(
                f"Failed to close {name} on {self._current_date}: "
                f"quantity={position.quantity}, balance={self._balance}"
            )

    # ----- order processing --------------------------------------------------

    def process_order(self, order: Order, quote: Optional[Quote] = None) -> bool:
        """Fill an order at the quote midpoint.

        Args:
            order: Unfilled order.
            quote: Quote to fill against. Defaults to the current-day quote
                   for the order's contract.

        Returns:
            True if filled, False if rejected (insufficient cash or the order
            conflicts with the open position). Rejection mutates nothing.

        Raises:
            MissingQuoteError: If no quote is resident for the contract.
            OrderError: If the order was already filled.
        """
        if order.is_filled:
            raise OrderError(f"Order {order.order_id} for {order.option_name} already filled")

        if quote is None:
            quote = self._quotes.get(order.option_name)
            if quote is None:
                raise MissingQuoteError(
                    f"No quote for {order.option_name} on {self._current_date} "
                    f"(order: {order.summary()})"
                )

        logger.debug(f"Order received: {order.summary()}")

        position = self._positions.get(order.option_name)
        if position is not None and order.is_opening and not position.is_open():
            # Re-opening a closed contract starts a fresh position
            position = None

        if position is not None:
            reason = position.check_order(order)
        elif order.is_closing:
            reason = f"no open position in {order.option_name} to close"
        else:
            reason = None

        if reason is not None:
            logger.warning(f"Order rejected: {reason}")
            return False

        commission = self._commission_schedule.commission_for(order)
        fill_price = quote.midpoint_price
        required_margin = order.margin_requirement(fill_price)

        # Closing orders are never margin-gated
        if order.is_buy and order.is_opening and required_margin + commission > self._balance:
            logger.warning(
                f"Not enough money for {order.option_name} "
                f"(need {required_margin} + {commission} commission, have {self._balance})"
            )
            return False

        # ----- fill the order ------------------------------------------------

        order.filled_at(
            fill_price=fill_price,
            commission=commission,
            filled_date=self._current_date,
            order_id=f"ord_{self._order_counter + 1:08d}",
        )
        self._order_counter += 1

        if position is None:
            previous = self._positions.get(order.option_name)
            if previous is not None:
                self._closed_positions.append(previous)
            position = Position.for_order(quote, order)
            self._positions[order.option_name] = position

        position.apply_order(order)
        self._last_quotes[order.option_name] = quote

        original_balance = self._balance
        self._balance += order.canonical_cost_basis()
        self._balance -= commission
        self._commission_paid += commission
        self._record_realized_balance()

        logger.info(
            f"ORDER FILLED {order.order_id}: {order.summary()}. Commission: {commission} - "
            f"Old balance: {original_balance} - New balance: {self._balance}"
        )

        return True

    # ----- balance extremes --------------------------------------------------

    def _record_realized_balance(self) -> None:
        if self._balance > self._highest_realized_balance:
            self._highest_realized_balance = self._balance
        if self._balance < self._lowest_realized_balance:
            self._lowest_realized_balance = self._balance

    def _record_unrealized_balance(self) -> None:
        """Sample balance plus mark-to-market of open positions."""
        equity = self._balance
        for position in self.open_positions():
            quote = self._quotes.get(position.name)
            if quote is None:
                quote = self._last_quotes.get(position.name)
            if quote is not None:
                equity += position.market_value(quote)

        if equity > self._highest_unrealized_balance:
            self._highest_unrealized_balance = equity
        if equity < self._lowest_unrealized_balance:
            self._lowest_unrealized_balance = equity

    # ----- read accessors ----------------------------------------------------

    @property
    def initial_balance(self) -> Decimal:
        return self._initial_balance

    @property
    def account_balance(self) -> Decimal:
        return self._balance

    @property
    def current_date(self) -> Optional[date]:
        return self._current_date

    @property
    def ticks_processed(self) -> int:
        return self._ticks_processed

    @property
    def commission_paid(self) -> Decimal:
        return self._commission_paid

    @property
    def total_order_count(self) -> int:
        return self._order_counter

    @property
    def quote_table_capacity(self) -> int:
        """Largest number of quotes held on any completed day."""
        return self._quote_table_capacity

    @property
    def highest_realized_account_balance(self) -> Decimal:
        return self._highest_realized_balance

    @property
    def lowest_realized_account_balance(self) -> Decimal:
        return self._lowest_realized_balance

    @property
    def highest_unrealized_account_balance(self) -> Decimal:
        return self._highest_unrealized_balance

    @property
    def lowest_unrealized_account_balance(self) -> Decimal:
        return self._lowest_unrealized_balance

    def quote_for(self, option_name: str) -> Optional[Quote]:
        return self._quotes.get(option_name)

    def quotes_for(self, symbol: str, right: Optional[OptionRight] = None) -> list[Quote]:
        """Today's quotes for a root symbol, sorted by identifier."""
        quotes = [
            q for q in self._quotes.values()
            if q.symbol == symbol and (right is None or q.right == right)
        ]
        quotes.sort(key=lambda q: q.name)
        return quotes

    def call_quotes_for(self, symbol: str) -> list[Quote]:
        return self.quotes_for(symbol, OptionRight.CALL)

    def put_quotes_for(self, symbol: str) -> list[Quote]:
        return self.quotes_for(symbol, OptionRight.PUT)

    def positions(self) -> list[Position]:
        """Every position ever opened, closed history first."""
        return self._closed_positions + list(self._positions.values())

    def open_positions(self) -> list[Position]:
        return [p for p in self._positions.values() if p.is_open()]

    def underlying_price_for(self, symbol: str) -> Optional[Decimal]:
        return self._underlying_prices.get(symbol)
