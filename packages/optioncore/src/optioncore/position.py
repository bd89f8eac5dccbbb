"""
Per-contract position built from filled orders.

A Position is created on the first fill for an option identifier and mutated
by every subsequent fill against it. It is never deleted: once the net
quantity returns to zero it stays in the broker's history as a closed
position.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from optioncore.errors import PositionError
from optioncore.order import Order
from optioncore.pricing import calc_notional
from optioncore.quote import Quote

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class DirectionType(StrEnum):
    """Position direction type constants."""
    LONG = 'long'
    SHORT = 'short'


@dataclass(frozen=True)
class PositionSnapshot:
    """Immutable copy of a position handed to strategies."""
    option_name: str
    symbol: str
    direction: DirectionType
    quantity: int
    expiration_date: date
    commission_paid: Decimal
    realized_profit: Decimal
    cost_basis: Decimal
    order_count: int
    is_open: bool

    @property
    def is_long(self) -> bool:
        return self.quantity > 0

    @property
    def is_short(self) -> bool:
        return self.quantity < 0

    def days_to_expiration(self, current_date: date) -> int:
        return (self.expiration_date - current_date).days


class Position:
    """
    Running aggregate of all fills for one option identifier.

    Invariant: is_open() <=> quantity != 0.
    """

    def __init__(self, quote: Quote, direction: DirectionType):
        """
        Initialize an empty position.

        Args:
            quote: Quote the opening order was filled against (provides
                   identifier, root symbol and expiration date)
            direction: LONG for a buy-to-open, SHORT for a sell-to-open
        """
        self.option_name = quote.name
        self.symbol = quote.symbol
        self.expiration_date = quote.expiration_date
        self.direction = direction
        self.quantity = 0
        self.commission_paid = _ZERO
        self.cost_basis = _ZERO
        self.orders: list[Order] = []
        self._was_opened = False

    @classmethod
    def for_order(cls, quote: Quote, order: Order) -> "Position":
        """Create the position an opening order will start."""
        direction = DirectionType.LONG if order.is_buy else DirectionType.SHORT
        return cls(quote, direction)

    def check_order(self, order: Order) -> Optional[str]:
        """Return why ``order`` cannot be applied, or None if it can.

        Does not mutate the position.
        """
        if order.option_name != self.option_name:
            return f"order for {order.option_name} applied to position {self.option_name}"

        if order.is_opening:
            if self._was_opened and not self.is_open():
                return f"position {self.option_name} is closed"
            opens_long = order.is_buy
            if self.direction == DirectionType.LONG and not opens_long:
                return f"cannot sell to open against long position {self.option_name}"
            if self.direction == DirectionType.SHORT and opens_long:
                return f"cannot buy to open against short position {self.option_name}"
            return None

        # Closing orders must reduce an open position without crossing zero
        if not self.is_open():
            return f"no open position in {self.option_name} to close"
        if order.is_buy != self.is_short():
            return (
                f"{order.side} to close does not reduce "
                f"{self.direction} position {self.option_name}"
            )
        if order.quantity > abs(self.quantity):
            return (
                f"close quantity {order.quantity} exceeds open quantity "
                f"{abs(self.quantity)} in {self.option_name}"
            )
        return None

    def apply_order(self, order: Order) -> None:
        """Apply a filled order to this position.

        Raises:
            PositionError: If the order is unfilled or inconsistent with the
                           position (see check_order).
        """
        if not order.is_filled:
            raise PositionError(f"Cannot apply unfilled order for {order.option_name}")

        reason = self.check_order(order)
        if reason is not None:
            raise PositionError(reason)

        self.orders.append(order)
        self.quantity += order.signed_quantity
        self.commission_paid += order.commission
        self.cost_basis += order.canonical_cost_basis()
        self._was_opened = True

        if not self.is_open():
            logger.debug(f"Position {self.option_name} closed: realized {self.realized_profit}")

    def is_open(self) -> bool:
        return self.quantity != 0

    def is_long(self) -> bool:
        return self.quantity > 0

    def is_short(self) -> bool:
        return self.quantity < 0

    def is_expired(self, current_date: date) -> bool:
        return self.expiration_date <= current_date

    @property
    def name(self) -> str:
        return self.option_name

    @property
    def realized_profit(self) -> Decimal:
        """Sum of every fill's cash flow minus commission paid.

        Only final once the position is closed; while open it is the net
        cash spent (negative for longs) or received (positive for shorts).
        """
        return self.cost_basis - self.commission_paid

    @property
    def order_count(self) -> int:
        return len(self.orders)

    @property
    def broker_closed_order_count(self) -> int:
        return sum(1 for o in self.orders if o.broker_closed)

    def market_value(self, quote: Quote) -> Decimal:
        """Signed mark-to-market value at the quote midpoint.

        Long positions are worth +value, shorts are a liability (-value).
        """
        if not self.is_open():
            return _ZERO
        value = calc_notional(quote.midpoint_price, abs(self.quantity))
        return value if self.is_long() else -value

    def snapshot(self) -> PositionSnapshot:
        return PositionSnapshot(
            option_name=self.option_name,
            symbol=self.symbol,
            direction=self.direction,
            quantity=self.quantity,
            expiration_date=self.expiration_date,
            commission_paid=self.commission_paid,
            realized_profit=self.realized_profit,
            cost_basis=self.cost_basis,
            order_count=self.order_count,
            is_open=self.is_open(),
        )
