"""
Order models for option trades.

Strategies return Orders; the broker fills them. Fill data (price,
commission, date, order id) is attached exactly once by the broker and never
before, so an unfilled order has no effect on cost basis.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from optioncore.errors import OrderError
from optioncore.pricing import calc_notional
from optioncore.quote import Quote

_ZERO = Decimal("0")


class SideType(StrEnum):
    """Order side type constants."""
    BUY = 'Buy'
    SELL = 'Sell'


class OrderIntent(StrEnum):
    """Whether an order opens a new position or closes an existing one."""
    OPEN = 'open'
    CLOSE = 'close'


@dataclass
class Order:
    """
    Trade request for a single option contract.

    ``limit_price`` is the price the requester reasoned with (for broker
    closes: the bid or ask). The broker fills at the quote midpoint regardless.
    """
    option_name: str
    symbol: str
    side: SideType
    intent: OrderIntent
    quantity: int
    limit_price: Decimal
    expiration_date: date
    broker_closed: bool = False

    # Populated by filled_at()
    order_id: Optional[str] = None
    fill_price: Optional[Decimal] = None
    commission: Decimal = _ZERO
    filled_date: Optional[date] = None

    def __post_init__(self):
        if self.quantity <= 0:
            raise OrderError(f"Order quantity must be positive, got {self.quantity}")
        if self.limit_price < 0:
            raise OrderError(f"Order limit price must be >= 0, got {self.limit_price}")

    @classmethod
    def _from_quote(
        cls,
        quote: Quote,
        side: SideType,
        intent: OrderIntent,
        quantity: int,
        price: Optional[Decimal],
        broker_closed: bool = False,
    ) -> "Order":
        return cls(
            option_name=quote.name,
            symbol=quote.symbol,
            side=side,
            intent=intent,
            quantity=quantity,
            limit_price=quote.midpoint_price if price is None else price,
            expiration_date=quote.expiration_date,
            broker_closed=broker_closed,
        )

    @classmethod
    def buy_to_open(cls, quote: Quote, quantity: int, price: Optional[Decimal] = None) -> "Order":
        return cls._from_quote(quote, SideType.BUY, OrderIntent.OPEN, quantity, price)

    @classmethod
    def sell_to_open(cls, quote: Quote, quantity: int, price: Optional[Decimal] = None) -> "Order":
        return cls._from_quote(quote, SideType.SELL, OrderIntent.OPEN, quantity, price)

    @classmethod
    def buy_to_close(
        cls, quote: Quote, quantity: int, price: Optional[Decimal] = None, broker_closed: bool = False
    ) -> "Order":
        return cls._from_quote(quote, SideType.BUY, OrderIntent.CLOSE, quantity, price, broker_closed)

    @classmethod
    def sell_to_close(
        cls, quote: Quote, quantity: int, price: Optional[Decimal] = None, broker_closed: bool = False
    ) -> "Order":
        return cls._from_quote(quote, SideType.SELL, OrderIntent.CLOSE, quantity, price, broker_closed)

    @property
    def is_buy(self) -> bool:
        return self.side == SideType.BUY

    @property
    def is_sell(self) -> bool:
        return self.side == SideType.SELL

    @property
    def is_opening(self) -> bool:
        return self.intent == OrderIntent.OPEN

    @property
    def is_closing(self) -> bool:
        return self.intent == OrderIntent.CLOSE

    @property
    def is_filled(self) -> bool:
        return self.fill_price is not None

    @property
    def signed_quantity(self) -> int:
        """Quantity change applied to a position (+ for buys, - for sells)."""
        return self.quantity if self.is_buy else -self.quantity

    def filled_at(
        self,
        fill_price: Decimal,
        commission: Decimal,
        filled_date: date,
        order_id: str,
    ) -> None:
        """Attach fill data. An order can only be filled once.

        Raises:
            OrderError: If already filled or amounts are negative.
        """
        if self.is_filled:
            raise OrderError(f"Order {self.order_id} ({self.option_name}) already filled")
        if fill_price < 0 or commission < 0:
            raise OrderError(
                f"Invalid fill for {self.option_name}: price={fill_price}, commission={commission}"
            )

        self.fill_price = fill_price
        self.commission = commission
        self.filled_date = filled_date
        self.order_id = order_id

    def margin_requirement(self, price: Decimal) -> Decimal:
        """Cash needed to pay for this order at ``price``."""
        return calc_notional(price, self.quantity)

    def canonical_cost_basis(self) -> Decimal:
        """Signed cash flow of this fill, excluding commission.

        Buys (opening longs or covering shorts) are negative, sells (opening
        shorts or closing longs) are positive, so summing over a position's
        orders yields realized profit before commission. Unfilled orders
        contribute nothing.
        """
        if self.fill_price is None:
            return _ZERO

        notional = calc_notional(self.fill_price, self.quantity)
        return -notional if self.is_buy else notional

    def summary(self) -> str:
        """One-line description, e.g. ``Buy to open 2 AAPL130104C00540000 @ 10.45``."""
        price = self.fill_price if self.is_filled else self.limit_price
        return f"{self.side} to {self.intent} {self.quantity} {self.option_name} @ {price}"
