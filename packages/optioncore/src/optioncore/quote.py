"""
Per-contract market snapshot for the current simulated day.

A Quote is derived from a Tick, keyed by the canonical option identifier and
replaced whenever a newer tick for the same contract arrives on the same day.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from optioncore.errors import QuoteError
from optioncore.pricing import calc_intrinsic_value, calc_midpoint
from optioncore.tick import OptionRight, Tick


@dataclass(frozen=True)
class Quote:
    """
    Immutable quote snapshot.

    Invariant: 0 <= bid <= ask. Violations raise QuoteError at construction since
    replaying crossed markets would silently produce wrong P&L.
    """
    name: str
    symbol: str
    right: OptionRight
    strike_price: Decimal
    expiration_date: date
    bid: Decimal
    ask: Decimal
    last_price: Decimal
    underlying_price: Decimal
    quote_date: date
    volume: int = 0
    open_interest: int = 0
    implied_volatility: float = 0.0
    delta: float = 0.0
    gamma: float = 0.0
    vega: float = 0.0

    def __post_init__(self):
        if self.bid < 0:
            raise QuoteError(f"{self.name} on {self.quote_date}: negative bid {self.bid}")
        if self.bid > self.ask:
            raise QuoteError(
                f"{self.name} on {self.quote_date}: bid {self.bid} > ask {self.ask}"
            )

    @classmethod
    def from_tick(cls, tick: Tick) -> "Quote":
        return cls(
            name=tick.option_name,
            symbol=tick.symbol,
            right=tick.right,
            strike_price=tick.strike_price,
            expiration_date=tick.expiration_date,
            bid=tick.bid,
            ask=tick.ask,
            last_price=tick.last_price,
            underlying_price=tick.underlying_price,
            quote_date=tick.data_date,
            volume=tick.volume,
            open_interest=tick.open_interest,
            implied_volatility=tick.implied_volatility,
            delta=tick.delta,
            gamma=tick.gamma,
            vega=tick.vega,
        )

    @property
    def is_call(self) -> bool:
        return self.right == OptionRight.CALL

    @property
    def is_put(self) -> bool:
        return self.right == OptionRight.PUT

    @property
    def midpoint_price(self) -> Decimal:
        return calc_midpoint(self.bid, self.ask)

    @property
    def spread(self) -> Decimal:
        return self.ask - self.bid

    @property
    def intrinsic_value(self) -> Decimal:
        """Per-share value if exercised against the last underlying price."""
        return calc_intrinsic_value(self.is_call, self.strike_price, self.underlying_price)

    @property
    def extrinsic_value(self) -> Decimal:
        """Time value: midpoint minus intrinsic value."""
        return self.midpoint_price - self.intrinsic_value

    def days_to_expiration(self, current_date: date) -> int:
        """Calendar days from current_date to expiration (negative once past)."""
        return (self.expiration_date - current_date).days

    def is_expired(self, current_date: date) -> bool:
        return self.expiration_date <= current_date
