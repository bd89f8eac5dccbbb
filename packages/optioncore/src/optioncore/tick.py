"""
Normalized market observation for a single option contract.

Ticks are produced by a data feed and consumed exactly once by the broker.
They are immutable (frozen dataclasses) so replay is deterministic.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

from optioncore.pricing import format_option_name

if TYPE_CHECKING:
    from optioncore.quote import Quote


class OptionRight(StrEnum):
    """Option right constants."""
    CALL = 'call'
    PUT = 'put'


@dataclass(frozen=True)
class Tick:
    """
    One end-of-day observation for an option contract.

    Monetary fields are Decimal; greeks are plain floats since they are
    informational and never enter the account balance.
    """
    symbol: str
    expiration_date: date
    right: OptionRight
    strike_price: Decimal
    bid: Decimal
    ask: Decimal
    last_price: Decimal
    underlying_price: Decimal
    data_date: date
    volume: int = 0
    open_interest: int = 0
    implied_volatility: float = 0.0
    delta: float = 0.0
    gamma: float = 0.0
    vega: float = 0.0
    rho: Optional[float] = None

    @property
    def is_call(self) -> bool:
        return self.right == OptionRight.CALL

    @property
    def option_name(self) -> str:
        """Canonical identifier, e.g. ``CSCO171117C00019000``."""
        return format_option_name(
            self.symbol, self.expiration_date, self.is_call, self.strike_price
        )

    def quote(self) -> "Quote":
        """Derive the quote snapshot for this tick.

        Raises:
            QuoteError: If bid > ask.
        """
        from optioncore.quote import Quote

        return Quote.from_tick(self)
