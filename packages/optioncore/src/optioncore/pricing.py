"""Pure pricing functions.

Single source of truth for per-contract money math used across the project.
All functions are pure (no side effects, no state) and use Decimal so that
balances stay exact over thousands of fills.
"""

from datetime import date
from decimal import Decimal
from typing import Union

_ZERO = Decimal("0")
_TWO = Decimal("2")
_STRIKE_SCALE = Decimal("1000")

# Equity options: one contract controls 100 shares of the underlying
CONTRACT_MULTIPLIER = Decimal("100")

MoneyLike = Union[Decimal, str, int, float]


def to_money(value: MoneyLike) -> Decimal:
    """Convert a str/int/float/Decimal into a Decimal amount.

    Floats go through ``str`` first so ``1.1`` becomes ``Decimal("1.1")``
    rather than its binary expansion.

    Raises:
        ValueError: If value is not numeric.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty monetary amount")
        try:
            return Decimal(text)
        except ArithmeticError as e:
            raise ValueError(f"Not a monetary amount: {value!r}") from e
    raise ValueError(f"Not a monetary amount: {value!r}")


def calc_midpoint(bid: Decimal, ask: Decimal) -> Decimal:
    """Midpoint of a bid/ask pair."""
    return (bid + ask) / _TWO


def calc_intrinsic_value(
    is_call: bool, strike: Decimal, underlying_price: Decimal
) -> Decimal:
    """Calculate per-share intrinsic value of an option.

    Call: max(0, underlying - strike)
    Put:  max(0, strike - underlying)
    """
    if is_call:
        value = underlying_price - strike
    else:
        value = strike - underlying_price
    return max(_ZERO, value)


def calc_notional(price: Decimal, quantity: int) -> Decimal:
    """Cash value of ``quantity`` contracts at a per-share ``price``."""
    return price * quantity * CONTRACT_MULTIPLIER


def format_option_name(
    symbol: str, expiration_date: date, is_call: bool, strike: Decimal
) -> str:
    """Build the canonical option identifier.

    Format: SYMBOL + YYMMDD + C|P + strike * 1000 padded to 8 digits,
    e.g. ``CSCO171117C00019000`` for the CSCO 2017-11-17 19.00 call.
    """
    strike_code = int((strike * _STRIKE_SCALE).to_integral_value())
    right = "C" if is_call else "P"
    return f"{symbol}{expiration_date:%y%m%d}{right}{strike_code:08d}"
